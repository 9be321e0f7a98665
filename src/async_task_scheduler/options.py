"""TaskOptions — description of one task or event to be dispatched."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from .primitives.exceptions import SchedulerStateError
from .utils import type_id


class TaskOptions:
    """Pending work item plus its delivery options.

    A descriptor is either a *task* (created with :func:`task`) or an *event*
    (created with :func:`event`); ``is_event`` tells them apart. Options are
    set fluently::

        scheduler.add(
            task(RevenueSummarizer)
            .named("revenues-2011-10-10 12:30:00")
            .param("revenueDate", "2011-10-10 12:30:00")
            .delay(timedelta(minutes=1))
        )

    Delay and execution time are kept in milliseconds, ``0`` meaning unset.
    If both are set the delay wins.
    """

    def __init__(
        self,
        *,
        task_type: type[Any] | None = None,
        event: Any = None,
        listener: type[Any] | None = None,
        handler: type[Any] | None = None,
    ) -> None:
        if (task_type is None) == (event is None):
            raise ValueError("TaskOptions needs exactly one of task_type or event")
        self._task_type = task_type
        self._event = event
        self._listener = listener
        self._handler = handler
        self._params: dict[str, str] = {}
        self._task_name: str | None = None
        self._delay_millis = 0
        self._execution_date_millis = 0
        self._transactionless = False
        self._submitted = False

    # ── Fluent options ───────────────────────────────────────────────

    def param(self, key: str, value: Any) -> TaskOptions:
        """Set parameter *key*; values are stored as strings, last write wins."""
        if self._submitted:
            raise SchedulerStateError(
                f"Cannot change parameter {key!r} of an already submitted task"
            )
        self._params[key] = str(value)
        return self

    def params(self, values: dict[str, Any]) -> TaskOptions:
        for key, value in values.items():
            self.param(key, value)
        return self

    def named(self, task_name: str) -> TaskOptions:
        """Name the task; the backend rejects a second task with the same name."""
        self._task_name = task_name
        return self

    def delay(self, delay: int | timedelta) -> TaskOptions:
        """Run after *delay* (milliseconds or ``timedelta``)."""
        if isinstance(delay, timedelta):
            delay = int(delay.total_seconds() * 1000)
        self._delay_millis = delay
        return self

    def execute_at(self, when: int | datetime) -> TaskOptions:
        """Run at *when* (epoch milliseconds or timezone-aware ``datetime``)."""
        if isinstance(when, datetime):
            if when.tzinfo is None:
                raise ValueError("execute_at requires a timezone-aware datetime")
            when = int(when.timestamp() * 1000)
        self._execution_date_millis = when
        return self

    def transactionless(self, flag: bool = True) -> TaskOptions:
        """Enqueue outside the backend transaction."""
        self._transactionless = flag
        return self

    # ── Accessors ────────────────────────────────────────────────────

    @property
    def is_event(self) -> bool:
        return self._event is not None

    @property
    def task_type(self) -> type[Any] | None:
        return self._task_type

    @property
    def event(self) -> Any:
        return self._event

    @property
    def listener(self) -> type[Any] | None:
        return self._listener

    @property
    def handler(self) -> type[Any] | None:
        return self._handler

    @property
    def task_name(self) -> str | None:
        return self._task_name

    @property
    def delay_millis(self) -> int:
        return self._delay_millis

    @property
    def execution_date_millis(self) -> int:
        return self._execution_date_millis

    @property
    def is_transactionless(self) -> bool:
        return self._transactionless

    def get_params(self) -> dict[str, str]:
        """Return a copy of the parameters."""
        return dict(self._params)

    def task_type_id(self) -> str:
        if self._task_type is None:
            raise ValueError("Event options carry no task type")
        return type_id(self._task_type)

    def mark_submitted(self) -> None:
        """Freeze the parameters; called by the scheduler after submission."""
        self._submitted = True

    def __repr__(self) -> str:
        kind = "event" if self.is_event else "task"
        target = type(self._event) if self.is_event else self._task_type
        return (
            f"TaskOptions({kind}={getattr(target, '__name__', target)!r}, "
            f"name={self._task_name!r}, params={self._params!r})"
        )


def task(task_type: type[Any]) -> TaskOptions:
    """Describe a deferred task of *task_type*."""
    return TaskOptions(task_type=task_type)


def event(
    value: Any,
    listener: type[Any] | None = None,
    handler: type[Any] | None = None,
) -> TaskOptions:
    """Describe an event dispatch.

    *handler* defaults to the event class's ``associated_handler``.
    """
    if handler is None:
        handler = getattr(type(value), "associated_handler", None)
    return TaskOptions(event=value, listener=listener, handler=handler)
