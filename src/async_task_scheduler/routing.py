"""Queue routing — which queue a task or event lands in."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("async_task_scheduler.routing")

T = TypeVar("T")

DEFAULT_QUEUE = ""


class QueueNameRegistry:
    """Maps task, event, handler and listener classes to a preferred queue.

    Populate it at startup, either explicitly or with the decorator::

        queues = QueueNameRegistry()
        queues.register(RevenueSummarizer, "reports")

        @queues.route("mail")
        class SendWelcomeMail(AsyncTask):
            ...

    Classes without an entry have no queue preference.
    """

    def __init__(self) -> None:
        self._names: dict[type[Any], str] = {}

    def register(self, cls: type[Any], queue_name: str) -> None:
        """Route *cls* to *queue_name*."""
        self._names[cls] = queue_name
        logger.debug("Registered queue route: %s -> %s", cls.__name__, queue_name)

    def route(self, queue_name: str) -> Callable[[T], T]:
        """Class decorator form of :meth:`register`."""

        def decorator(cls: T) -> T:
            self.register(cls, queue_name)  # type: ignore[arg-type]
            return cls

        return decorator

    def lookup(self, cls: type[Any]) -> str | None:
        """Return the queue name declared for *cls*, if any."""
        return self._names.get(cls)

    def clear(self) -> None:
        """Remove all routes (testing utility)."""
        self._names.clear()


class QueueRouter:
    """Resolves the destination queue for an ordered list of candidate classes.

    Candidates are ``[task_type]`` for tasks and
    ``[event_type, handler_type, listener_type]`` for events; ``None``
    entries are skipped. For every candidate:

    * its own queue name, when non-empty, is its resolution;
    * otherwise the first candidate's queue name is checked again and, when
      non-empty, is used instead;
    * otherwise the candidate resolves to no name.

    Every candidate overwrites the result, so the last candidate decides. A
    later candidate without routing of its own therefore inherits the first
    candidate's queue and can override an earlier candidate's explicit queue,
    and when the first candidate has no queue either it clears the earlier
    name. If nothing resolves, the backend default queue (``""``) is used.
    """

    def __init__(self, lookup: Callable[[type[Any]], str | None]) -> None:
        self._lookup = lookup

    def resolve(self, *candidates: type[Any] | None) -> str:
        resolved: str | None = None

        for candidate in candidates:
            if candidate is None:
                continue
            name = self._lookup(candidate)
            if not name and candidates[0] is not None:
                name = self._lookup(candidates[0])
            resolved = name or None

        return resolved or DEFAULT_QUEUE
