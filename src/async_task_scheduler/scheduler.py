"""TaskScheduler — accumulates work items and enqueues them on commit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .correlation import get_correlation_id
from .dispatch import DispatchBuilder, DispatchConfig
from .instrumentation import get_hook_registry
from .primitives.exceptions import (
    DuplicateTaskNameError,
    SchedulerStateError,
    TransientBackendError,
)
from .routing import QueueNameRegistry, QueueRouter

if TYPE_CHECKING:
    from .options import TaskOptions
    from .ports.event_transport import IEventTransport
    from .ports.param_binder import ICommonParamBinder
    from .ports.queue_backend import DispatchRequest, IQueueBackend

logger = logging.getLogger("async_task_scheduler.scheduler")


class TaskScheduler:
    """
    Collects tasks and events, then hands them to a queue backend.

    Usage::

        scheduler = TaskScheduler(backend, transport, binder, router=router)
        await scheduler.add(
            task(SendInvoice).param("invoice_id", "42"),
            event(OrderPlaced(order_id="42"), listener=Billing),
        ).commit()

    On :meth:`commit` every descriptor, in insertion order, receives the
    common parameters, is turned into a ``DispatchRequest``, routed to a
    queue and enqueued. A scheduler commits once; a second commit raises
    ``SchedulerStateError``.

    Named tasks give fan-in: when several producers add a task under the same
    name, the backend keeps the first and the others see
    ``DuplicateTaskNameError``, which the scheduler treats as success::

        await scheduler.add(
            task(RevenueSummarizer)
            .named("revenues-2011-10-10 12:30:00")
            .param("revenueDate", "2011-10-10 12:30:00")
        ).commit()
    """

    def __init__(
        self,
        backend: IQueueBackend,
        transport: IEventTransport,
        binder: ICommonParamBinder,
        *,
        router: QueueRouter | None = None,
        builder: DispatchBuilder | None = None,
        config: DispatchConfig | None = None,
    ) -> None:
        self._backend = backend
        self._binder = binder
        self._router = router or QueueRouter(QueueNameRegistry().lookup)
        self._builder = builder or DispatchBuilder(transport, config)
        self._pending: list[TaskOptions] = []
        self._committed = False

    # ── Accumulation ─────────────────────────────────────────────────

    def add(self, *options: TaskOptions) -> TaskScheduler:
        """Append one or more descriptors, keeping their order."""
        if self._committed:
            raise SchedulerStateError("Cannot add tasks to a committed scheduler")
        self._pending.extend(options)
        return self

    @property
    def pending(self) -> tuple[TaskOptions, ...]:
        return tuple(self._pending)

    @property
    def committed(self) -> bool:
        return self._committed

    # ── Commit ───────────────────────────────────────────────────────

    async def commit(self) -> None:
        """Enqueue every pending descriptor, in the order they were added.

        Raises the backend error when a submission fails for good; items
        submitted before the failure stay enqueued.
        """
        if self._committed:
            raise SchedulerStateError("Scheduler has already been committed")
        self._committed = True

        registry = get_hook_registry()
        await registry.execute_all(
            "scheduler.commit",
            {"task.count": len(self._pending), "correlation_id": get_correlation_id()},
            self._commit_internal,
        )

    async def now(self) -> None:
        """Alias of :meth:`commit`."""
        await self.commit()

    async def _commit_internal(self) -> None:
        common_params = self._binder.common_params()

        for options in self._pending:
            # Common parameters are applied last so they win on collision.
            for key, value in common_params.items():
                options.param(key, value)

            request = self._builder.build(options)
            queue_name = self._resolve_queue(options)
            await self._submit_instrumented(options, request, queue_name)
            options.mark_submitted()

    def _resolve_queue(self, options: TaskOptions) -> str:
        if options.is_event:
            return self._router.resolve(
                type(options.event), options.handler, options.listener
            )
        return self._router.resolve(options.task_type)

    async def _submit_instrumented(
        self, options: TaskOptions, request: DispatchRequest, queue_name: str
    ) -> None:
        message_type: type[Any] | None = (
            type(options.event) if options.is_event else options.task_type
        )
        type_name = getattr(message_type, "__name__", "unknown")

        async def _submit() -> None:
            await self.submit(request, queue_name, options.is_transactionless)

        await get_hook_registry().execute_all(
            f"scheduler.enqueue.{type_name}",
            {
                "queue.name": queue_name,
                "task.name": request.name,
                "message_type": message_type,
                "correlation_id": get_correlation_id(),
            },
            _submit,
        )

    # ── Submission ───────────────────────────────────────────────────

    async def submit(
        self, request: DispatchRequest, queue_name: str, transactionless: bool
    ) -> None:
        """Enqueue *request*, retrying once on a transient backend failure.

        A duplicate name on the first attempt means another producer already
        enqueued the task, so it counts as success. Any failure of the retry,
        a duplicate name included, propagates.
        """
        try:
            await self._backend.enqueue(request, queue_name, transactionless)
        except DuplicateTaskNameError:
            logger.debug(
                "Task %r already in queue %r, fan-in collapsed",
                request.name,
                queue_name,
            )
            return
        except TransientBackendError as exc:
            logger.warning(
                "Transient failure enqueuing into %r (%s), retrying once",
                queue_name,
                exc,
            )
            await self._backend.enqueue(request, queue_name, transactionless)

        logger.debug("Enqueued %s into %r", request.url, queue_name)
