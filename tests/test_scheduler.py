"""Tests for TaskScheduler: accumulation, commit, routing and submission."""

from __future__ import annotations

import pytest
from support import (
    BillingListener,
    CountingBinder,
    FixedTransport,
    OrderHandler,
    OrderPlaced,
    RevenueSummarizer,
    SendInvoice,
    UserRegistered,
)

from async_task_scheduler import (
    EVENT,
    EVENT_AS_JSON,
    HANDLER,
    LISTENER,
    TASK_QUEUE,
    DispatchConfig,
    DuplicateTaskNameError,
    InMemoryQueueBackend,
    PayloadEncodingError,
    QueueBackendError,
    QueueNameRegistry,
    ReservedParamError,
    SchedulerStateError,
    TaskScheduler,
    TransientBackendError,
    event,
    task,
)
from async_task_scheduler.utils import type_id

# ============================================================================
# Tests: accumulation and ordering
# ============================================================================


class TestAccumulation:
    """Test the fluent add API."""

    def test_add_returns_scheduler_for_chaining(
        self, scheduler: TaskScheduler
    ) -> None:
        result = scheduler.add(task(SendInvoice)).add(task(RevenueSummarizer))

        assert result is scheduler
        assert [o.task_type for o in scheduler.pending] == [
            SendInvoice,
            RevenueSummarizer,
        ]

    def test_variadic_add_keeps_order(self, scheduler: TaskScheduler) -> None:
        first = task(SendInvoice)
        second = event(UserRegistered())
        third = task(RevenueSummarizer)

        scheduler.add(first, second, third)

        assert scheduler.pending == (first, second, third)

    @pytest.mark.asyncio()
    async def test_every_descriptor_submitted_once_in_insertion_order(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(
            task(SendInvoice).param("n", 1),
            event(UserRegistered()).param("n", 2),
            task(RevenueSummarizer).param("n", 3),
        )

        await scheduler.commit()

        assert [a.request.params["n"] for a in backend.attempts] == ["1", "2", "3"]
        assert backend.count == 3

    @pytest.mark.asyncio()
    async def test_commit_without_descriptors_is_a_no_op(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        await scheduler.commit()

        assert backend.attempts == []
        assert scheduler.committed


# ============================================================================
# Tests: common parameters
# ============================================================================


class TestCommonParameters:
    """Common parameters are merged into every request and win collisions."""

    @pytest.mark.asyncio()
    async def test_common_params_are_added_to_every_request(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(task(SendInvoice), event(UserRegistered()))

        await scheduler.commit()

        assert all(a.request.params["corr"] == "abc" for a in backend.attempts)

    @pytest.mark.asyncio()
    async def test_common_value_wins_on_key_collision(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(task(SendInvoice).param("corr", "mine").param("x", "1"))

        await scheduler.commit()

        params = backend.attempts[0].request.params
        assert params["corr"] == "abc"
        assert params["x"] == "1"

    @pytest.mark.asyncio()
    async def test_binder_is_called_once_per_commit(
        self,
        backend: InMemoryQueueBackend,
        transport: FixedTransport,
    ) -> None:
        binder = CountingBinder({"tenant": "acme"})
        first = TaskScheduler(backend, transport, binder)
        second = TaskScheduler(backend, transport, binder)

        await first.add(task(SendInvoice), task(RevenueSummarizer)).commit()
        await second.add(task(SendInvoice)).commit()

        assert binder.calls == 2


# ============================================================================
# Tests: worked examples
# ============================================================================


class TestRequestExamples:
    """Requests built for the documented examples."""

    @pytest.mark.asyncio()
    async def test_named_delayed_task_request(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(task(SendInvoice).named("job-1").delay(5000).param("x", "1"))

        await scheduler.commit()

        request = backend.attempts[0].request
        assert request.url == DispatchConfig().endpoint
        assert request.name == "job-1"
        assert request.countdown_millis == 5000
        assert request.eta_millis is None
        assert request.params == {
            TASK_QUEUE: type_id(SendInvoice),
            "x": "1",
            "corr": "abc",
        }

    @pytest.mark.asyncio()
    async def test_event_with_listener_request(
        self,
        scheduler: TaskScheduler,
        backend: InMemoryQueueBackend,
        transport: FixedTransport,
    ) -> None:
        value = UserRegistered()
        scheduler.add(event(value, listener=BillingListener))

        await scheduler.commit()

        params = backend.attempts[0].request.params
        assert params[EVENT] == type_id(UserRegistered)
        assert params[EVENT_AS_JSON] == "%7B%22a%22%3A1%7D"
        assert params[LISTENER] == "BillingListener"
        assert HANDLER not in params
        assert transport.calls == [(type_id(UserRegistered), value)]

    @pytest.mark.asyncio()
    async def test_event_uses_associated_handler(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(event(OrderPlaced()))

        await scheduler.commit()

        assert backend.attempts[0].request.params[HANDLER] == "OrderHandler"

    @pytest.mark.asyncio()
    async def test_fan_in_collapses_named_tasks(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(
            task(RevenueSummarizer).named("fanin-key"),
            task(RevenueSummarizer).named("fanin-key"),
        )

        await scheduler.commit()

        assert len(backend.attempts) == 2
        assert backend.count == 1


# ============================================================================
# Tests: queue routing
# ============================================================================


class TestQueueRouting:
    """Queue names resolved from the registry reach the backend."""

    @pytest.mark.asyncio()
    async def test_task_routed_by_its_type(
        self,
        scheduler: TaskScheduler,
        backend: InMemoryQueueBackend,
        queues: QueueNameRegistry,
    ) -> None:
        queues.register(SendInvoice, "billing")
        scheduler.add(task(SendInvoice), task(RevenueSummarizer))

        await scheduler.commit()

        assert [a.queue_name for a in backend.attempts] == ["billing", ""]

    @pytest.mark.asyncio()
    async def test_event_routed_by_handler_then_listener(
        self,
        scheduler: TaskScheduler,
        backend: InMemoryQueueBackend,
        queues: QueueNameRegistry,
    ) -> None:
        queues.register(OrderHandler, "orders")
        queues.register(BillingListener, "billing")
        scheduler.add(event(OrderPlaced(), listener=BillingListener))

        await scheduler.commit()

        assert backend.attempts[0].queue_name == "billing"

    @pytest.mark.asyncio()
    async def test_transactionless_flag_is_forwarded(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(task(SendInvoice).transactionless(), task(RevenueSummarizer))

        await scheduler.commit()

        assert [a.transactionless for a in backend.attempts] == [True, False]


# ============================================================================
# Tests: submission and retry
# ============================================================================


class TestSubmission:
    """Duplicate-name and transient-failure handling."""

    @pytest.mark.asyncio()
    async def test_duplicate_on_first_attempt_is_not_retried(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        backend.fail_next(DuplicateTaskNameError("", "job-1"))
        scheduler.add(task(SendInvoice).named("job-1"), task(RevenueSummarizer))

        await scheduler.commit()

        assert len(backend.attempts) == 2
        assert [i.request.params[TASK_QUEUE] for i in backend.enqueued()] == [
            type_id(RevenueSummarizer)
        ]

    @pytest.mark.asyncio()
    async def test_transient_failure_then_success_continues(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        backend.fail_next(TransientBackendError("overloaded"))
        scheduler.add(task(SendInvoice), task(RevenueSummarizer))

        await scheduler.commit()

        assert len(backend.attempts) == 3
        assert backend.attempts[0].request is backend.attempts[1].request
        assert backend.count == 2

    @pytest.mark.asyncio()
    async def test_two_transient_failures_abort_commit(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        second = TransientBackendError("still overloaded")
        backend.fail_next(TransientBackendError("overloaded"), second)
        scheduler.add(task(SendInvoice), task(RevenueSummarizer))

        with pytest.raises(TransientBackendError) as exc_info:
            await scheduler.commit()

        assert exc_info.value is second
        assert len(backend.attempts) == 2
        assert backend.count == 0

    @pytest.mark.asyncio()
    async def test_duplicate_on_retry_is_surfaced(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        backend.fail_next(
            TransientBackendError("timeout"), DuplicateTaskNameError("", "job-1")
        )
        scheduler.add(task(SendInvoice).named("job-1"))

        with pytest.raises(DuplicateTaskNameError):
            await scheduler.commit()

    @pytest.mark.asyncio()
    async def test_other_failure_propagates_without_retry(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        backend.fail_next(QueueBackendError("queue does not exist"))
        scheduler.add(task(SendInvoice), task(RevenueSummarizer))

        with pytest.raises(QueueBackendError, match="queue does not exist"):
            await scheduler.commit()

        assert len(backend.attempts) == 1

    @pytest.mark.asyncio()
    async def test_partial_submission_is_kept(
        self, scheduler: TaskScheduler, backend: InMemoryQueueBackend
    ) -> None:
        scheduler.add(task(SendInvoice), task(RevenueSummarizer), task(SendInvoice))
        backend.fail_next(None, QueueBackendError("boom"))

        with pytest.raises(QueueBackendError):
            await scheduler.commit()

        assert len(backend.attempts) == 2
        assert backend.count == 1
        stored = backend.enqueued()[0]
        assert stored.request.params[TASK_QUEUE] == type_id(SendInvoice)

    @pytest.mark.asyncio()
    async def test_common_param_cannot_replace_reserved_key(
        self, backend: InMemoryQueueBackend, transport: FixedTransport
    ) -> None:
        binder = CountingBinder({HANDLER: "SomethingElse"})
        scheduler = TaskScheduler(backend, transport, binder)
        scheduler.add(event(OrderPlaced()))

        with pytest.raises(ReservedParamError):
            await scheduler.commit()

        assert backend.attempts == []

    @pytest.mark.asyncio()
    async def test_encoding_failure_is_not_retried(
        self, backend: InMemoryQueueBackend, binder: CountingBinder
    ) -> None:
        scheduler = TaskScheduler(backend, FixedTransport(b"\xff\xfe"), binder)
        scheduler.add(event(UserRegistered()))

        with pytest.raises(PayloadEncodingError):
            await scheduler.commit()

        assert backend.attempts == []


# ============================================================================
# Tests: lifecycle
# ============================================================================


class TestLifecycle:
    """A scheduler commits once."""

    @pytest.mark.asyncio()
    async def test_second_commit_raises(self, scheduler: TaskScheduler) -> None:
        await scheduler.add(task(SendInvoice)).commit()

        with pytest.raises(SchedulerStateError):
            await scheduler.commit()

    @pytest.mark.asyncio()
    async def test_add_after_commit_raises(self, scheduler: TaskScheduler) -> None:
        await scheduler.commit()

        with pytest.raises(SchedulerStateError):
            scheduler.add(task(SendInvoice))

    @pytest.mark.asyncio()
    async def test_submitted_descriptor_is_frozen(
        self, scheduler: TaskScheduler
    ) -> None:
        options = task(SendInvoice)
        await scheduler.add(options).now()

        with pytest.raises(SchedulerStateError):
            options.param("late", "1")
