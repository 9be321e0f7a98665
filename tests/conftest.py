"""Pytest fixtures for the scheduler tests."""

from __future__ import annotations

import pytest
from support import CountingBinder, FixedTransport

from async_task_scheduler import (
    HookRegistry,
    InMemoryQueueBackend,
    QueueNameRegistry,
    QueueRouter,
    TaskScheduler,
    set_causation_id,
    set_correlation_id,
    set_hook_registry,
)


@pytest.fixture(autouse=True)
def _isolated_context() -> None:
    """Fresh hooks and an empty correlation context for every test."""
    set_hook_registry(HookRegistry())
    set_correlation_id(None)
    set_causation_id(None)


@pytest.fixture
def backend() -> InMemoryQueueBackend:
    return InMemoryQueueBackend()


@pytest.fixture
def transport() -> FixedTransport:
    return FixedTransport()


@pytest.fixture
def binder() -> CountingBinder:
    return CountingBinder({"corr": "abc"})


@pytest.fixture
def queues() -> QueueNameRegistry:
    return QueueNameRegistry()


@pytest.fixture
def scheduler(
    backend: InMemoryQueueBackend,
    transport: FixedTransport,
    binder: CountingBinder,
    queues: QueueNameRegistry,
) -> TaskScheduler:
    return TaskScheduler(backend, transport, binder, router=QueueRouter(queues.lookup))
