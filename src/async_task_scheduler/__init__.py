"""async-task-scheduler — defer tasks and events to an asynchronous task queue.

Only pydantic is required. The Redis backend needs the ``redis`` extra.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters import EnqueuedTask, InMemoryQueueBackend

# ── Binders ─────────────────────────────────────────────────────
from .binders import CompositeParamBinder, CorrelationParamBinder, StaticParamBinder
from .correlation import (
    CAUSATION_ID,
    CORRELATION_ID,
    current_ids,
    get_causation_id,
    get_correlation_id,
    restore_ids,
    set_causation_id,
    set_correlation_id,
)

# ── Dispatch ────────────────────────────────────────────────────
from .decoder import DecodedDispatch, DispatchDecoder
from .dispatch import (
    EVENT,
    EVENT_AS_JSON,
    HANDLER,
    LISTENER,
    TASK_QUEUE,
    DispatchBuilder,
    DispatchConfig,
)

# ── Domain ──────────────────────────────────────────────────────
from .domain import AsyncEvent, AsyncTask, EventTypeRegistry
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)
from .options import TaskOptions, event, task

# ── Ports ───────────────────────────────────────────────────────
from .ports import DispatchRequest, ICommonParamBinder, IEventTransport, IQueueBackend

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    ConfigurationError,
    DuplicateTaskNameError,
    EventTransportError,
    InfrastructureError,
    PayloadEncodingError,
    QueueBackendError,
    ReservedParamError,
    SchedulerStateError,
    TaskSchedulerError,
    TransientBackendError,
)
from .routing import DEFAULT_QUEUE, QueueNameRegistry, QueueRouter
from .scheduler import TaskScheduler
from .transport import JsonEventTransport

__all__: list[str] = [
    # Scheduling
    "TaskScheduler",
    "TaskOptions",
    "task",
    "event",
    # Dispatch
    "DispatchBuilder",
    "DispatchConfig",
    "DispatchDecoder",
    "DecodedDispatch",
    "EVENT",
    "EVENT_AS_JSON",
    "HANDLER",
    "LISTENER",
    "TASK_QUEUE",
    # Routing
    "DEFAULT_QUEUE",
    "QueueNameRegistry",
    "QueueRouter",
    # Domain
    "AsyncEvent",
    "AsyncTask",
    "EventTypeRegistry",
    # Ports
    "DispatchRequest",
    "ICommonParamBinder",
    "IEventTransport",
    "IQueueBackend",
    # Binders & transport
    "CompositeParamBinder",
    "CorrelationParamBinder",
    "StaticParamBinder",
    "JsonEventTransport",
    # Correlation
    "CORRELATION_ID",
    "CAUSATION_ID",
    "get_correlation_id",
    "set_correlation_id",
    "get_causation_id",
    "set_causation_id",
    "current_ids",
    "restore_ids",
    # Instrumentation
    "InstrumentationHook",
    "HookRegistration",
    "HookRegistry",
    "get_hook_registry",
    "set_hook_registry",
    # Primitives
    "TaskSchedulerError",
    "ConfigurationError",
    "PayloadEncodingError",
    "ReservedParamError",
    "SchedulerStateError",
    "EventTransportError",
    "InfrastructureError",
    "QueueBackendError",
    "DuplicateTaskNameError",
    "TransientBackendError",
    # Adapters
    "EnqueuedTask",
    "InMemoryQueueBackend",
]
