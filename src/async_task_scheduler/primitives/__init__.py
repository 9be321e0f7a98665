"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
    "ConfigurationError",
    "DuplicateTaskNameError",
    "EventTransportError",
    "InfrastructureError",
    "PayloadEncodingError",
    "QueueBackendError",
    "ReservedParamError",
    "SchedulerStateError",
    "TaskSchedulerError",
    "TransientBackendError",
]
