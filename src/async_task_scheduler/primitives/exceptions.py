"""Exceptions for async-task-scheduler."""

from __future__ import annotations


class TaskSchedulerError(Exception):
    """Root exception for the entire async-task-scheduler package."""


class ConfigurationError(TaskSchedulerError):
    """Raised when a work item cannot be dispatched because of how it is set up.

    Retrying never fixes these, so the scheduler propagates them immediately.
    """


class PayloadEncodingError(ConfigurationError):
    """Raised when an event payload cannot be serialized or URL-encoded."""

    def __init__(self, event_type: str, reason: str) -> None:
        self.event_type = event_type
        self.reason = reason
        super().__init__(f"Cannot encode payload of event {event_type}: {reason}")


class ReservedParamError(ConfigurationError):
    """Raised when a dispatch parameter would replace a reserved key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Parameter {key!r} is reserved for the dispatch contract")


class SchedulerStateError(TaskSchedulerError):
    """Raised when a scheduler or descriptor is used after it was committed."""


class EventTransportError(TaskSchedulerError):
    """Raised when an event transport fails to serialize or deserialize."""


class InfrastructureError(TaskSchedulerError):
    """Base class for all infrastructure-related errors."""


class QueueBackendError(InfrastructureError):
    """Raised by a queue backend for failures that must not be retried."""


class DuplicateTaskNameError(QueueBackendError):
    """A task with the same name already exists in the target queue.

    Usage: backends raise this when a named task collides with one that was
    already enqueued. On a first attempt the scheduler treats it as success,
    which is what lets several producers fan in to a single task.
    """

    def __init__(self, queue_name: str, task_name: str) -> None:
        self.queue_name = queue_name
        self.task_name = task_name
        super().__init__(
            f"Task {task_name!r} already exists in queue {queue_name or '<default>'!r}"
        )


class TransientBackendError(QueueBackendError):
    """The backend is temporarily unavailable (overload, timeout, connection).

    The scheduler retries exactly once, immediately.
    """
