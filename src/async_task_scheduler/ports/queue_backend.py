"""IQueueBackend — port to the physical task queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..utils import default_params_factory


@dataclass
class DispatchRequest:
    """A backend-neutral request to run something later.

    Built fresh for every descriptor at commit time and never reused.
    ``countdown_millis`` and ``eta_millis`` are mutually exclusive; when both
    are ``None`` the backend runs the item as soon as possible.
    """

    url: str
    params: dict[str, str] = field(default_factory=default_params_factory)
    name: str | None = field(default=None, metadata={"description": "De-duplication key"})
    countdown_millis: int | None = None
    eta_millis: int | None = None

    def param(self, key: str, value: str) -> DispatchRequest:
        """Set a single parameter (last write wins)."""
        self.params[key] = value
        return self


@runtime_checkable
class IQueueBackend(Protocol):
    """Port for the queue that durably stores and later executes requests.

    Outcomes other than success are signalled by exceptions:

    * ``DuplicateTaskNameError`` — a task with ``request.name`` already exists
      in ``queue_name``.
    * ``TransientBackendError`` — overload, timeout or lost connection.
    * anything else (usually ``QueueBackendError``) — a permanent failure.
    """

    async def enqueue(
        self,
        request: DispatchRequest,
        queue_name: str,
        transactionless: bool,
    ) -> None:
        """
        Durably enqueue *request*.

        Args:
            request: The dispatch request to store.
            queue_name: Destination queue; ``""`` selects the backend default.
            transactionless: If False the enqueue joins the backend's
                transaction so that name-claim and insert are atomic.
        """
        ...
