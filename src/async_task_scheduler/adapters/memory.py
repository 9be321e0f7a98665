"""InMemoryQueueBackend — list-backed fake for unit tests."""

from __future__ import annotations

from dataclasses import dataclass

from ..ports.queue_backend import DispatchRequest, IQueueBackend
from ..primitives.exceptions import DuplicateTaskNameError


@dataclass(frozen=True)
class EnqueuedTask:
    """A request as the backend received it."""

    request: DispatchRequest
    queue_name: str
    transactionless: bool


class InMemoryQueueBackend(IQueueBackend):
    """In-memory implementation of ``IQueueBackend``.

    Keeps one list per queue and rejects a named request whose name was
    already used in the same queue, like a real task queue does. Failures can
    be scripted with :meth:`fail_next`.
    """

    def __init__(self) -> None:
        self._queues: dict[str, list[EnqueuedTask]] = {}
        self._names: dict[str, set[str]] = {}
        self._stored: list[EnqueuedTask] = []
        self._failures: list[Exception | None] = []
        self.attempts: list[EnqueuedTask] = []

    async def enqueue(
        self,
        request: DispatchRequest,
        queue_name: str,
        transactionless: bool,
    ) -> None:
        item = EnqueuedTask(request, queue_name, transactionless)
        self.attempts.append(item)

        if self._failures:
            failure = self._failures.pop(0)
            if failure is not None:
                raise failure

        names = self._names.setdefault(queue_name, set())
        if request.name is not None:
            if request.name in names:
                raise DuplicateTaskNameError(queue_name, request.name)
            names.add(request.name)

        self._queues.setdefault(queue_name, []).append(item)
        self._stored.append(item)

    # ── Test helpers ─────────────────────────────────────────────

    def fail_next(self, *errors: Exception | None) -> None:
        """Raise *errors*, one per call, on the next enqueue attempts.

        ``None`` lets that attempt succeed.
        """
        self._failures.extend(errors)

    def enqueued(self, queue_name: str | None = None) -> list[EnqueuedTask]:
        """Stored items of one queue, or of all queues in insertion order."""
        if queue_name is not None:
            return list(self._queues.get(queue_name, []))
        return list(self._stored)

    @property
    def count(self) -> int:
        return len(self._stored)

    def clear(self) -> None:
        self._queues.clear()
        self._names.clear()
        self._stored.clear()
        self._failures.clear()
        self.attempts.clear()
