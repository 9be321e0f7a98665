"""AsyncTask — base class for deferred units of work."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AsyncTask(ABC):
    """A unit of work executed later by the queue's worker endpoint.

    Only the class is scheduled; the worker instantiates it and calls
    :meth:`execute` with the dispatch parameters (caller parameters plus
    common parameters).
    """

    @abstractmethod
    async def execute(self, params: dict[str, str]) -> None:
        """Run the task."""
        raise NotImplementedError
