"""Domain primitives: events, tasks, event registry."""

from __future__ import annotations

from .event_registry import EventTypeRegistry
from .events import AsyncEvent
from .tasks import AsyncTask

__all__: list[str] = [
    "AsyncEvent",
    "AsyncTask",
    "EventTypeRegistry",
]
