from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IEventTransport(Protocol):
    """
    Port for turning event values into payload bytes and back.

    The scheduler only serializes. ``deserialize`` is used on the receiving
    side and must accept whatever ``serialize`` produced.
    """

    def serialize(self, event_type: str, event: Any) -> bytes:
        """
        Encode *event* as bytes.

        Args:
            event_type: Type identifier of the event (``module.QualName``).
            event: The event value.
        """
        ...

    def deserialize(self, event_type: str, payload: bytes) -> Any:
        """Decode *payload* back into an event of *event_type*."""
        ...
