"""JsonEventTransport — JSON roundtrip with EventTypeRegistry hydration."""

from __future__ import annotations

import dataclasses
import json
from typing import TYPE_CHECKING, Any

from .primitives.exceptions import EventTransportError

if TYPE_CHECKING:
    from .domain.event_registry import EventTypeRegistry


def _json_serializer(obj: Any) -> Any:
    """Serialize datetime and other non-JSON types."""
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JsonEventTransport:
    """Encode events as UTF-8 JSON bytes.

    Pydantic models use ``model_dump_json``; dicts, dataclasses and plain
    objects go through ``json.dumps``. ``deserialize`` hydrates the payload
    with an ``EventTypeRegistry`` when one is given and knows the type,
    otherwise it returns the decoded dict.
    """

    def __init__(self, registry: EventTypeRegistry | None = None) -> None:
        self._registry = registry

    def serialize(self, event_type: str, event: Any) -> bytes:
        try:
            if hasattr(event, "model_dump_json"):
                return str(event.model_dump_json()).encode("utf-8")
            if dataclasses.is_dataclass(event) and not isinstance(event, type):
                data = dataclasses.asdict(event)
            elif isinstance(event, dict):
                data = event
            else:
                data = vars(event)
            return json.dumps(
                data, default=_json_serializer, separators=(",", ":")
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EventTransportError(f"Cannot serialize {event_type}: {e}") from e

    def deserialize(self, event_type: str, payload: bytes) -> Any:
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise EventTransportError(f"Cannot deserialize {event_type}: {e}") from e

        if self._registry is None or not self._registry.has(event_type):
            return data
        event = self._registry.hydrate(event_type, data)
        if event is None:
            raise EventTransportError(
                f"Payload does not match registered event type {event_type}"
            )
        return event
