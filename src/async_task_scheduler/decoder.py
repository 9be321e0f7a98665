"""DispatchDecoder — reads dispatch parameters back on the worker side."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field

from .dispatch import EVENT, EVENT_AS_JSON, HANDLER, LISTENER, RESERVED_PARAMS, TASK_QUEUE
from .primitives.exceptions import ConfigurationError

if TYPE_CHECKING:
    from .ports.event_transport import IEventTransport


class DecodedDispatch(BaseModel):
    """A work item reconstructed from the parameters of a dispatch request."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["task", "event"]
    type_id: str = Field(..., description="module.QualName of the task or event")
    event: Any = None
    listener: str | None = None
    handler: str | None = None
    params: dict[str, str] = Field(default_factory=dict)


class DispatchDecoder:
    """Inverse of ``DispatchBuilder`` for the endpoint that executes items.

    Usage::

        decoder = DispatchDecoder(JsonEventTransport(event_registry))
        item = decoder.decode(dict(request.query_params))
        if item.kind == "event":
            await listeners[item.listener].on(item.event)
    """

    def __init__(self, transport: IEventTransport) -> None:
        self._transport = transport

    def decode(self, params: dict[str, str]) -> DecodedDispatch:
        """Rebuild the work item from *params*.

        Raises ``ConfigurationError`` when neither a task nor an event key is
        present, or when an event has no payload.
        """
        caller_params = {k: v for k, v in params.items() if k not in RESERVED_PARAMS}

        if TASK_QUEUE in params:
            return DecodedDispatch(
                kind="task", type_id=params[TASK_QUEUE], params=caller_params
            )

        if EVENT not in params:
            raise ConfigurationError(
                f"Dispatch carries neither {TASK_QUEUE!r} nor {EVENT!r}"
            )
        event_type = params[EVENT]
        if EVENT_AS_JSON not in params:
            raise ConfigurationError(f"Event {event_type} dispatched without payload")

        payload = unquote_plus(params[EVENT_AS_JSON]).encode("utf-8")
        return DecodedDispatch(
            kind="event",
            type_id=event_type,
            event=self._transport.deserialize(event_type, payload),
            listener=params.get(LISTENER),
            handler=params.get(HANDLER),
            params=caller_params,
        )
