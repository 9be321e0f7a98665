"""DispatchBuilder — turns TaskOptions into backend-neutral DispatchRequests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field

from .ports.queue_backend import DispatchRequest
from .primitives.exceptions import (
    EventTransportError,
    PayloadEncodingError,
    ReservedParamError,
)
from .utils import short_name, type_id

if TYPE_CHECKING:
    from .options import TaskOptions
    from .ports.event_transport import IEventTransport

logger = logging.getLogger("async_task_scheduler.dispatch")

# Reserved dispatch parameters read by the worker endpoint.
TASK_QUEUE = "taskQueue"
EVENT = "event"
EVENT_AS_JSON = "eventJson"
LISTENER = "listener"
HANDLER = "handler"

RESERVED_PARAMS = frozenset({TASK_QUEUE, EVENT, EVENT_AS_JSON, LISTENER, HANDLER})


class DispatchConfig(BaseModel):
    """Settings shared by every request the builder produces."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(
        default="/_ah/queue/async-task",
        min_length=1,
        description="URL of the worker endpoint that executes dispatched items",
    )


class DispatchBuilder:
    """Builds one ``DispatchRequest`` per descriptor.

    Tasks carry their type identifier under ``taskQueue`` and keep their name.
    Events carry their type identifier under ``event``, the URL-encoded
    transport payload under ``eventJson`` and the short names of the listener
    and handler classes, when present. Caller parameters follow the reserved
    ones and may not reuse a reserved key.
    """

    def __init__(
        self,
        transport: IEventTransport,
        config: DispatchConfig | None = None,
    ) -> None:
        self._transport = transport
        self._config = config or DispatchConfig()

    def build(self, options: TaskOptions) -> DispatchRequest:
        if options.is_event:
            request = self.build_event_request(options)
        else:
            request = self.build_task_request(options)
        self.apply_execution_time(options, request)
        logger.debug(
            "Built dispatch request %s (name=%s, countdown=%s, eta=%s)",
            request.url,
            request.name,
            request.countdown_millis,
            request.eta_millis,
        )
        return request

    def build_task_request(self, options: TaskOptions) -> DispatchRequest:
        request = DispatchRequest(url=self._config.endpoint)
        request.param(TASK_QUEUE, options.task_type_id())
        self.copy_params(options, request)

        # Named tasks make the backend reject duplicates.
        if options.task_name is not None:
            request.name = options.task_name
        return request

    def build_event_request(self, options: TaskOptions) -> DispatchRequest:
        event_type = type_id(type(options.event))

        request = DispatchRequest(url=self._config.endpoint)
        request.param(EVENT, event_type)
        request.param(EVENT_AS_JSON, self.encode_event(event_type, options.event))
        if options.listener is not None:
            request.param(LISTENER, short_name(options.listener))
        if options.handler is not None:
            request.param(HANDLER, short_name(options.handler))
        self.copy_params(options, request)
        return request

    def encode_event(self, event_type: str, value: object) -> str:
        """Serialize *value* and URL-encode the result for use as a parameter."""
        try:
            payload = self._transport.serialize(event_type, value)
            return quote_plus(payload.decode("utf-8"), safe="")
        except (EventTransportError, UnicodeError) as e:
            raise PayloadEncodingError(event_type, str(e)) from e

    @staticmethod
    def copy_params(options: TaskOptions, request: DispatchRequest) -> None:
        """Append the descriptor parameters after the reserved ones."""
        for key, value in options.get_params().items():
            if key in RESERVED_PARAMS:
                raise ReservedParamError(key)
            request.param(key, value)

    @staticmethod
    def apply_execution_time(options: TaskOptions, request: DispatchRequest) -> None:
        if options.delay_millis > 0:
            request.countdown_millis = options.delay_millis
        elif options.execution_date_millis > 0:
            request.eta_millis = options.execution_date_millis
