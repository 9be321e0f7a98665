"""AsyncEvent base class."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class AsyncEvent(BaseModel):
    """Base class for events dispatched through the task queue.

    Events are immutable. A subclass may name the handler class that should
    process it by setting ``associated_handler``; the scheduler uses it for
    queue routing and for the ``handler`` dispatch parameter when the caller
    does not pass one explicitly.

    Usage::

        class OrderPlaced(AsyncEvent):
            associated_handler: ClassVar[type | None] = OrderPlacedHandler

            order_id: str
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    associated_handler: ClassVar[type[Any] | None] = None

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: str | None = None
