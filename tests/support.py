"""Work items and fakes shared by the test modules."""

from __future__ import annotations

from typing import Any, ClassVar

from async_task_scheduler import AsyncEvent, AsyncTask, StaticParamBinder

# ============================================================================
# Test work items
# ============================================================================


class SendInvoice(AsyncTask):
    async def execute(self, params: dict[str, str]) -> None:
        return None


class RevenueSummarizer(AsyncTask):
    async def execute(self, params: dict[str, str]) -> None:
        return None


class BillingListener:
    pass


class OrderHandler:
    pass


class OrderPlaced(AsyncEvent):
    associated_handler: ClassVar[type[Any] | None] = OrderHandler

    order_id: str = "ord-1"


class UserRegistered(AsyncEvent):
    user_id: str = "u-1"


# ============================================================================
# Fakes
# ============================================================================


class FixedTransport:
    """Transport that returns a fixed payload, whatever the event."""

    def __init__(self, payload: bytes = b'{"a":1}') -> None:
        self.payload = payload
        self.calls: list[tuple[str, Any]] = []

    def serialize(self, event_type: str, event: Any) -> bytes:
        self.calls.append((event_type, event))
        return self.payload

    def deserialize(self, event_type: str, payload: bytes) -> Any:
        return payload


class CountingBinder(StaticParamBinder):
    """Static binder that counts how often it was asked."""

    def __init__(self, params: dict[str, Any] | None = None) -> None:
        super().__init__(params)
        self.calls = 0

    def common_params(self) -> dict[str, str]:
        self.calls += 1
        return super().common_params()


