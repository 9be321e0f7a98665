"""EventTypeRegistry — maps event type identifiers to their classes for hydration."""

from __future__ import annotations

from typing import Any

from ..utils import type_id


class EventTypeRegistry:
    """Registry for mapping ``event_type: str`` → event class.

    The scheduler writes ``module.QualName`` into the ``event`` dispatch
    parameter; the receiving side uses this registry to turn that string and
    the payload back into an event instance.

    **Explicit registration** is required via ``register(cls)``.
    Create instances per application context for isolation.

    Usage::

        registry = EventTypeRegistry()
        registry.register(OrderPlaced)
        event = registry.hydrate("shop.events.OrderPlaced", {"order_id": "123"})
    """

    def __init__(self) -> None:
        self._registry: dict[str, type[Any]] = {}

    def register(self, event_class: type[Any], name: str | None = None) -> None:
        """Register *event_class* under *name* (defaults to its type identifier)."""
        self._registry[name or type_id(event_class)] = event_class

    def get(self, event_type: str) -> type[Any] | None:
        """Look up an event class by type identifier."""
        return self._registry.get(event_type)

    def has(self, event_type: str) -> bool:
        """Return ``True`` if *event_type* is registered."""
        return event_type in self._registry

    def hydrate(self, event_type: str, data: dict[str, Any]) -> Any | None:
        """Reconstruct an event from its type identifier and payload dict.

        Returns ``None`` if the event type is not registered or the payload
        does not validate.
        """
        event_class = self.get(event_type)
        if event_class is None:
            return None

        try:
            if hasattr(event_class, "model_validate"):
                return event_class.model_validate(data)
            return event_class(**data)
        except (TypeError, ValueError):
            return None

    def list_registered(self) -> list[str]:
        """Return all registered event type identifiers."""
        return list(self._registry.keys())

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._registry.clear()
