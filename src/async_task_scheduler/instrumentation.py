"""Instrumentation hooks wrapped around commits and backend submissions."""

from __future__ import annotations

import fnmatch
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("async_task_scheduler.instrumentation")


@runtime_checkable
class InstrumentationHook(Protocol):
    """Protocol for instrumentation hooks (tracing, metrics, audit, etc.).

    A hook receives the operation name (``scheduler.commit``,
    ``scheduler.enqueue.<TaskName>``), its attributes, and a callable that
    runs the rest of the chain. It must await ``next_handler`` exactly once
    and return its result.
    """

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any: ...


class HookRegistration:
    """A registered hook plus the operations it applies to."""

    def __init__(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: list[str] | None = None,
        message_types: list[type[Any]] | None = None,
        enabled: bool = True,
    ) -> None:
        self.hook = hook
        self.priority = priority
        self.operations = operations or []
        self.message_types = message_types or []
        self.enabled = enabled

    def matches(self, operation: str, attributes: dict[str, Any]) -> bool:
        """Check whether this registration applies to *operation*.

        ``operations`` holds glob patterns (``scheduler.enqueue.*``); an empty
        list matches everything. ``message_types`` is compared against the
        ``message_type`` attribute when the operation carries one.
        """
        if not self.enabled:
            return False
        if self.operations and not any(
            fnmatch.fnmatch(operation, pattern) for pattern in self.operations
        ):
            return False
        msg_type = attributes.get("message_type")
        if self.message_types and msg_type is not None:
            return msg_type in self.message_types
        return True


class HookRegistry:
    """Ordered collection of hooks, executed as a nested chain."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: list[str] | None = None,
        message_types: list[type[Any]] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        """Register *hook*; lower priorities run outermost."""
        registration = HookRegistration(
            hook,
            priority=priority,
            operations=operations,
            message_types=message_types,
            enabled=enabled,
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        logger.debug(
            "Registered instrumentation hook %s (priority=%d)",
            type(hook).__name__,
            priority,
        )
        return registration

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run *next_handler* inside every hook matching *operation*."""
        chain = [r.hook for r in self._registrations if r.matches(operation, attributes)]

        async def call(index: int) -> Any:
            if index == len(chain):
                return await next_handler()
            return await chain[index](operation, attributes, lambda: call(index + 1))

        return await call(0)

    def clear(self) -> None:
        """Remove all registrations."""
        self._registrations.clear()


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Get the hook registry for the current context.

    A fresh ``HookRegistry`` is created on first access within each context,
    so tests never leak hooks into each other.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Install a custom hook registry in the current context."""
    _hook_registry_var.set(registry)
