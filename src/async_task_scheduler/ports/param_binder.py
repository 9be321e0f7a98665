"""ICommonParamBinder — source of parameters injected into every dispatch."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ICommonParamBinder(Protocol):
    """Supplies cross-cutting parameters (correlation id, tenant, ...).

    Called once per commit. Implementations must be side-effect free and safe
    to call from independent commits at the same time.
    """

    def common_params(self) -> dict[str, str]:
        """Return a fresh mapping of common parameters."""
        ...
