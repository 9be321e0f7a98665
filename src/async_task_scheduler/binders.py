"""Common parameter binders."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .correlation import CAUSATION_ID, CORRELATION_ID, current_ids, restore_ids

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .ports.param_binder import ICommonParamBinder


class StaticParamBinder:
    """Binds a fixed mapping, e.g. the deployment's tenant or version."""

    def __init__(self, params: dict[str, Any] | None = None) -> None:
        self._params = {key: str(value) for key, value in (params or {}).items()}

    def common_params(self) -> dict[str, str]:
        return dict(self._params)


class CorrelationParamBinder:
    """Binds the current correlation and causation ids.

    Ids that are not set in the current context are left out.
    """

    def __init__(
        self,
        correlation_id_key: str = CORRELATION_ID,
        causation_id_key: str = CAUSATION_ID,
    ) -> None:
        self._keys = {
            CORRELATION_ID: correlation_id_key,
            CAUSATION_ID: causation_id_key,
        }

    def common_params(self) -> dict[str, str]:
        return {self._keys[name]: value for name, value in current_ids().items()}

    def restore(self, params: Mapping[str, str]) -> None:
        """Bind the ids from a received dispatch, using this binder's keys."""
        restore_ids(
            params,
            correlation_key=self._keys[CORRELATION_ID],
            causation_key=self._keys[CAUSATION_ID],
        )


class CompositeParamBinder:
    """Merges several binders; later binders win on key collision."""

    def __init__(self, *binders: ICommonParamBinder) -> None:
        self._binders = binders

    def common_params(self) -> dict[str, str]:
        merged: dict[str, str] = {}
        for binder in self._binders:
            merged.update(binder.common_params())
        return merged
