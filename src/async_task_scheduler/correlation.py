"""Correlation and causation ids carried by dispatched work.

The ids live in context variables so concurrent requests keep their own.
``CorrelationParamBinder`` copies the ids that are set into every dispatch and
the worker binds them again with :func:`restore_ids` before running the item.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

CORRELATION_ID = "correlation_id"
CAUSATION_ID = "causation_id"

_ids: dict[str, ContextVar[str | None]] = {
    CORRELATION_ID: ContextVar("async_task_scheduler_correlation_id", default=None),
    CAUSATION_ID: ContextVar("async_task_scheduler_causation_id", default=None),
}


def get_correlation_id() -> str | None:
    return _ids[CORRELATION_ID].get()


def set_correlation_id(correlation_id: str | None) -> None:
    _ids[CORRELATION_ID].set(correlation_id)


def get_causation_id() -> str | None:
    return _ids[CAUSATION_ID].get()


def set_causation_id(causation_id: str | None) -> None:
    _ids[CAUSATION_ID].set(causation_id)


def current_ids() -> dict[str, str]:
    """The ids set in this context, keyed by ``CORRELATION_ID``/``CAUSATION_ID``.

    Unset and empty ids are left out.
    """
    ids = {name: var.get() for name, var in _ids.items()}
    return {name: value for name, value in ids.items() if value}


def restore_ids(
    params: Mapping[str, str],
    correlation_key: str = CORRELATION_ID,
    causation_key: str = CAUSATION_ID,
) -> None:
    """Bind the ids a dispatch carried; ids missing from *params* are cleared."""
    set_correlation_id(params.get(correlation_key) or None)
    set_causation_id(params.get(causation_key) or None)
