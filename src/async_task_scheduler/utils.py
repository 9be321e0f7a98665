"""Common utility functions and helpers."""

from __future__ import annotations

from typing import Any


def default_params_factory() -> dict[str, str]:
    """Factory for mutable default parameter dicts in dataclass fields."""
    return {}


def type_id(cls: type[Any]) -> str:
    """Stable identifier of a class: ``module.QualName``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def short_name(cls: type[Any]) -> str:
    """Short type name, without module or enclosing scopes."""
    return cls.__name__
