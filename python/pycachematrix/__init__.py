"""Matrix container that caches its inverse until the matrix changes."""
from __future__ import annotations

from importlib import metadata as _metadata
from typing import Any

try:
    __version__ = _metadata.version("pycachematrix")
except _metadata.PackageNotFoundError:
    __version__ = "unknown"

from ._internal import observability as _observability
from ._internal import runtime as _runtime
from ._internal.inversion import InversionError, invert, reciprocal_condition
from ._internal.runtime import METHODS, InversionDefaults
from ._internal.warnings import (
    PyCacheMatrixWarning,
    PyCacheMatrixConditioningWarning,
)
from .matrix import UNSET, CacheableMatrix
from .solve import compute_inverse


def get_inversion_defaults() -> InversionDefaults:
    """Return the process-wide defaults used when ``invert`` options are unset."""
    return _runtime.default_instance().defaults()


def set_inversion_defaults(**changes: Any) -> InversionDefaults:
    """Override process-wide inversion defaults (``method``, ``tol``, ``warn_rcond``)."""
    return _runtime.default_instance().set_defaults(**changes)


def reset_inversion_defaults() -> None:
    """Drop overrides; defaults are re-read from the environment on next use."""
    _runtime.default_instance().reset()


def temporary_inversion_defaults(**changes: Any):
    """Context manager: override inversion defaults, restoring them on exit."""
    return _runtime.default_instance().temporary_defaults(**changes)


def last_cache_trace(outcome: str | None = None) -> dict[str, Any] | None:
    """Most recent cache record, optionally the most recent with ``outcome``."""
    return _observability.default_instance().last(outcome)


def cache_traces() -> list[dict[str, Any]]:
    return _observability.default_instance().records()


def cache_stats() -> dict[str, int]:
    return _observability.default_instance().stats()


def clear_cache_traces() -> None:
    _observability.default_instance().clear()


__all__ = [
    "CacheableMatrix",
    "UNSET",
    "compute_inverse",
    "invert",
    "reciprocal_condition",
    "InversionError",
    "InversionDefaults",
    "METHODS",
    "PyCacheMatrixWarning",
    "PyCacheMatrixConditioningWarning",
    "get_inversion_defaults",
    "set_inversion_defaults",
    "reset_inversion_defaults",
    "temporary_inversion_defaults",
    "last_cache_trace",
    "cache_traces",
    "cache_stats",
    "clear_cache_traces",
]
