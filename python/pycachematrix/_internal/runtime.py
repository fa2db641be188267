from __future__ import annotations

import math
import os
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Iterator

import numpy as np

METHODS: tuple[str, ...] = ("auto", "lu", "numpy", "gauss", "qr", "svd")

# Same default as R's solve(): reject when rcond < machine epsilon.
DEFAULT_TOL = float(np.finfo(np.float64).eps)


@dataclass(frozen=True)
class InversionDefaults:
    method: str = "auto"
    tol: float = DEFAULT_TOL
    warn_rcond: float | None = None


def _check_method(method: str) -> str:
    if method not in METHODS:
        raise ValueError(f"Unknown method: {method!r} (expected one of {', '.join(METHODS)})")
    return method


def _parse_float(raw: Any, *, name: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if math.isnan(value) or value < 0:
        raise ValueError(f"{name} must be non-negative, got {raw!r}")
    return value


class Runtime:
    def __init__(
        self,
        *,
        method_env_var: str = "PYCACHEMATRIX_INVERT_METHOD",
        tol_env_var: str = "PYCACHEMATRIX_RCOND_TOL",
        warn_env_var: str = "PYCACHEMATRIX_RCOND_WARN",
    ) -> None:
        self._method_env_var = method_env_var
        self._tol_env_var = tol_env_var
        self._warn_env_var = warn_env_var
        self._defaults_cache: InversionDefaults | None = None

    def defaults(self) -> InversionDefaults:
        if self._defaults_cache is not None:
            return self._defaults_cache

        base = InversionDefaults()
        method = os.environ.get(self._method_env_var)
        if method:
            method = method.strip().lower()
            if method not in METHODS:
                raise ValueError(f"{self._method_env_var} names an unknown method: {method!r}")
            base = replace(base, method=method)

        tol = os.environ.get(self._tol_env_var)
        if tol:
            base = replace(base, tol=_parse_float(tol, name=self._tol_env_var))

        warn = os.environ.get(self._warn_env_var)
        if warn:
            base = replace(base, warn_rcond=_parse_float(warn, name=self._warn_env_var))

        self._defaults_cache = base
        return base

    def set_defaults(self, **changes: Any) -> InversionDefaults:
        unknown = set(changes) - {"method", "tol", "warn_rcond"}
        if unknown:
            raise TypeError(f"Unknown inversion default(s): {', '.join(sorted(unknown))}")
        if "method" in changes:
            _check_method(changes["method"])
        if "tol" in changes:
            changes["tol"] = _parse_float(changes["tol"], name="tol")
        if changes.get("warn_rcond") is not None:
            changes["warn_rcond"] = _parse_float(changes["warn_rcond"], name="warn_rcond")
        updated = replace(self.defaults(), **changes)
        self._defaults_cache = updated
        return updated

    def reset(self) -> None:
        """Forget overrides; the environment is re-read on next access."""
        self._defaults_cache = None

    def resolve(
        self,
        *,
        method: str | None = None,
        tol: float | None = None,
        warn_rcond: float | None = None,
    ) -> InversionDefaults:
        base = self.defaults()
        return InversionDefaults(
            method=_check_method(method) if method is not None else base.method,
            tol=_parse_float(tol, name="tol") if tol is not None else base.tol,
            warn_rcond=(
                _parse_float(warn_rcond, name="warn_rcond") if warn_rcond is not None else base.warn_rcond
            ),
        )

    @contextmanager
    def temporary_defaults(self, **changes: Any) -> Iterator[InversionDefaults]:
        prev = self.defaults()
        try:
            yield self.set_defaults(**changes)
        finally:
            self._defaults_cache = prev


_default_runtime = Runtime()


def default_instance() -> Runtime:
    return _default_runtime
