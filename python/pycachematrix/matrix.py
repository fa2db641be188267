"""The cacheable matrix container."""
from __future__ import annotations

import threading
from typing import Any

import numpy as np

from ._internal.coercion import coerce_matrix, freeze


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def _placeholder() -> np.ndarray:
    return freeze(np.full((1, 1), np.nan))


class CacheableMatrix:
    """A matrix value paired with a single cached inverse.

    The cached inverse, when present, always belongs to the current value:
    ``set_value`` replaces the value and drops the cached inverse in one
    locked step. Both arrays are stored read-only and returned as-is, so
    repeated reads hand back the same object.

    Constructed without a value, the container holds a 1x1 ``nan``
    placeholder (``is_initialized`` is False). Reading it is fine; inverting
    it raises ``InversionError``.
    """

    def __init__(self, value: Any = UNSET) -> None:
        self._lock = threading.Lock()
        self._epoch = 0
        self._cached_inverse: np.ndarray | None = None
        if value is UNSET:
            self._value = _placeholder()
            self._initialized = False
        else:
            self._value = freeze(coerce_matrix(value))
            self._initialized = True

    def set_value(self, new_matrix: Any) -> None:
        """Replace the matrix and invalidate the cached inverse."""
        new_value = freeze(coerce_matrix(new_matrix))
        with self._lock:
            self._value = new_value
            self._cached_inverse = None
            self._epoch += 1
            self._initialized = True

    def get_value(self) -> np.ndarray:
        return self._value

    def set_cached_inverse(self, inverse_matrix: Any, *, epoch: int | None = None) -> np.ndarray | None:
        """Store ``inverse_matrix`` as the cached inverse of the current value.

        The inverse is trusted, not verified. When ``epoch`` is given the
        store only happens if the value is still the one observed at that
        epoch (see ``snapshot``); otherwise nothing is stored and ``None`` is
        returned. Returns the stored read-only array.
        """
        stored = freeze(coerce_matrix(inverse_matrix))
        with self._lock:
            if epoch is not None and epoch != self._epoch:
                return None
            self._cached_inverse = stored
            return stored

    def get_cached_inverse(self) -> np.ndarray | None:
        return self._cached_inverse

    def snapshot(self) -> tuple[np.ndarray, int]:
        """Return ``(value, epoch)`` as one consistent pair."""
        with self._lock:
            return self._value, self._epoch

    @property
    def value(self) -> np.ndarray:
        return self._value

    @value.setter
    def value(self, new_matrix: Any) -> None:
        self.set_value(new_matrix)

    @property
    def cached_inverse(self) -> np.ndarray | None:
        return self._cached_inverse

    @property
    def has_cached_inverse(self) -> bool:
        return self._cached_inverse is not None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self._value.shape)

    def inverse(self, **options: Any) -> np.ndarray:
        """Shorthand for ``compute_inverse(self, **options)``."""
        from .solve import compute_inverse

        return compute_inverse(self, **options)

    def __repr__(self) -> str:
        state = "cached" if self.has_cached_inverse else "absent"
        if not self._initialized:
            return f"CacheableMatrix(<uninitialized>, inverse={state})"
        return f"CacheableMatrix(shape={self.shape}, inverse={state})"
