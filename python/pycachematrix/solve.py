"""Read-through inverse cache over a ``CacheableMatrix``."""
from __future__ import annotations

from typing import Any, Callable

import numpy as np

from ._internal import observability as _observability
from ._internal.coercion import coerce_matrix, freeze
from ._internal.inversion import invert
from .matrix import CacheableMatrix


def compute_inverse(
    container: CacheableMatrix,
    *,
    inverter: Callable[..., Any] | None = None,
    **options: Any,
) -> np.ndarray:
    """Return the inverse of ``container``'s matrix, computing it only on a miss.

    A cached inverse is returned untouched and ``options`` are ignored. On a
    miss the current value and ``options`` go to ``inverter`` (``invert`` by
    default) and the result is cached. Failures propagate unchanged and leave
    the cache empty.

    Every call leaves one record in the cache trace (see
    ``last_cache_trace``).
    """

    observer = _observability.default_instance()
    method = options.get("method")

    cached = container.get_cached_inverse()
    if cached is not None:
        observer.record("hit", cached, epoch=container.epoch, method=method, reason="served from cache")
        return cached

    value, epoch = container.snapshot()
    inverse_fn = invert if inverter is None else inverter
    try:
        result = inverse_fn(value, **options)
    except Exception as exc:
        observer.record("error", value, epoch=epoch, method=method, reason=f"{type(exc).__name__}: {exc}")
        raise

    stored = container.set_cached_inverse(result, epoch=epoch)
    if stored is None:
        # The value changed while computing; hand back the result without caching it.
        observer.record("miss", value, epoch=epoch, method=method, reason="value changed during compute")
        return freeze(coerce_matrix(result))

    observer.record("miss", stored, epoch=epoch, method=method, reason="computed")
    return stored
