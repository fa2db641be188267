from __future__ import annotations

import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, List, Tuple

OUTCOMES: tuple[str, ...] = ("hit", "miss", "error")


@dataclass
class CacheRecord:
    op: str
    outcome: str
    trace_tag: str
    shape: Tuple[int, ...] | None
    dtype: str | None
    epoch: int
    method: str | None
    reason: str | None
    timestamp: float


def _shape(obj: Any) -> Tuple[int, ...] | None:
    shape_attr = getattr(obj, "shape", None)
    if isinstance(shape_attr, tuple):
        return tuple(int(d) for d in shape_attr)
    return None


def _dtype_label(obj: Any) -> str | None:
    dtype_attr = getattr(obj, "dtype", None)
    if dtype_attr is None:
        return None
    return str(dtype_attr)


class CacheObservability:
    """Bounded in-memory trace of inverse-cache lookups.

    Every lookup leaves exactly one record: ``hit`` when the cached inverse was
    served, ``miss`` when it had to be computed, ``error`` when computation
    failed.
    """

    def __init__(self, *, history: int = 256) -> None:
        self._counter = 0
        self._records: Deque[dict[str, Any]] = deque(maxlen=history)
        self._last: dict[str, dict[str, Any]] = {}
        self._stats: Dict[str, int] = {k: 0 for k in OUTCOMES}

    def clear(self) -> None:
        self._records.clear()
        self._last.clear()
        self._stats = {k: 0 for k in OUTCOMES}

    def record(
        self,
        outcome: str,
        matrix: Any,
        *,
        epoch: int,
        method: str | None = None,
        reason: str | None = None,
        op: str = "inverse",
    ) -> dict[str, Any]:
        if outcome not in OUTCOMES:
            raise ValueError(f"unknown cache outcome: {outcome!r}")

        self._counter += 1
        record = CacheRecord(
            op=op,
            outcome=outcome,
            trace_tag=f"{op}:{self._counter}",
            shape=_shape(matrix),
            dtype=_dtype_label(matrix),
            epoch=int(epoch),
            method=method,
            reason=reason,
            timestamp=time.time(),
        )
        payload = asdict(record)
        self._records.append(payload)
        self._last["__latest__"] = payload
        self._last[outcome] = payload
        self._stats[outcome] += 1
        return payload

    def last(self, outcome: str | None = None) -> dict[str, Any] | None:
        key = outcome or "__latest__"
        payload = self._last.get(key)
        if payload is None:
            return None
        return dict(payload)

    def records(self) -> List[dict[str, Any]]:
        return [dict(r) for r in self._records]

    def stats(self) -> Dict[str, int]:
        return dict(self._stats)


_default_observability = CacheObservability()


def default_instance() -> CacheObservability:
    return _default_observability
