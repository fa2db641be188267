from __future__ import annotations

from collections.abc import Sequence as _SequenceABC
from typing import Any

import numpy as np


def is_sequence_like(value: Any) -> bool:
    return isinstance(value, _SequenceABC) and not isinstance(value, (str, bytes, bytearray))


def _rows_from_matrix_like(candidate: Any) -> list[list[Any]] | None:
    rows_attr: Any = getattr(candidate, "rows", None)
    cols_attr: Any = getattr(candidate, "cols", None)
    get_attr: Any = getattr(candidate, "get", None)
    if not (callable(rows_attr) and callable(cols_attr) and callable(get_attr)):
        return None
    n_rows = int(rows_attr())
    n_cols = int(cols_attr())
    return [[get_attr(i, j) for j in range(n_cols)] for i in range(n_rows)]


def numeric_from_objects(array: np.ndarray) -> np.ndarray:
    # Fractions, Decimals and ints beyond int64 land in object arrays.
    target = np.complex128 if any(isinstance(x, complex) for x in array.flat) else np.float64
    try:
        return array.astype(target)
    except (TypeError, ValueError, OverflowError):
        return array


def coerce_matrix(candidate: Any) -> np.ndarray:
    """Copy ``candidate`` into a fresh NumPy array.

    Accepts arrays, nested sequences and matrix-like objects exposing
    ``rows()``, ``cols()`` and ``get(i, j)``. Shape is not validated here;
    inversion is where non-square or ragged data gets rejected.
    """

    if not isinstance(candidate, np.ndarray):
        rows = _rows_from_matrix_like(candidate)
        if rows is not None:
            candidate = rows

    try:
        array = np.array(candidate)
    except ValueError:
        # Ragged nested sequences: keep them as an object array of rows.
        if not is_sequence_like(candidate):
            raise
        array = np.empty(len(candidate), dtype=object)
        for i, row in enumerate(candidate):
            array[i] = list(row) if is_sequence_like(row) else row
        return array

    if array.dtype.kind == "O":
        return numeric_from_objects(array)
    if array.dtype.kind in "biu":
        return array.astype(np.float64)
    if array.dtype.kind == "f" and array.dtype != np.float64:
        return array.astype(np.float64)
    return array


def freeze(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array
