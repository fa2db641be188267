from __future__ import annotations

import warnings
from typing import Any, Callable

import numpy as np
from scipy.linalg import lu_factor, lu_solve, solve_triangular

from . import runtime as _runtime
from .coercion import numeric_from_objects
from .warnings import PyCacheMatrixConditioningWarning


class InversionError(ValueError):
    """Raised when a matrix is non-square, singular or otherwise not invertible."""


def _as_square(matrix: Any) -> np.ndarray:
    A = np.asarray(matrix)
    if A.dtype.kind == "O":
        A = numeric_from_objects(A)
    if A.dtype.kind not in "biufc":
        raise InversionError(f"matrix entries must be numeric, got dtype {A.dtype}")
    if A.ndim != 2:
        raise InversionError(f"matrix must be 2-D, got {A.ndim}-D input")
    rows, cols = A.shape
    if rows != cols:
        raise InversionError(f"matrix must be square, got shape {rows}x{cols}")
    if rows == 0:
        raise InversionError("matrix must not be empty")
    if not np.all(np.isfinite(A)):
        raise InversionError("matrix contains non-finite entries")
    if A.dtype.kind != "c":
        A = A.astype(np.float64, copy=False)
    return A


def reciprocal_condition(A: np.ndarray) -> float:
    """2-norm reciprocal condition number; 0.0 for a singular matrix."""
    s = np.linalg.svd(A, compute_uv=False)
    if s[0] == 0:
        return 0.0
    return float(s[-1] / s[0])


def invert_gauss_jordan(A: np.ndarray) -> np.ndarray:
    """Invert matrix using Gauss-Jordan elimination with partial pivoting."""
    n = A.shape[0]
    AI = np.hstack([A.astype(np.result_type(A, np.float64)), np.identity(n)])

    for i in range(n):
        max_row = int(np.argmax(np.abs(AI[i:, i]))) + i
        if AI[max_row, i] == 0:
            raise InversionError(f"zero pivot in column {i}: matrix is singular")
        AI[[i, max_row]] = AI[[max_row, i]]

        AI[i] /= AI[i, i]

        for j in range(n):
            if i != j:
                AI[j] -= AI[i] * AI[j, i]

    return AI[:, n:]


def invert_lu(A: np.ndarray) -> np.ndarray:
    """Invert matrix using LU decomposition."""
    lu, piv = lu_factor(A, check_finite=False)
    return lu_solve((lu, piv), np.identity(A.shape[0], dtype=A.dtype), check_finite=False)


def invert_numpy(A: np.ndarray) -> np.ndarray:
    return np.linalg.inv(A)


def invert_qr(A: np.ndarray) -> np.ndarray:
    """Invert matrix using QR decomposition: A^-1 = R^-1 Q^H."""
    Q, R = np.linalg.qr(A)
    return solve_triangular(R, Q.conj().T, check_finite=False)


def invert_svd(A: np.ndarray) -> np.ndarray:
    """Invert matrix using SVD: A^-1 = V S^-1 U^H."""
    U, S, Vh = np.linalg.svd(A)
    return (Vh.conj().T / S) @ U.conj().T


_METHODS: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "auto": invert_lu,
    "lu": invert_lu,
    "numpy": invert_numpy,
    "gauss": invert_gauss_jordan,
    "qr": invert_qr,
    "svd": invert_svd,
}


def invert(
    matrix: Any,
    *,
    method: str | None = None,
    tol: float | None = None,
    warn_rcond: float | None = None,
) -> np.ndarray:
    """Return the inverse of a square numeric matrix.

    Parameters:
        matrix: 2-D square array-like.
        method: 'auto', 'lu', 'numpy', 'gauss', 'qr' or 'svd'.
        tol: reject the matrix as computationally singular when its
            reciprocal condition number is below this value. ``0`` disables
            the check and leaves singularity detection to the backend.
        warn_rcond: emit PyCacheMatrixConditioningWarning when the reciprocal
            condition number is below this value (but not below ``tol``).

    Unset options fall back to the process defaults (see
    ``set_inversion_defaults``).

    Raises:
        InversionError: the matrix cannot be inverted.
        ValueError: ``method`` is not a known method name.
    """
    opts = _runtime.default_instance().resolve(method=method, tol=tol, warn_rcond=warn_rcond)
    A = _as_square(matrix)

    if opts.tol > 0 or opts.warn_rcond is not None:
        rcond = reciprocal_condition(A)
        if rcond < opts.tol:
            raise InversionError(
                f"matrix is computationally singular: reciprocal condition number = {rcond:.6g}"
            )
        if opts.warn_rcond is not None and rcond < opts.warn_rcond:
            warnings.warn(
                f"matrix is ill-conditioned: reciprocal condition number = {rcond:.6g}",
                PyCacheMatrixConditioningWarning,
                stacklevel=2,
            )

    try:
        inv = _METHODS[opts.method](A)
    except np.linalg.LinAlgError as exc:
        raise InversionError(f"{opts.method} inversion failed: {exc}") from exc

    if not np.all(np.isfinite(inv)):
        raise InversionError(f"{opts.method} inversion produced non-finite entries: matrix is singular")
    return inv
