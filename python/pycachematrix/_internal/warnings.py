"""PyCacheMatrix warning categories.

These exist so users can filter/suppress PyCacheMatrix warnings without
catching all UserWarning.

Keep this module lightweight and dependency-free to avoid import cycles.
"""


class PyCacheMatrixWarning(UserWarning):
    """Base warning category for all PyCacheMatrix user-facing warnings."""


class PyCacheMatrixConditioningWarning(PyCacheMatrixWarning):
    """The matrix was invertible but badly conditioned (opt-in via warn_rcond)."""
