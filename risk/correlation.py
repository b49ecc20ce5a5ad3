"""
risk/correlation.py
Crisis blending of a correlation matrix toward the all-ones matrix.

    R_new = (1 - skew) * R_base + skew * J

skew is not clamped; values outside [0, 1] extrapolate. The result is
generally not a valid correlation matrix and must be passed through
risk.nearest_pd before use.
"""

import numpy as np

from risk.errors import DimensionMismatch


def as_square_matrix(matrix, name: str = "matrix") -> np.ndarray:
    """Return a float64 copy of ``matrix``, raising if it is not N x N."""
    m = np.array(matrix, dtype=np.float64)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        n = m.shape[0] if m.ndim >= 1 else 0
        raise DimensionMismatch(
            expected={name: n * n},
            actual={name: int(m.size)},
        )
    return m


def blend_correlation(r_base, skew: float) -> np.ndarray:
    """Convex (or extrapolated) blend of ``r_base`` with the all-ones matrix."""
    r = as_square_matrix(r_base, "correlation")
    ones = np.ones_like(r)
    return (1.0 - skew) * r + skew * ones
