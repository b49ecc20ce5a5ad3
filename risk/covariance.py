"""
risk/covariance.py
Covariance reconstruction and Cholesky factorisation.

    Sigma = D . R . D,   D = diag(sigma)
    L L^T = Sigma,       L lower-triangular
"""

import numpy as np
import scipy.linalg

from risk.correlation import as_square_matrix
from risk.errors import DimensionMismatch, FactorizationFailure

NOT_PD_REASON = "Cholesky decomposition failed: matrix is not positive-definite"


def rebuild_covariance(sigma, corr) -> np.ndarray:
    """
    Rescale a correlation matrix by volatilities.

    Positive-definite whenever ``corr`` is PD and every volatility is
    strictly positive. Volatilities are not validated here.
    """
    sigma = np.asarray(sigma, dtype=np.float64).ravel()
    r = as_square_matrix(corr, "correlation")
    if r.shape[0] != sigma.size:
        raise DimensionMismatch(
            expected={"sigma": r.shape[0], "correlation": r.size},
            actual={"sigma": sigma.size, "correlation": r.size},
        )
    return sigma[:, None] * r * sigma[None, :]


def cholesky_decompose(cov) -> np.ndarray:
    """
    Lower-triangular Cholesky factor of a covariance matrix.

    Raises FactorizationFailure when a non-positive pivot is met or the
    matrix holds non-finite values. Strictly-upper entries are exactly 0.
    """
    sigma = as_square_matrix(cov, "covariance")
    if not np.all(np.isfinite(sigma)):
        raise FactorizationFailure(f"{NOT_PD_REASON} (non-finite entries)")
    try:
        l = scipy.linalg.cholesky(sigma, lower=True, check_finite=False)
    except np.linalg.LinAlgError as exc:
        raise FactorizationFailure(NOT_PD_REASON) from exc
    return np.tril(l)
