"""
Shock Engine — Nearest Correlation Matrix (Higham Alternating Projections)
Copyright (c) 2025 VDG Venkatesh. All Rights Reserved.

PROPRIETARY AND CONFIDENTIAL
This source code is the exclusive intellectual property of VDG Venkatesh.
Unauthorized use, reproduction, distribution, or modification of this code,
in whole or in part, without the express written consent of VDG Venkatesh
is strictly prohibited.

Description:
    Projects an arbitrary square matrix onto the set of symmetric,
    unit-diagonal, strictly positive-definite matrices using Higham's (2002)
    alternating projections with Dykstra's correction:

        Y  = (M + M^T) / 2,  DS = 0
        repeat (at most HIGHAM_MAX_ITER):
            R  = Y - DS
            X  = V diag(max(lambda, floor)) V^T      (R = V diag(lambda) V^T)
            DS = X - R
            Y  = X with diag(Y) = 1
            stop if ||Y - X||_F < 10 * floor
        return sym(Y) with unit diagonal

    The eigenvalue floor keeps every eigenvalue strictly positive so the
    result is always Cholesky-factorisable. The projector never raises on
    non-convergence; the best available estimate is returned.

    For any input that was not already PD the nearest point sits on the
    floor, so forcing the unit diagonal routinely leaves the smallest
    eigenvalue at or below zero, converged or not. In that case the last
    floored iterate X is rescaled to unit diagonal, D^-1/2 X D^-1/2, and
    the result is flagged ``rescaled``. Valid inputs pass through untouched.

    The symmetric eigensolver is injected. Three are provided:
    numpy (LAPACK syevd), scipy (LAPACK syevr) and a numba-compiled cyclic
    Jacobi kernel.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import scipy.linalg
from numba import njit

from environment.env_config import (
    DEFAULT_EIGENSOLVER,
    HIGHAM_EIG_FLOOR,
    HIGHAM_MAX_ITER,
    HIGHAM_TOL_MULTIPLIER,
    JACOBI_MAX_SWEEPS,
    JACOBI_TOL,
)
from risk.correlation import as_square_matrix

log = logging.getLogger(__name__)

# (symmetric matrix) -> (eigenvalues, eigenvectors as columns)
EigenSolver = Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]]


# ============================================================
# EIGENSOLVERS
# ============================================================
def numpy_eigh(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Symmetric eigendecomposition via numpy.linalg.eigh."""
    return np.linalg.eigh(matrix)


def scipy_eigh(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Symmetric eigendecomposition via scipy.linalg.eigh."""
    return scipy.linalg.eigh(matrix, check_finite=False)


@njit(fastmath=False)
def _jacobi_eigh_njit(
    a: np.ndarray,
    max_sweeps: int,
    tol: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Cyclic Jacobi eigenvalue iteration for a symmetric matrix.

    Parameters
    ----------
    a          : (N, N) symmetric array (not modified)
    max_sweeps : maximum number of full off-diagonal sweeps
    tol        : stop when off-diagonal norm <= tol * ||a||_F

    Returns
    -------
    (N,) eigenvalues (unsorted), (N, N) eigenvectors as columns
    """
    n = a.shape[0]
    A = a.copy()
    V = np.eye(n)

    scale = 0.0
    for i in range(n):
        for j in range(n):
            scale += A[i, j] * A[i, j]
    scale = np.sqrt(scale)
    if scale == 0.0:
        scale = 1.0

    for _ in range(max_sweeps):
        off = 0.0
        for i in range(n):
            for j in range(i + 1, n):
                off += A[i, j] * A[i, j]
        if np.sqrt(2.0 * off) <= tol * scale:
            break

        for p in range(n - 1):
            for q in range(p + 1, n):
                apq = A[p, q]
                if apq == 0.0:
                    continue
                theta = (A[q, q] - A[p, p]) / (2.0 * apq)
                if theta >= 0.0:
                    t = 1.0 / (theta + np.sqrt(theta * theta + 1.0))
                else:
                    t = -1.0 / (-theta + np.sqrt(theta * theta + 1.0))
                c = 1.0 / np.sqrt(t * t + 1.0)
                s = t * c

                # A <- A P
                for k in range(n):
                    akp = A[k, p]
                    akq = A[k, q]
                    A[k, p] = c * akp - s * akq
                    A[k, q] = s * akp + c * akq
                # A <- P^T A
                for k in range(n):
                    apk = A[p, k]
                    aqk = A[q, k]
                    A[p, k] = c * apk - s * aqk
                    A[q, k] = s * apk + c * aqk
                # V <- V P
                for k in range(n):
                    vkp = V[k, p]
                    vkq = V[k, q]
                    V[k, p] = c * vkp - s * vkq
                    V[k, q] = s * vkp + c * vkq

    vals = np.empty(n, dtype=np.float64)
    for i in range(n):
        vals[i] = A[i, i]
    return vals, V


def jacobi_eigh(
    matrix: np.ndarray,
    max_sweeps: int = JACOBI_MAX_SWEEPS,
    tol: float = JACOBI_TOL,
) -> Tuple[np.ndarray, np.ndarray]:
    """Numba-compiled Jacobi eigensolver, eigenvalues sorted ascending like eigh."""
    a = np.ascontiguousarray(matrix, dtype=np.float64)
    vals, vecs = _jacobi_eigh_njit(a, max_sweeps, tol)
    order = np.argsort(vals)
    return vals[order], vecs[:, order]


EIGENSOLVERS: Dict[str, EigenSolver] = {
    "numpy":  numpy_eigh,
    "scipy":  scipy_eigh,
    "jacobi": jacobi_eigh,
}


def get_eigensolver(name: Optional[str] = None) -> EigenSolver:
    """Look up an eigensolver by name (defaults to DEFAULT_EIGENSOLVER)."""
    key = (name or DEFAULT_EIGENSOLVER).lower()
    try:
        return EIGENSOLVERS[key]
    except KeyError:
        raise ValueError(
            f"Unknown eigensolver '{name}'. Choose from {sorted(EIGENSOLVERS)}"
        ) from None


def _resolve_solver(eigensolver) -> EigenSolver:
    if eigensolver is None or isinstance(eigensolver, str):
        return get_eigensolver(eigensolver)
    return eigensolver


# ============================================================
# HIGHAM PROJECTION
# ============================================================
@dataclass
class NearestPDResult:
    """Projected matrix plus convergence diagnostics."""
    matrix: np.ndarray
    iterations: int
    converged: bool
    residual: float
    rescaled: bool = False

    @property
    def min_eigenvalue(self) -> float:
        return float(np.linalg.eigvalsh(self.matrix).min())


def nearest_pd_with_info(
    matrix,
    max_iter: int = HIGHAM_MAX_ITER,
    eps: float = HIGHAM_EIG_FLOOR,
    eigensolver=None,
) -> NearestPDResult:
    """
    Higham nearest-correlation projection returning diagnostics.

    Args:
        matrix      : square array-like, symmetric in intent.
        max_iter    : iteration cap (loop always terminates).
        eps         : eigenvalue floor; convergence tolerance is
                      HIGHAM_TOL_MULTIPLIER * eps.
        eigensolver : callable or registered solver name; None uses the
                      configured default.
    Returns:
        NearestPDResult with the symmetric, unit-diagonal PD matrix.
    """
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter}")
    solve = _resolve_solver(eigensolver)
    m = as_square_matrix(matrix, "correlation")
    n = m.shape[0]
    tol = eps * HIGHAM_TOL_MULTIPLIER

    y  = 0.5 * (m + m.T)
    ds = np.zeros((n, n), dtype=np.float64)

    iterations = 0
    converged  = False
    residual   = np.inf
    for _ in range(max_iter):
        iterations += 1
        r = y - ds

        # Project onto the PSD cone, floored to keep strict PD
        vals, vecs = solve(r)
        vals = np.maximum(vals, eps)
        x_pos = (vecs * vals) @ vecs.T

        ds = x_pos - r

        # Project onto the unit-diagonal set
        y = x_pos.copy()
        np.fill_diagonal(y, 1.0)

        residual = float(np.linalg.norm(y - x_pos))
        if residual < tol:
            converged = True
            break

    if not converged:
        log.debug(
            f"[NearestPD] no convergence after {iterations} iterations "
            f"(residual={residual:.3e}, tol={tol:.1e}, N={n})"
        )

    out = 0.5 * (y + y.T)
    np.fill_diagonal(out, 1.0)

    # Forcing the diagonal can push the smallest eigenvalue below zero when
    # the loop stops short. Fall back to the floored PSD iterate rescaled to
    # unit diagonal (a congruence, so it stays PD).
    rescaled = False
    if n and np.linalg.eigvalsh(out).min() <= 0.0:
        d = np.sqrt(np.diag(x_pos))
        out = x_pos / np.outer(d, d)
        out = 0.5 * (out + out.T)
        np.fill_diagonal(out, 1.0)
        rescaled = True
        log.debug(f"[NearestPD] rescaled floored iterate to unit diagonal (N={n})")

    return NearestPDResult(
        matrix=out,
        iterations=iterations,
        converged=converged,
        residual=residual,
        rescaled=rescaled,
    )


def nearest_pd(
    matrix,
    max_iter: int = HIGHAM_MAX_ITER,
    eps: float = HIGHAM_EIG_FLOOR,
    eigensolver=None,
) -> np.ndarray:
    """Nearest valid (symmetric, unit-diagonal, PD) correlation matrix."""
    return nearest_pd_with_info(matrix, max_iter, eps, eigensolver).matrix


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    bad = np.full((3, 3), 0.9)
    np.fill_diagonal(bad, 1.0)
    bad[0, 2] = bad[2, 0] = -0.9
    res = nearest_pd_with_info(bad)
    print(res.matrix)
    print(f"iterations={res.iterations} converged={res.converged} "
          f"min_eig={res.min_eigenvalue:.3e}")
