"""
Shock Engine — Stressed Covariance Pipeline
Copyright (c) 2025 VDG Venkatesh. All Rights Reserved.

PROPRIETARY AND CONFIDENTIAL
This source code is the exclusive intellectual property of VDG Venkatesh.
Unauthorized use, reproduction, distribution, or modification of this code,
in whole or in part, without the express written consent of VDG Venkatesh
is strictly prohibited.

Description:
    Applies a macro shock to a portfolio's baseline parameters and returns
    a Cholesky factor ready for correlated Monte Carlo draws:

        1. mu'    = mu + delta_mu
        2. sigma' = sigma * multiplier
        3. R_b    = (1 - skew) R + skew J
        4. R*     = nearest_pd(R_b)               (Higham)
        5. Sigma  = diag(sigma') R* diag(sigma')
        6. L      = chol(Sigma)

    Inputs arrive as single precision; every linear-algebra step runs in
    float64 and results are packed back to float32. Jump-diffusion scalars
    are checked for finiteness and passed through unchanged.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from risk.adjustments import adjust_drift, adjust_vol
from risk.correlation import blend_correlation
from risk.covariance import cholesky_decompose, rebuild_covariance
from risk.errors import DimensionMismatch
from risk.nearest_pd import nearest_pd_with_info

log = logging.getLogger(__name__)


# ============================================================
# RESULT RECORD
# ============================================================
@dataclass(frozen=True)
class EngineResult:
    """Packed pipeline output (float32 buffers, row-major Cholesky factor)."""
    adjusted_drift: np.ndarray
    adjusted_vol: np.ndarray
    cholesky_l: np.ndarray
    num_assets: int
    jump_lambda: float
    jump_mean: float
    jump_vol: float

    def cholesky_matrix(self) -> np.ndarray:
        """(N, N) view of the flattened Cholesky factor."""
        return self.cholesky_l.reshape(self.num_assets, self.num_assets)

    def covariance(self) -> np.ndarray:
        """Stressed covariance L L^T, recomputed in float64."""
        l = self.cholesky_matrix().astype(np.float64)
        return l @ l.T

    @property
    def jump_params(self) -> Dict[str, float]:
        return {
            "jump_lambda": self.jump_lambda,
            "jump_mean":   self.jump_mean,
            "jump_vol":    self.jump_vol,
        }

    def to_frame(self, assets: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Adjusted drift / vol per asset as a DataFrame."""
        index = list(assets) if assets is not None else list(range(self.num_assets))
        return pd.DataFrame(
            {
                "adjusted_drift": self.adjusted_drift,
                "adjusted_vol":   self.adjusted_vol,
            },
            index=index,
        )

    def cholesky_frame(self, assets: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Cholesky factor labelled by asset on both axes."""
        labels = list(assets) if assets is not None else list(range(self.num_assets))
        return pd.DataFrame(self.cholesky_matrix(), index=labels, columns=labels)


# ============================================================
# VALIDATION
# ============================================================
def _as_f32(buf) -> np.ndarray:
    return np.asarray(buf, dtype=np.float32).ravel()


def validate_lengths(num_assets: int, buffers: Dict[str, np.ndarray]) -> None:
    """
    Check every buffer against N before any computation.

    ``buffers`` maps name -> array; the "corr" buffer must hold N*N
    entries, every other buffer N. All sizes are reported on failure.
    """
    expected = {
        name: num_assets * num_assets if name == "corr" else num_assets
        for name in buffers
    }
    actual = {name: int(buf.size) for name, buf in buffers.items()}
    if expected != actual:
        raise DimensionMismatch(expected, actual, num_assets=num_assets)


def _check_finite_scalars(**scalars: float) -> None:
    bad = [name for name, v in scalars.items() if not math.isfinite(v)]
    if bad:
        raise ValueError(f"Non-finite scalar parameter(s): {', '.join(bad)}")


# ============================================================
# PIPELINE
# ============================================================
def compute_shock(
    num_assets: int,
    base_drift,
    base_vol,
    base_correlation,
    delta_drift,
    vol_multiplier,
    correlation_skew: float,
    jump_lambda: float,
    jump_mean: float,
    jump_vol: float,
    *,
    eigensolver=None,
) -> EngineResult:
    """
    Run the six-stage shock pipeline on flat buffers.

    Args:
        num_assets       : N, positive integer.
        base_drift       : (N,) annualised expected returns.
        base_vol         : (N,) annualised volatilities.
        base_correlation : (N*N,) row-major correlation matrix.
        delta_drift      : (N,) additive drift shocks.
        vol_multiplier   : (N,) multiplicative vol shocks.
        correlation_skew : blend weight toward the all-ones matrix.
        jump_lambda, jump_mean, jump_vol : pass-through jump scalars.
        eigensolver      : solver name or callable for the PD projector.
    Returns:
        EngineResult with float32 buffers.
    Raises:
        DimensionMismatch    : N < 1 or any buffer length disagrees with N.
        TypeError            : N is not an integer.
        FactorizationFailure : the stressed covariance is not PD.
        ValueError           : a buffer entry or scalar parameter is not finite.
    """
    n = num_assets
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise TypeError(f"num_assets must be an integer, got {type(n).__name__}")
    n = int(n)
    if n < 1:
        # at least one asset
        raise DimensionMismatch(expected={"num_assets": 1}, actual={"num_assets": n})

    buffers = {
        "drift": _as_f32(base_drift),
        "vol":   _as_f32(base_vol),
        "corr":  _as_f32(base_correlation),
        "dd":    _as_f32(delta_drift),
        "vm":    _as_f32(vol_multiplier),
    }
    validate_lengths(n, buffers)
    bad = [name for name, buf in buffers.items() if not np.all(np.isfinite(buf))]
    if bad:
        raise ValueError(f"Non-finite values in buffer(s): {', '.join(bad)}")

    skew  = float(np.float32(correlation_skew))
    j_lam = float(np.float32(jump_lambda))
    j_mu  = float(np.float32(jump_mean))
    j_sig = float(np.float32(jump_vol))
    _check_finite_scalars(
        correlation_skew=skew,
        jump_lambda=j_lam,
        jump_mean=j_mu,
        jump_vol=j_sig,
    )

    # f32 -> f64 for the linear algebra
    bd = buffers["drift"].astype(np.float64)
    bv = buffers["vol"].astype(np.float64)
    bc = buffers["corr"].astype(np.float64).reshape(n, n)
    dd = buffers["dd"].astype(np.float64)
    vm = buffers["vm"].astype(np.float64)

    adj_drift = adjust_drift(bd, dd)
    adj_vol   = adjust_vol(bv, vm)
    blended   = blend_correlation(bc, skew)
    projected = nearest_pd_with_info(blended, eigensolver=eigensolver)
    cov       = rebuild_covariance(adj_vol, projected.matrix)
    l         = cholesky_decompose(cov)

    log.info(
        f"[ShockEngine] N={n} skew={skew:.3f} "
        f"higham_iter={projected.iterations} converged={projected.converged} "
        f"max_vol={adj_vol.max():.4f}"
    )

    return EngineResult(
        adjusted_drift=adj_drift.astype(np.float32),
        adjusted_vol=adj_vol.astype(np.float32),
        cholesky_l=l.astype(np.float32).ravel(order="C"),
        num_assets=n,
        jump_lambda=j_lam,
        jump_mean=j_mu,
        jump_vol=j_sig,
    )


def run_scenario(portfolio, shock, *, eigensolver=None) -> EngineResult:
    """
    Run the pipeline for a Portfolio and a MacroShock.

    The shock's per-asset arrays must already match the portfolio size
    (see risk.stress_test.adapt_shock_to_portfolio).
    """
    return compute_shock(
        len(portfolio.assets),
        portfolio.base_drift,
        portfolio.base_vol,
        portfolio.base_correlation,
        shock.delta_drift,
        shock.vol_multiplier,
        shock.correlation_skew,
        shock.jump_lambda,
        shock.jump_mean,
        shock.jump_vol,
        eigensolver=eigensolver,
    )


def run_all_scenarios(portfolio, shocks: List, *, eigensolver=None) -> pd.DataFrame:
    """
    Run several shocks against one portfolio and summarise the results.

    One row per shock: skew, jump intensity, weighted adjusted drift and the
    stressed portfolio volatility sqrt(w' Sigma w).
    """
    w = np.asarray(portfolio.weights, dtype=np.float64)
    rows = []
    for sc in shocks:
        res = run_scenario(portfolio, sc, eigensolver=eigensolver)
        port_vol = float(np.sqrt(w @ res.covariance() @ w))
        port_drift = float(w @ res.adjusted_drift.astype(np.float64))
        rows.append({
            "shock":            sc.id,
            "name":             sc.name,
            "correlation_skew": sc.correlation_skew,
            "jump_lambda":      sc.jump_lambda,
            "portfolio_drift":  round(port_drift, 6),
            "portfolio_vol":    round(port_vol, 6),
        })
    return pd.DataFrame(rows).set_index("shock")
