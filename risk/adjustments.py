"""
risk/adjustments.py
Element-wise drift and volatility shocks.

    mu_new    = mu_base + delta_mu
    sigma_new = sigma_base * multiplier
"""

import numpy as np

from risk.errors import DimensionMismatch


def _check_same_length(base: np.ndarray, other: np.ndarray, other_name: str) -> None:
    if base.shape != other.shape:
        raise DimensionMismatch(
            expected={"base": base.size, other_name: base.size},
            actual={"base": base.size, other_name: other.size},
        )


def adjust_drift(base, delta) -> np.ndarray:
    """Shift expected returns: result[i] = base[i] + delta[i]."""
    base  = np.asarray(base, dtype=np.float64).ravel()
    delta = np.asarray(delta, dtype=np.float64).ravel()
    _check_same_length(base, delta, "delta")
    return base + delta


def adjust_vol(base, multiplier) -> np.ndarray:
    """Scale volatilities: result[i] = base[i] * multiplier[i]."""
    base       = np.asarray(base, dtype=np.float64).ravel()
    multiplier = np.asarray(multiplier, dtype=np.float64).ravel()
    _check_same_length(base, multiplier, "multiplier")
    return base * multiplier
