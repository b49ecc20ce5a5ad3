"""risk — Stressed Covariance Engine

Drift/vol shocks, crisis correlation blending, Higham nearest-correlation
projection, covariance rebuild and Cholesky factorisation, plus the
macro shock scenario library.
"""
from risk.errors import DimensionMismatch, FactorizationFailure, ShockEngineError
from risk.shock_engine import EngineResult, compute_shock, run_scenario

__all__ = [
    "DimensionMismatch",
    "FactorizationFailure",
    "ShockEngineError",
    "EngineResult",
    "compute_shock",
    "run_scenario",
]
