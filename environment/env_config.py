"""
Shock Engine — Environment Configuration
Copyright (c) 2025 VDG Venkatesh. All Rights Reserved.

PROPRIETARY AND CONFIDENTIAL
This source code is the exclusive intellectual property of VDG Venkatesh.
Unauthorized use, reproduction, distribution, or modification of this code,
in whole or in part, without the express written consent of VDG Venkatesh
is strictly prohibited.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

# ============================================================
# HIGHAM NEAREST-CORRELATION PROJECTION
# ============================================================
HIGHAM_MAX_ITER            = 100                                # hard iteration cap
HIGHAM_EIG_FLOOR           = 1e-10                              # eigenvalue floor (strict PD)
HIGHAM_TOL_MULTIPLIER      = 10.0                               # stop when ||Y - X||_F < 10 * floor

# ============================================================
# EIGENSOLVERS
# ============================================================
DEFAULT_EIGENSOLVER        = os.getenv("SHOCK_EIGENSOLVER", "numpy")   # numpy | scipy | jacobi
JACOBI_MAX_SWEEPS          = 100
JACOBI_TOL                 = 1e-14                              # off-diagonal Frobenius norm

# ============================================================
# PRESET DATA (asset classes, portfolios, shocks)
# ============================================================
SETTINGS_PATH              = os.getenv(
    "SHOCK_SETTINGS_PATH",
    str(Path(__file__).resolve().parent / "settings.yaml"),
)

# ============================================================
# LOGGING
# ============================================================
LOG_LEVEL                  = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT                 = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


# ============================================================
# ENVIRONMENT DATACLASS (typed access)
# ============================================================
@dataclass(frozen=True)
class ShockEngineEnvConfig:
    """Typed environment configuration for the shock engine."""
    # Higham projection
    higham_max_iter: int           = HIGHAM_MAX_ITER
    higham_eig_floor: float        = HIGHAM_EIG_FLOOR
    higham_tol_multiplier: float   = HIGHAM_TOL_MULTIPLIER

    # Eigensolvers
    default_eigensolver: str       = DEFAULT_EIGENSOLVER
    jacobi_max_sweeps: int         = JACOBI_MAX_SWEEPS
    jacobi_tol: float              = JACOBI_TOL

    # Data / logging
    settings_path: str             = SETTINGS_PATH
    log_level: str                 = LOG_LEVEL


# Singleton config instance
ENV = ShockEngineEnvConfig()


@lru_cache(maxsize=None)
def load_settings(path: str = SETTINGS_PATH) -> dict:
    """Read the preset YAML once per path and return the parsed mapping."""
    with open(path, "r") as f:
        return yaml.safe_load(f)


def print_env_summary() -> None:
    """Print a summary of the active environment configuration."""
    print("=" * 60)
    print("  Shock Engine — Environment Summary")
    print("=" * 60)
    print(f"  Higham         : max_iter={HIGHAM_MAX_ITER}, floor={HIGHAM_EIG_FLOOR:g}")
    print(f"  Eigensolver    : {DEFAULT_EIGENSOLVER}")
    print(f"  Jacobi         : sweeps={JACOBI_MAX_SWEEPS}, tol={JACOBI_TOL:g}")
    print(f"  Settings       : {SETTINGS_PATH}")
    print(f"  Log Level      : {LOG_LEVEL}")
    print("=" * 60)


if __name__ == "__main__":
    print_env_summary()
