"""
risk/errors.py
Error types raised by the shock engine pipeline.
"""

from typing import Dict, Optional


class ShockEngineError(Exception):
    """Base class for all shock engine failures."""


class DimensionMismatch(ShockEngineError, ValueError):
    """
    One or more input buffers do not match the declared asset count.

    Carries the expected and actual size of every buffer so callers can
    fix all of them in one pass.
    """

    def __init__(
        self,
        expected: Dict[str, int],
        actual: Dict[str, int],
        num_assets: Optional[int] = None,
    ):
        self.expected   = dict(expected)
        self.actual     = dict(actual)
        self.num_assets = num_assets
        sizes = ", ".join(f"{k}={v}" for k, v in self.actual.items())
        if num_assets is not None:
            msg = f"Input length mismatch: expected N={num_assets}, got {sizes}"
        else:
            wanted = ", ".join(f"{k}={v}" for k, v in self.expected.items())
            msg = f"Input length mismatch: expected {wanted}, got {sizes}"
        super().__init__(msg)

    @property
    def mismatched(self) -> Dict[str, int]:
        """Buffers whose actual size differs from the expected size."""
        return {
            k: v for k, v in self.actual.items()
            if self.expected.get(k) != v
        }


class FactorizationFailure(ShockEngineError):
    """Cholesky factorisation could not proceed (matrix not positive-definite)."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
