"""Portfolio construction from the asset-class catalogue.

Builds the baseline (drift, vol, correlation) inputs for the shock engine
from asset-class allocations, preset portfolios, or an uploaded holdings
file of ``Ticker, Weight`` lines.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from environment.env_config import load_settings

log = logging.getLogger(__name__)


@dataclass
class AssetClassInfo:
    id: str
    name: str
    base_drift: float      # annualised expected return
    base_vol: float        # annualised volatility
    color: str = ""
    description: str = ""


@dataclass
class PortfolioPreset:
    id: str
    name: str
    allocations: Dict[str, float]   # asset class id -> weight (0-1)


@dataclass
class Portfolio:
    """Baseline state of a portfolio, index-aligned across all arrays."""
    assets: List[str]
    weights: List[float]               # sums to 1.0
    base_drift: List[float]
    base_vol: List[float]
    base_correlation: List[float]      # flattened N x N, row-major

    @property
    def num_assets(self) -> int:
        return len(self.assets)

    def correlation_matrix(self) -> pd.DataFrame:
        n = self.num_assets
        return pd.DataFrame(
            np.asarray(self.base_correlation, dtype=float).reshape(n, n),
            index=self.assets,
            columns=self.assets,
        )

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "weight":     self.weights,
                "base_drift": self.base_drift,
                "base_vol":   self.base_vol,
            },
            index=self.assets,
        )


@dataclass
class ParseError:
    line: int
    text: str
    error: str


# ---------------------------------------------------------------------------
# Catalogue (loaded from environment/settings.yaml)
# ---------------------------------------------------------------------------
_SETTINGS = load_settings()

ASSET_CLASSES: List[AssetClassInfo] = [
    AssetClassInfo(**ac) for ac in _SETTINGS["asset_classes"]
]

BASE_CORRELATIONS: Dict[str, Dict[str, float]] = _SETTINGS["base_correlations"]

PORTFOLIO_PRESETS: List[PortfolioPreset] = [
    PortfolioPreset(**p) for p in _SETTINGS["portfolio_presets"]
]

TICKER_MAP: Dict[str, str] = {
    ticker.upper(): class_id
    for class_id, tickers in _SETTINGS["ticker_map"].items()
    for ticker in tickers
}

def get_preset(preset_id: str) -> PortfolioPreset:
    for p in PORTFOLIO_PRESETS:
        if p.id == preset_id:
            return p
    raise KeyError(f"Unknown portfolio preset: {preset_id}")


def resolve_ticker_to_asset_class(ticker: str) -> Optional[str]:
    """Map a ticker to its asset class id (case-insensitive), or None."""
    return TICKER_MAP.get(ticker.strip().upper())


def _resolve_name(name_or_ticker: str) -> Optional[str]:
    class_id = resolve_ticker_to_asset_class(name_or_ticker)
    if class_id:
        return class_id
    key = name_or_ticker.strip().lower()
    for ac in ASSET_CLASSES:
        if ac.name.lower() == key or ac.id == key:
            return ac.id
    return None


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
def build_portfolio_from_allocations(allocations: Dict[str, float]) -> Portfolio:
    """
    Build a Portfolio from asset-class weights.

    Only classes with weight > 0 are kept, in catalogue order; weights are
    normalised to sum to 1. An empty allocation falls back to the
    Balanced preset.
    """
    entries = [
        (ac, float(allocations.get(ac.id, 0.0)))
        for ac in ASSET_CLASSES
        if allocations.get(ac.id, 0.0) > 0
    ]
    if not entries:
        log.info("Empty allocation; falling back to the balanced preset")
        return build_portfolio_from_allocations(get_preset("balanced").allocations)

    total = sum(w for _, w in entries)
    ids = [ac.id for ac, _ in entries]
    corr = [BASE_CORRELATIONS[i][j] for i in ids for j in ids]

    return Portfolio(
        assets=[ac.name for ac, _ in entries],
        weights=[w / total for _, w in entries],
        base_drift=[ac.base_drift for ac, _ in entries],
        base_vol=[ac.base_vol for ac, _ in entries],
        base_correlation=corr,
    )


# Equities / Bonds / Commodities at 60 / 30 / 10
DEFAULT_PORTFOLIO = build_portfolio_from_allocations(get_preset("balanced").allocations)


def parse_holdings_csv(text: str) -> Tuple[Dict[str, float], List[ParseError]]:
    """
    Parse ``Ticker, Weight`` (or ``AssetClass, Weight``) lines.

    Separators may be commas, tabs or semicolons; a trailing ``%`` on the
    weight is ignored and a header row is skipped when it mentions
    ticker/asset/weight. Weights are summed per asset class and
    normalised to fractions. Bad lines are returned as ParseError records
    (line numbers count non-blank lines, starting at 1).

    Returns:
        (allocations, errors) — allocations is empty if nothing parsed.
    """
    lines = [l for l in text.strip().splitlines() if l.strip()]
    errors: List[ParseError] = []
    class_weights = {ac.id: 0.0 for ac in ASSET_CLASSES}
    if not lines:
        return {}, errors

    first = lines[0].lower()
    start = 1 if ("ticker" in first or "asset" in first or "weight" in first) else 0

    for i in range(start, len(lines)):
        line = lines[i].strip()
        parts = [p.strip() for p in re.split(r"[,\t;]+", line)]
        if len(parts) < 2:
            errors.append(ParseError(i + 1, line,
                                     'Expected "Ticker, Weight" or "AssetClass, Weight"'))
            continue

        name, weight_str = parts[0], parts[1]
        try:
            weight = float(weight_str.replace("%", ""))
        except ValueError:
            weight = float("nan")
        if not np.isfinite(weight) or weight < 0:
            errors.append(ParseError(i + 1, line, f'Invalid weight: "{weight_str}"'))
            continue

        class_id = _resolve_name(name)
        if class_id is None:
            errors.append(ParseError(i + 1, line,
                                     f'Unknown ticker or asset class: "{name}"'))
            continue

        class_weights[class_id] += weight

    if errors:
        log.warning(f"Holdings file: {len(errors)} line(s) skipped")

    total = sum(class_weights.values())
    if total <= 0:
        return {}, errors
    return {k: v / total for k, v in class_weights.items()}, errors


if __name__ == "__main__":
    for preset in PORTFOLIO_PRESETS:
        pf = build_portfolio_from_allocations(preset.allocations)
        print(f"--- {preset.name} ---")
        print(pf.to_frame())
