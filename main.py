import logging

from environment.env_config import LOG_FORMAT, LOG_LEVEL
from portfolio.builder import DEFAULT_PORTFOLIO, build_portfolio_from_allocations, get_preset
from risk.shock_engine import run_all_scenarios, run_scenario
from risk.stress_test import SHOCK_LIST, adapt_shock_to_portfolio, get_shock


def run_shock_engine():
    """
    Main entry point for the stressed-market shock engine demo.
    Ownership: Copyright (c) 2026 VDG Venkatesh. All Rights Reserved.
    PROPRIETARY AND CONFIDENTIAL. UNAUTHORIZED USE PROHIBITED.
    """
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    print("--- Starting Shock Engine Pipeline ---")

    # 1. Default 3-asset portfolio under the Black Swan preset
    print("Step 1: Black Swan on the default portfolio...")
    result = run_scenario(DEFAULT_PORTFOLIO, get_shock("black_swan"))
    print(result.to_frame(DEFAULT_PORTFOLIO.assets))
    print("Cholesky factor:")
    print(result.cholesky_frame(DEFAULT_PORTFOLIO.assets))
    print(f"Jump params: {result.jump_params}")

    # 2. Scenario sweep
    print("Step 2: Preset sweep...")
    print(run_all_scenarios(DEFAULT_PORTFOLIO, SHOCK_LIST))

    # 3. Catalogue-built portfolio with resized shocks
    print("Step 3: Conservative preset, shocks adapted per asset class...")
    alloc = get_preset("conservative").allocations
    portfolio = build_portfolio_from_allocations(alloc)
    shocks = [adapt_shock_to_portfolio(sc.id, alloc) for sc in SHOCK_LIST]
    print(run_all_scenarios(portfolio, shocks))

    print("--- Shock Engine Pipeline Completed ---")


if __name__ == "__main__":
    run_shock_engine()
