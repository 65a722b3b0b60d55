#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Interactive formula grid + sensitivity analysis on the demo campaign.

Steps:
  1. Recalculate the seed formula grid (Net Cash Flow = Revenue - Costs, ...)
     and optionally edit cells with "A1=..." style commands.
  2. Apply revenue/cost sensitivity (whole percent) to the demo quarterly
     projections and report per-quarter metrics plus NPV/IRR KPIs:
       NPV = I0 + sum(FCF_q / (1 + WACC)^q),   IRR on [0, FCF_q1..FCF_q4]
"""

import math
import sys
from typing import Optional

from incubator_core.data.prep import DEFAULT_FINANCIAL_PROJECTIONS, build_active_financials
from incubator_core.finance.logic import apply_sensitivity, calculate_all_kpis
from incubator_core.finance.report import quarterly_frame
from incubator_core.formula.grid import default_grid
from incubator_core.formula.refs import parse_cell_reference
from incubator_core.utils.config import WACC_DEFAULT


# ----------------------------- prompt helpers -----------------------------
def prompt_str(msg: str, default: Optional[str] = None) -> str:
    try:
        s = input(f"{msg}{' [' + default + ']' if default is not None else ''}: ").strip()
    except EOFError:
        s = ""
    return s if s else (default or "")

def prompt_float(msg: str, default: Optional[float]) -> Optional[float]:
    shown = f"{default:.2f}" if default is not None else "NA"
    try:
        s = input(f"{msg} [default {shown}]: ").strip()
    except EOFError:
        s = ""
    if s == "":
        return default
    try:
        return float(s)
    except ValueError:
        print("Invalid number. Using default.")
        return default


# ----------------------------- sections -----------------------------
def print_grid_kpis(grid):
    kpis = grid.kpi_summary()
    irr = "n/a" if math.isnan(kpis.irr) else f"{kpis.irr:.2%}"
    print(f"NPV: {kpis.npv:,.2f} | IRR: {irr} | EBITDA: {kpis.ebitda:,.2f}")


def run_grid_editor():
    grid = default_grid().recalculate()
    print("\n--- Formula grid ---")
    print(grid.to_frame().to_string(float_format=lambda x: f"{x:,.2f}"))
    print_grid_kpis(grid)

    print("\nEdit cells as REF=TEXT (e.g. B2=110000 or A5==AVERAGE(A1:D1)); empty line to finish.")
    while True:
        cmd = prompt_str("Edit")
        if not cmd:
            break
        ref_text, sep, text = cmd.partition("=")
        ref = parse_cell_reference(ref_text.strip().upper())
        if not sep or ref is None or ref.row >= len(grid.rows) or ref.col >= len(grid.columns):
            print(f"Not a cell in this grid: {ref_text!r}")
            continue
        grid.set_cell(ref.row, ref.col, text)
        grid = grid.recalculate()
        print(grid.to_frame().to_string(float_format=lambda x: f"{x:,.2f}"))
        print_grid_kpis(grid)


def run_sensitivity():
    financials = build_active_financials({"financials": {"financial_projections": DEFAULT_FINANCIAL_PROJECTIONS}})

    print("\n--- Sensitivity inputs (whole percent; press Enter to use default) ---")
    revenue_pct = prompt_float("Revenue variation (%)", 0.0)
    cost_pct = prompt_float("Cost variation (%)", 0.0)
    initial_investment = prompt_float("Initial investment (negative for an outflow)", 0.0)

    adjusted = apply_sensitivity(financials, revenue_pct, cost_pct)
    kpis = calculate_all_kpis(adjusted, initial_investment)

    print("\nQuarterly projections:")
    print(quarterly_frame(financials, adjusted).to_string(index=False))

    print("\n--- KPIs ---")
    print("Total gross profit: {:,.2f}".format(kpis.gross_profit))
    print("Total EBITDA: {:,.2f}".format(kpis.ebitda))
    print("NPV @ WACC {:.0%}: {:,.2f}".format(WACC_DEFAULT, kpis.npv))
    if math.isnan(kpis.irr):
        print("IRR: not defined for these cash flows")
    else:
        print("IRR: {:.4%}".format(kpis.irr))


# ----------------------------- main -----------------------------
def main():
    print("\n=== Incubator dashboard engines: formula grid + sensitivity analysis ===")
    run_grid_editor()
    run_sensitivity()

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(130)
