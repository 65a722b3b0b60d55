#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration module: centralize all environment variables and defaults.
Supports easy overrides without modifying code.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# ========== FINANCIAL DEFAULTS ==========
# Weighted Average Cost of Capital, default NPV discount rate
WACC_DEFAULT = float(os.getenv("WACC_DEFAULT", "0.15"))

# Flat tax rate applied to quarterly EBITDA
TAX_RATE_DEFAULT = float(os.getenv("TAX_RATE_DEFAULT", "0.25"))

# Newton-Raphson settings for IRR
IRR_GUESS = float(os.getenv("IRR_GUESS", "0.1"))
IRR_MAX_ITERATIONS = int(os.getenv("IRR_MAX_ITERATIONS", "1000"))
IRR_PRECISION = float(os.getenv("IRR_PRECISION", "1e-7"))

# Quarter keys of a projection set (fixed quarterly cadence)
QUARTERS = ("q1", "q2", "q3", "q4")

# ========== FORMULA GRID DEFAULTS ==========
# Upper bound of recalculation passes over a grid
MAX_RECALC_PASSES = int(os.getenv("MAX_RECALC_PASSES", "10"))

# Labels used when rows/columns are appended to a grid
NEW_ROW_LABEL = os.getenv("NEW_ROW_LABEL", "New metric")
DEFAULT_COLUMN_YEAR = os.getenv("DEFAULT_COLUMN_YEAR", "2024")

# Grid headline figures: discount rate and the row names they are read from
GRID_DISCOUNT_RATE = float(os.getenv("GRID_DISCOUNT_RATE", "0.10"))
NET_CASH_FLOW_ROW = os.getenv("NET_CASH_FLOW_ROW", "Net Cash Flow")
EBITDA_ROW = os.getenv("EBITDA_ROW", "EBITDA")

# ========== LOGGING CONFIGURATION ==========
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s [%(levelname)s] %(name)s: %(message)s")

if __name__ == "__main__":
    print("=" * 60)
    print("Configuration Summary")
    print("=" * 60)
    print(f"WACC (NPV discount rate): {WACC_DEFAULT}")
    print(f"Tax rate: {TAX_RATE_DEFAULT}")
    print(f"IRR: guess={IRR_GUESS}, max_iter={IRR_MAX_ITERATIONS}, precision={IRR_PRECISION}")
    print(f"Max recalculation passes: {MAX_RECALC_PASSES}")
    print(f"New row label: {NEW_ROW_LABEL}")
    print(f"Default column year: {DEFAULT_COLUMN_YEAR}")
    print(f"Grid discount rate: {GRID_DISCOUNT_RATE}")
    print(f"Log Level: {LOG_LEVEL}")
    print("=" * 60)
