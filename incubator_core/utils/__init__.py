"""Configuration and logging utilities."""

from .config import (
    WACC_DEFAULT, TAX_RATE_DEFAULT, IRR_GUESS, IRR_MAX_ITERATIONS, IRR_PRECISION,
    QUARTERS, MAX_RECALC_PASSES, NEW_ROW_LABEL, DEFAULT_COLUMN_YEAR,
    GRID_DISCOUNT_RATE, NET_CASH_FLOW_ROW, EBITDA_ROW,
    LOG_LEVEL, LOG_FORMAT,
)
from .logger import get_logger

__all__ = [
    "WACC_DEFAULT", "TAX_RATE_DEFAULT", "IRR_GUESS", "IRR_MAX_ITERATIONS", "IRR_PRECISION",
    "QUARTERS", "MAX_RECALC_PASSES", "NEW_ROW_LABEL", "DEFAULT_COLUMN_YEAR",
    "GRID_DISCOUNT_RATE", "NET_CASH_FLOW_ROW", "EBITDA_ROW",
    "LOG_LEVEL", "LOG_FORMAT", "get_logger",
]
