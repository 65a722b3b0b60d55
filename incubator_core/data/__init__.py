"""Preparation of raw campaign payloads for the financial engine."""

from .prep import (
    DEFAULT_FINANCIAL_PROJECTIONS, coerce_number, is_valid_projections, coerce_projections,
    select_projections, total_capital_injection, build_active_financials, interpolate_to_monthly,
)

__all__ = [
    "DEFAULT_FINANCIAL_PROJECTIONS", "coerce_number", "is_valid_projections", "coerce_projections",
    "select_projections", "total_capital_injection", "build_active_financials", "interpolate_to_monthly",
]
