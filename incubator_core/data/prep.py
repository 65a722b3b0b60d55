#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data preparation module: turns raw campaign payloads into engine inputs.
Handles projection source selection, numeric coercion, capital injection
totals and monthly interpolation of adjusted quarters.
"""

from datetime import date
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from ..finance.models import CampaignFinancials, FinancialProjections, FinancialProjectionsAdjusted
from ..utils import get_logger, QUARTERS

logger = get_logger(__name__)

PROJECTION_FIELDS = ("revenue", "cogs", "opex")

# Demo projections used when a campaign carries none
DEFAULT_FINANCIAL_PROJECTIONS: Dict[str, Dict[str, float]] = {
    "q1": {"revenue": 50000, "cogs": 20000, "opex": 15000},
    "q2": {"revenue": 75000, "cogs": 30000, "opex": 18000},
    "q3": {"revenue": 100000, "cogs": 40000, "opex": 22000},
    "q4": {"revenue": 150000, "cogs": 55000, "opex": 28000},
}


def coerce_number(value: Any) -> float:
    """Coerce a number or numeric string to float; anything else becomes 0.0."""
    if value is None or value == "":
        return 0.0
    num = pd.to_numeric(value, errors="coerce") if pd.api.types.is_scalar(value) else float("nan")
    if pd.isna(num):
        logger.warning(f"Non-numeric value {value!r} coerced to 0")
        return 0.0
    return float(num)


def is_valid_projections(data: Any) -> bool:
    """True when at least one quarter carries revenue, cogs or opex."""
    if not isinstance(data, Mapping):
        return False
    for q in QUARTERS:
        quarter = data.get(q)
        if isinstance(quarter, Mapping) and any(f in quarter for f in PROJECTION_FIELDS):
            return True
    return False


def coerce_projections(data: Mapping[str, Any]) -> FinancialProjections:
    """Build q1..q4 projections, zero-filling missing quarters and fields."""
    quarters = {}
    for q in QUARTERS:
        raw = data.get(q)
        if not isinstance(raw, Mapping):
            raw = {}
        quarters[q] = {f: coerce_number(raw.get(f)) for f in PROJECTION_FIELDS}
    return FinancialProjections.model_validate(quarters)


def select_projections(campaign: Mapping[str, Any]) -> FinancialProjections:
    """
    Pick the projection source of a campaign payload.

    Priority: financial_sheet.sheet_data, then financials.financial_projections,
    then DEFAULT_FINANCIAL_PROJECTIONS.
    """
    sheet_data = (campaign.get("financial_sheet") or {}).get("sheet_data")
    legacy = (campaign.get("financials") or {}).get("financial_projections")

    if is_valid_projections(sheet_data):
        return coerce_projections(sheet_data)
    if is_valid_projections(legacy):
        return coerce_projections(legacy)

    logger.info("No usable projections in campaign; using demo projections")
    return coerce_projections(DEFAULT_FINANCIAL_PROJECTIONS)


def total_capital_injection(rounds: Optional[List[Mapping[str, Any]]]) -> float:
    """
    Capital committed across funding rounds.

    A round's total_committed_amount wins when present; otherwise the
    amounts of its COMMITTED investors are summed.
    """
    total = 0.0
    for rnd in rounds or []:
        if rnd.get("total_committed_amount") is not None:
            total += coerce_number(rnd["total_committed_amount"])
            continue
        total += sum(
            coerce_number(inv.get("amount"))
            for inv in rnd.get("investors") or []
            if inv.get("status") == "COMMITTED"
        )
    return total


def _current_round(rounds: List[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    for rnd in rounds:
        if rnd.get("is_current"):
            return rnd
    return rounds[0] if rounds else None


def build_active_financials(campaign: Mapping[str, Any]) -> CampaignFinancials:
    """
    Assemble the CampaignFinancials fed to the sensitivity engine.

    Args:
        campaign: Raw campaign payload (financials, financial_sheet, rounds)

    Returns:
        CampaignFinancials with numeric fields coerced and the capital
        injection summed from the rounds
    """
    financials = campaign.get("financials") or {}
    rounds = campaign.get("rounds") or []
    current = _current_round(rounds) or {}

    pre_money = current.get("pre_money_valuation") or financials.get("pre_money_valuation")
    funding_goal = financials.get("funding_goal") or current.get("target_amount")

    return CampaignFinancials(
        financial_projections=select_projections(campaign),
        total_capital_injection=total_capital_injection(rounds),
        pre_money_valuation=coerce_number(pre_money),
        funding_goal=coerce_number(funding_goal),
        valuation=coerce_number(financials.get("valuation")),
        usage_of_funds=financials.get("usage_of_funds") or "",
        revenue_history=financials.get("revenue_history") or {},
        current_cash_balance=coerce_number(financials.get("current_cash_balance")),
        monthly_burn_rate=coerce_number(financials.get("monthly_burn_rate")),
    )


def interpolate_to_monthly(adjusted: FinancialProjectionsAdjusted, year: Optional[int] = None) -> pd.DataFrame:
    """
    Spread each adjusted quarter evenly over its three months.

    Args:
        adjusted: Output of apply_sensitivity
        year: Calendar year of the periods (defaults to the current year)

    Returns:
        DataFrame with 12 rows: month, period_date, revenue, costs,
        net_cash_flow, notes
    """
    year = year or date.today().year
    rows = []
    for quarter_idx, q in enumerate(QUARTERS):
        proj = getattr(adjusted, q)
        for month_in_quarter in range(3):
            month_idx = quarter_idx * 3 + month_in_quarter
            rows.append({
                "month": month_idx,
                "period_date": pd.Timestamp(year=year, month=month_idx + 1, day=1),
                "revenue": (proj.adjusted_revenue or 0.0) / 3.0,
                "costs": (proj.adjusted_cogs or 0.0) / 3.0,
                "net_cash_flow": (proj.free_cash_flow or 0.0) / 3.0,
                "notes": f"{q.upper()} - Month {month_in_quarter + 1}",
            })
    return pd.DataFrame(rows)
