#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Financial math engine: quarterly sensitivity analysis and portfolio KPIs.
Handles revenue/cost adjustment per quarter, NPV, IRR (Newton-Raphson) and KPI aggregation.
"""

from typing import Any, Mapping, Sequence, Union

import numpy as np

from ..utils import (
    get_logger, WACC_DEFAULT, TAX_RATE_DEFAULT,
    IRR_GUESS, IRR_MAX_ITERATIONS, IRR_PRECISION, QUARTERS,
)
from .models import (
    CalculatedKPIs, CampaignFinancials, FinancialProjectionsAdjusted, QuarterProjection,
)

logger = get_logger(__name__)


def _adjust_quarter(quarter: QuarterProjection, revenue_pct: float, cost_pct: float) -> QuarterProjection:
    adjusted_revenue = quarter.revenue * (1.0 + revenue_pct / 100.0)
    adjusted_cogs = quarter.cogs * (1.0 + cost_pct / 100.0)

    gross_profit = adjusted_revenue - adjusted_cogs
    # OPEX is a plain operating expense; sensitivity does not move it
    ebitda = gross_profit - quarter.opex
    net_income = ebitda * (1.0 - TAX_RATE_DEFAULT)
    # Simplified FCF: independent of tax
    free_cash_flow = adjusted_revenue - adjusted_cogs - quarter.opex

    return QuarterProjection(
        revenue=quarter.revenue,
        cogs=quarter.cogs,
        opex=quarter.opex,
        adjusted_revenue=adjusted_revenue,
        adjusted_cogs=adjusted_cogs,
        gross_profit=gross_profit,
        ebitda=ebitda,
        net_income=net_income,
        free_cash_flow=free_cash_flow,
    )


def apply_sensitivity(
    financials: Union[CampaignFinancials, Mapping[str, Any]],
    revenue_pct: float,
    cost_pct: float,
) -> FinancialProjectionsAdjusted:
    """
    Apply sensitivity variations and derive per-quarter metrics.

    Args:
        financials: Campaign financials (model or dict) holding financial_projections q1..q4
        revenue_pct: Revenue change in whole percent (10 means +10%)
        cost_pct: COGS change in whole percent

    Returns:
        New projections with adjusted revenue/COGS, gross profit, EBITDA,
        net income and free cash flow filled for every quarter
    """
    if not isinstance(financials, CampaignFinancials):
        financials = CampaignFinancials.model_validate(financials)

    projections = financials.financial_projections
    adjusted = {
        q: _adjust_quarter(getattr(projections, q), revenue_pct, cost_pct)
        for q in QUARTERS
    }

    logger.debug(f"Sensitivity applied: revenue {revenue_pct:+}%, cost {cost_pct:+}%")
    return FinancialProjectionsAdjusted(**adjusted)


def calculate_npv(
    cash_flows: Sequence[float],
    discount_rate: float = WACC_DEFAULT,
    initial_investment: float = 0.0,
) -> float:
    """
    Net Present Value with the first flow discounted one period.

    NPV = initial_investment + sum(cf_i / (1 + r)^(i + 1))
    """
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(1, flows.size + 1)
    return float(initial_investment + np.sum(flows / (1.0 + discount_rate) ** periods))


def calculate_irr(cash_flows: Sequence[float], guess: float = IRR_GUESS) -> float:
    """
    Internal Rate of Return via Newton-Raphson.

    The first flow is period 0 (undiscounted). At least one strictly
    positive and one strictly negative flow are required.

    Returns:
        IRR as a decimal, or NaN when there is no sign change, the
        derivative vanishes, or the iteration does not converge
    """
    flows = np.asarray(cash_flows, dtype=float)

    if not (np.any(flows > 0) and np.any(flows < 0)):
        return float("nan")

    periods = np.arange(flows.size)
    rate = float(guess)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for _ in range(IRR_MAX_ITERATIONS):
            base = 1.0 + rate
            npv = np.sum(flows / base ** periods)
            derivative = -np.sum(periods * flows / base ** (periods + 1))

            if not (np.isfinite(npv) and np.isfinite(derivative)):
                break

            if abs(derivative) < IRR_PRECISION:
                return float("nan")

            next_rate = rate - npv / derivative

            if abs(next_rate - rate) < IRR_PRECISION:
                return float(next_rate)
            rate = float(next_rate)

    logger.debug(f"IRR did not converge for {len(flows)} cash flows (last estimate {rate})")
    return float("nan")


def calculate_all_kpis(
    adjusted_projections: FinancialProjectionsAdjusted,
    initial_investment: float = 0.0,
) -> CalculatedKPIs:
    """
    Aggregate adjusted quarterly projections into KPIs.

    NPV discounts the four free cash flows from period 1 on top of the
    initial investment; IRR runs on [0, fcf_q1, ..., fcf_q4].
    """
    quarters = adjusted_projections.quarters()

    total_gross_profit = sum(q.gross_profit or 0.0 for q in quarters)
    total_ebitda = sum(q.ebitda or 0.0 for q in quarters)
    free_cash_flows = [q.free_cash_flow or 0.0 for q in quarters]

    npv = calculate_npv(free_cash_flows, WACC_DEFAULT, initial_investment)
    irr = calculate_irr([0.0] + free_cash_flows)

    logger.info(
        f"KPIs computed: gross profit {total_gross_profit:,.2f}, EBITDA {total_ebitda:,.2f}, "
        f"NPV {npv:,.2f}, IRR {irr:.4f}"
    )

    return CalculatedKPIs(gross_profit=total_gross_profit, ebitda=total_ebitda, npv=npv, irr=irr)
