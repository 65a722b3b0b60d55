#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Financial data model: quarterly projections, campaign financials and KPIs.
Attributes are snake_case; camelCase aliases match the dashboard payloads.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..utils import QUARTERS


class FinanceModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuarterProjection(FinanceModel):
    """One quarter: caller-supplied inputs plus engine-derived figures."""

    revenue: float = 0.0
    cogs: float = Field(0.0, description="Cost of goods sold")
    opex: float = Field(0.0, description="Operating (administrative) expenses")

    adjusted_revenue: Optional[float] = None
    adjusted_cogs: Optional[float] = None
    gross_profit: Optional[float] = None
    ebitda: Optional[float] = None
    net_income: Optional[float] = None
    free_cash_flow: Optional[float] = None


class FinancialProjections(FinanceModel):
    """Exactly four quarters, q1..q4."""

    q1: QuarterProjection
    q2: QuarterProjection
    q3: QuarterProjection
    q4: QuarterProjection

    def quarters(self) -> List[QuarterProjection]:
        return [getattr(self, q) for q in QUARTERS]


class FinancialProjectionsAdjusted(FinancialProjections):
    """Projections whose derived fields have been filled by apply_sensitivity."""


class CampaignFinancials(BaseModel):
    """Campaign financial record as delivered by the backend (snake_case keys)."""

    financial_projections: FinancialProjections
    funding_goal: Optional[float] = None
    valuation: Optional[float] = None
    usage_of_funds: str = ""
    pre_money_valuation: Optional[float] = None
    current_cash_balance: Optional[float] = None
    monthly_burn_rate: Optional[float] = None
    total_capital_injection: float = 0.0
    revenue_history: Dict[str, Any] = Field(default_factory=dict)


class CalculatedKPIs(FinanceModel):
    """Aggregates over the four quarters; npv/irr may be NaN."""

    gross_profit: float
    ebitda: float
    npv: float
    irr: float
