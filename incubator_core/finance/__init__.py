"""Financial math engine: sensitivity analysis, NPV, IRR and KPI aggregation."""

from .models import (
    QuarterProjection, FinancialProjections, FinancialProjectionsAdjusted,
    CampaignFinancials, CalculatedKPIs,
)
from .logic import apply_sensitivity, calculate_npv, calculate_irr, calculate_all_kpis
from .report import format_financial_data_for_export, quarterly_frame

__all__ = [
    "QuarterProjection", "FinancialProjections", "FinancialProjectionsAdjusted",
    "CampaignFinancials", "CalculatedKPIs",
    "apply_sensitivity", "calculate_npv", "calculate_irr", "calculate_all_kpis",
    "format_financial_data_for_export", "quarterly_frame",
]
