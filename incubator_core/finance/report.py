#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tabular views of a sensitivity run, ready for spreadsheet export.
"""

from typing import Any, List, Optional

import pandas as pd

from ..utils import QUARTERS
from .models import CalculatedKPIs, CampaignFinancials, FinancialProjectionsAdjusted

QUARTERLY_COLUMNS = [
    "Quarter",
    "Original Revenue", "Original COGS", "Original OPEX",
    "Adjusted Revenue", "Adjusted COGS", "Gross Profit", "EBITDA", "Net Income", "Free Cash Flow",
]


def _or_na(value: Optional[Any]) -> Any:
    # Zero and missing both read as "N/A" in the export
    return value if value else "N/A"


def _quarter_rows(original: CampaignFinancials, adjusted: FinancialProjectionsAdjusted) -> List[List[Any]]:
    rows = []
    for q in QUARTERS:
        src = getattr(original.financial_projections, q)
        adj = getattr(adjusted, q)
        rows.append([
            q.upper(),
            src.revenue, src.cogs, src.opex,
            _or_na(adj.adjusted_revenue),
            _or_na(adj.adjusted_cogs),
            _or_na(adj.gross_profit),
            _or_na(adj.ebitda),
            _or_na(adj.net_income),
            _or_na(adj.free_cash_flow),
        ])
    return rows


def format_financial_data_for_export(
    original: CampaignFinancials,
    adjusted: FinancialProjectionsAdjusted,
    kpis: CalculatedKPIs,
    revenue_pct: float,
    cost_pct: float,
) -> List[List[Any]]:
    """
    Build the row blocks of the financial dashboard export.

    Blocks, separated by an empty row: campaign summary, sensitivity
    parameters, calculated KPIs, detailed quarterly projections.

    Returns:
        List of rows (each a list of cells)
    """
    data: List[List[Any]] = []

    data.append(["Financial Dashboard Summary"])
    data.append(["Metric", "Value"])
    data.append(["Funding Goal", _or_na(original.funding_goal)])
    data.append(["Valuation", _or_na(original.valuation)])
    data.append(["Usage of Funds", original.usage_of_funds])
    data.append(["Pre-Money Valuation", _or_na(original.pre_money_valuation)])
    data.append(["Current Cash Balance", _or_na(original.current_cash_balance)])
    data.append(["Monthly Burn Rate", _or_na(original.monthly_burn_rate)])
    data.append([])

    data.append(["Sensitivity Analysis Parameters"])
    data.append(["Parameter", "Value (%)"])
    data.append(["Revenue Variation", revenue_pct])
    data.append(["Cost Variation", cost_pct])
    data.append([])

    data.append(["Calculated KPIs"])
    data.append(["KPI", "Value"])
    data.append(["Total Gross Profit", kpis.gross_profit])
    data.append(["Total EBITDA", kpis.ebitda])
    data.append(["NPV", kpis.npv])
    data.append(["IRR", kpis.irr])
    data.append([])

    data.append(["Detailed Quarterly Projections"])
    data.append(list(QUARTERLY_COLUMNS))
    data.extend(_quarter_rows(original, adjusted))

    return data


def quarterly_frame(original: CampaignFinancials, adjusted: FinancialProjectionsAdjusted) -> pd.DataFrame:
    """Detailed quarterly block as a DataFrame, one row per quarter."""
    return pd.DataFrame(_quarter_rows(original, adjusted), columns=QUARTERLY_COLUMNS)
