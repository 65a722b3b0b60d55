#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Editable formula grid: cell edits, structural edits and recalculation.
A grid always keeps at least one row and one column.
"""

import math
import re
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from pydantic import Field

from ..utils import (
    get_logger, NEW_ROW_LABEL, DEFAULT_COLUMN_YEAR,
    GRID_DISCOUNT_RATE, NET_CASH_FLOW_ROW, EBITDA_ROW,
)
from .engine import recalculate_grid
from .refs import column_label
from .types import Cell, GridKPIs, GridModel, Row

logger = get_logger(__name__)

DEFAULT_COLUMNS = ["Q1 2024", "Q2 2024", "Q3 2024", "Q4 2024"]

# Longest numeric prefix of user input ("12abc" -> "12", "1_000" -> "1")
NUMBER_PREFIX_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

GRID_IRR_GUESS = 0.1
GRID_IRR_TOLERANCE = 1e-4
GRID_IRR_MAX_ITERATIONS = 100


def parse_number_prefix(text: str) -> float:
    """Value of the leading number in text; 0 when there is none or it is not finite."""
    match = NUMBER_PREFIX_PATTERN.match(text.strip())
    value = float(match.group(0)) if match else math.nan
    if not math.isfinite(value):
        logger.debug(f"Non-numeric input {text!r}; storing 0")
        return 0.0
    return value


class Grid(GridModel):
    """Rows of cells plus display-only column labels."""

    rows: List[Row] = Field(default_factory=list)
    columns: List[str] = Field(default_factory=list)

    def set_cell(self, row: int, col: int, text: str) -> Cell:
        """
        Store user input in a cell.

        Text starting with "=" becomes the cell formula (value reset to 0
        until the next recalculation); anything else is read up to the end
        of its leading number (0 when there is none) and clears the formula.
        """
        cell = self.rows[row].cells[col]
        text = (text or "").strip()

        if text.startswith("="):
            cell.formula = text
            cell.value = 0.0
        else:
            cell.value = parse_number_prefix(text)
            cell.formula = None
        return cell

    def rename_row(self, row: int, name: str) -> None:
        self.rows[row].row_name = name

    def add_row(self, name: Optional[str] = None) -> Row:
        new_row = Row(
            row_name=name or f"{NEW_ROW_LABEL} {len(self.rows) + 1}",
            cells=[Cell() for _ in self.columns],
        )
        self.rows.append(new_row)
        return new_row

    def add_column(self, label: Optional[str] = None) -> str:
        label = label or f"Q{len(self.columns) + 1} {DEFAULT_COLUMN_YEAR}"
        self.columns.append(label)
        for row in self.rows:
            row.cells.append(Cell())
        return label

    def delete_row(self, row: int) -> bool:
        """Remove a row; refused (False) when it is the last one."""
        if len(self.rows) <= 1:
            return False
        del self.rows[row]
        return True

    def delete_column(self, col: int) -> bool:
        """Remove a column from the labels and from every row; refused for the last one."""
        if len(self.columns) <= 1:
            return False
        del self.columns[col]
        for row in self.rows:
            if col < len(row.cells):
                del row.cells[col]
        return True

    def recalculate(self) -> "Grid":
        """New grid with every formula recalculated; this grid is not modified."""
        return Grid(rows=recalculate_grid(self.rows), columns=list(self.columns))

    def header_labels(self) -> List[str]:
        """Column letters shown above each column ("A", "B", ...)."""
        return [column_label(i) for i in range(len(self.columns))]

    def to_frame(self) -> pd.DataFrame:
        """Cell values as a DataFrame indexed by row name."""
        width = len(self.columns)
        data = [
            [row.cells[i].value if i < len(row.cells) else None for i in range(width)]
            for row in self.rows
        ]
        return pd.DataFrame(data, index=[row.row_name for row in self.rows], columns=self.columns)

    def find_row(self, label: str) -> Optional[Row]:
        """First row whose name contains label (case-insensitive)."""
        label = label.lower()
        return next((row for row in self.rows if label in row.row_name.lower()), None)

    def kpi_summary(self, discount_rate: float = GRID_DISCOUNT_RATE) -> GridKPIs:
        """
        Headline figures read off the grid's current values.

        NPV discounts the net-cash-flow row from period 1, IRR solves the
        same row, EBITDA sums the EBITDA row. A missing row contributes 0
        (NaN for IRR).
        """
        net_row = self.find_row(NET_CASH_FLOW_ROW)
        ebitda_row = self.find_row(EBITDA_ROW)

        flows = [c.value for c in net_row.cells] if net_row else []
        periods = np.arange(1, len(flows) + 1)
        npv = float(np.sum(np.asarray(flows, dtype=float) / (1.0 + discount_rate) ** periods))
        ebitda = float(sum(c.value for c in ebitda_row.cells)) if ebitda_row else 0.0

        return GridKPIs(npv=npv, irr=_grid_irr(flows), ebitda=ebitda)


def _grid_irr(flows: Sequence[float]) -> float:
    """Rate zeroing the NPV of flows discounted from period 1; NaN without a sign change or convergence."""
    values = np.asarray(flows, dtype=float)
    if not (np.any(values > 0) and np.any(values < 0)):
        return float("nan")

    periods = np.arange(1, values.size + 1)
    rate = GRID_IRR_GUESS
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for _ in range(GRID_IRR_MAX_ITERATIONS):
            npv = np.sum(values / (1.0 + rate) ** periods)
            if abs(npv) < GRID_IRR_TOLERANCE:
                return float(rate)
            derivative = -np.sum(periods * values / (1.0 + rate) ** (periods + 1))
            if not (np.isfinite(npv) and np.isfinite(derivative)) or derivative == 0:
                break
            rate = float(rate - npv / derivative)

    logger.debug(f"Grid IRR did not converge for {values.size} flows")
    return float("nan")


def default_grid() -> Grid:
    """Seed grid: quarterly revenue and costs with derived cash-flow rows."""
    rows = [
        Row(row_name="Recurring Revenue", cells=[Cell(value=v) for v in (125000, 145000, 165000, 185000)]),
        Row(row_name="Operating Costs", cells=[Cell(value=v) for v in (95000, 105000, 115000, 125000)]),
        Row(row_name="Net Cash Flow", cells=[
            Cell(value=30000, formula="=A1-A2"),
            Cell(value=40000, formula="=B1-B2"),
            Cell(value=50000, formula="=C1-C2"),
            Cell(value=60000, formula="=D1-D2"),
        ]),
        Row(row_name="EBITDA", cells=[
            Cell(value=30000, formula="=A3"),
            Cell(value=40000, formula="=B3"),
            Cell(value=50000, formula="=C3"),
            Cell(value=60000, formula="=D3"),
        ]),
        Row(row_name="Annual Total", cells=[
            Cell(value=180000, formula="=SUM(A4:D4)"),
            Cell(),
            Cell(),
            Cell(),
        ]),
    ]
    return Grid(rows=rows, columns=list(DEFAULT_COLUMNS))
