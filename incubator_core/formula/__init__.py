"""Spreadsheet formula engine: cell references, evaluation and grid recalculation."""

from .types import Cell, Row, CellReference, GridKPIs
from .refs import parse_cell_reference, format_cell_reference, column_label
from .engine import (
    evaluate_formula, recalculate_grid, FormulaError, CircularReferenceError,
)
from .grid import Grid, default_grid, parse_number_prefix

__all__ = [
    "Cell", "Row", "CellReference", "GridKPIs", "Grid", "default_grid", "parse_number_prefix",
    "parse_cell_reference", "format_cell_reference", "column_label",
    "evaluate_formula", "recalculate_grid", "FormulaError", "CircularReferenceError",
]
