#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Formula engine: evaluates spreadsheet-style formulas over a grid of rows.

Supported syntax:
  - cell references (A1, B2, AA10), resolved depth-first through formula cells
  - SUM / AVERAGE / MIN / MAX over "A1:B2" spans and "A1,B2,C3" lists,
    reading the cells' current values
  - arithmetic with + - * / % and parentheses

Failures never escape the public functions: a formula that cannot be
evaluated yields None and recalculation keeps the cell's previous value.
"""

import math
import re
import warnings
from decimal import Decimal
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..utils import get_logger, MAX_RECALC_PASSES
from .refs import parse_cell_reference
from .types import Row

logger = get_logger(__name__)

Coord = Tuple[int, int]
RowsLike = Sequence[Union[Row, Mapping[str, Any]]]

REF_TOKEN_PATTERN = re.compile(r"[A-Z]+[0-9]+")
FUNCTION_PATTERN = re.compile(r"(SUM|AVERAGE|MIN|MAX)\(([^)]+)\)", re.IGNORECASE)
SAFE_EXPR_PATTERN = re.compile(r"[0-9+\-*/().%\s]+")
# Leading zeros of an integer literal ("05" -> "5"); "0.5" and "100" are left alone
LEADING_ZEROS_PATTERN = re.compile(r"(?<![0-9.])0+(?=[0-9])")


class FormulaError(ValueError):
    """A formula could not be evaluated."""


class CircularReferenceError(FormulaError):
    """A formula references a cell that is already being evaluated."""


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


RANGE_FUNCTIONS: Dict[str, Callable[[List[float]], float]] = {
    "SUM": lambda values: float(sum(values)),
    "AVERAGE": _average,
    "MIN": lambda values: min(values) if values else 0.0,
    "MAX": lambda values: max(values) if values else 0.0,
}


class _Evaluation:
    """State of one top-level evaluation: the rows and the nested results already known."""

    def __init__(self, rows: List[Row]):
        self.rows = rows
        self.resolved: Dict[Coord, float] = {}
        self.cycles_hit = 0


def _as_rows(rows: RowsLike) -> List[Row]:
    return [r if isinstance(r, Row) else Row.model_validate(r) for r in rows]


def _in_bounds(rows: List[Row], row: int, col: int) -> bool:
    return 0 <= row < len(rows) and 0 <= col < len(rows[row].cells)


def _literal(value: float) -> str:
    """Plain decimal text for a value (no exponent), parenthesised when negative."""
    text = format(Decimal(repr(float(value))), "f")
    return f"({text})" if value < 0 else text


def _resolve(ctx: _Evaluation, row: int, col: int, visiting: FrozenSet[Coord]) -> Optional[float]:
    """
    Numeric value of a referenced cell.

    A nested result is remembered for the rest of the evaluation unless a
    circular reference was met while computing it (such a result depends
    on the path it was reached from).

    Returns:
        The cell value, evaluating its formula first; 0 when that nested
        formula fails; None when the coordinate is outside the grid

    Raises:
        CircularReferenceError: the cell is on the current evaluation path
    """
    if (row, col) in visiting:
        ctx.cycles_hit += 1
        raise CircularReferenceError(f"Circular reference detected at ({row}, {col})")

    if not _in_bounds(ctx.rows, row, col):
        return None

    cell = ctx.rows[row].cells[col]
    if not cell.has_formula:
        return cell.value or 0.0

    if (row, col) in ctx.resolved:
        return ctx.resolved[(row, col)]

    cycles_before = ctx.cycles_hit
    try:
        value = _evaluate(cell.formula, ctx, visiting | {(row, col)})
    except FormulaError as e:
        logger.debug(f"Nested formula at ({row}, {col}) failed, using 0: {e}")
        value = 0.0

    if ctx.cycles_hit == cycles_before:
        ctx.resolved[(row, col)] = value
    return value


def _range_coords(member: str, rows: List[Row]) -> Iterable[Coord]:
    """Coordinates named by one range member ("B2" or "A1:C3"), clipped to the grid."""
    if ":" in member:
        start_text, _, end_text = member.partition(":")
        start = parse_cell_reference(start_text.strip())
        end = parse_cell_reference(end_text.strip())
        if start is None or end is None:
            return []

        width = max((len(r.cells) for r in rows), default=0)
        row_lo, row_hi = sorted((start.row, end.row))
        col_lo, col_hi = sorted((start.col, end.col))
        return [
            (r, c)
            for r in range(row_lo, min(row_hi, len(rows) - 1) + 1)
            for c in range(col_lo, min(col_hi, width - 1) + 1)
        ]

    ref = parse_cell_reference(member)
    return [(ref.row, ref.col)] if ref is not None else []


def _range_values(argument: str, rows: List[Row]) -> List[float]:
    """Current values of every existing cell named by a function argument; missing cells are skipped."""
    values = []
    for member in argument.split(","):
        for row, col in _range_coords(member.strip(), rows):
            if _in_bounds(rows, row, col):
                values.append(rows[row].cells[col].value or 0.0)
    return values


def _safe_eval(expr: str) -> float:
    """Evaluate a purely arithmetic expression."""
    expr = expr.strip()

    if not SAFE_EXPR_PATTERN.fullmatch(expr) or "**" in expr or "//" in expr:
        raise FormulaError(f"Invalid characters in expression: {expr!r}")

    expr = LEADING_ZEROS_PATTERN.sub("", expr)

    try:
        with warnings.catch_warnings():
            # e.g. "(2)(3)" compiles with a SyntaxWarning before failing
            warnings.simplefilter("ignore", SyntaxWarning)
            result = eval(expr, {"__builtins__": {}}, {})
        result = float(result)
    except (SyntaxError, ArithmeticError, TypeError, ValueError, RecursionError) as e:
        raise FormulaError(f"Cannot evaluate {expr!r}: {e}") from e

    if not math.isfinite(result):
        raise FormulaError(f"Non-finite result for {expr!r}")

    return result


def _evaluate(formula: str, ctx: _Evaluation, visiting: FrozenSet[Coord]) -> float:
    expr = formula[1:] if formula.startswith("=") else formula

    def expand_function(match: re.Match) -> str:
        values = _range_values(match.group(2), ctx.rows)
        return _literal(RANGE_FUNCTIONS[match.group(1).upper()](values))

    def substitute_ref(match: re.Match) -> str:
        ref = parse_cell_reference(match.group(0))
        if ref is None:
            return "0"
        value = _resolve(ctx, ref.row, ref.col, visiting)
        return _literal(value) if value is not None else "0"

    # Functions first so their arguments are still references
    expr = FUNCTION_PATTERN.sub(expand_function, expr)
    expr = REF_TOKEN_PATTERN.sub(substitute_ref, expr)

    return _safe_eval(expr)


def evaluate_formula(formula: str, rows: RowsLike, current_row: int, current_col: int) -> Optional[float]:
    """
    Evaluate a formula as if it were stored at (current_row, current_col).

    Single references are evaluated through their own formulas; range
    function members contribute their current (cached) values.

    Args:
        formula: Formula text, with or without the leading "="
        rows: Grid rows (Row models or equivalent dicts)
        current_row: Row index of the cell holding the formula
        current_col: Column index of the cell holding the formula

    Returns:
        Finite numeric result, or None if the formula references its own
        cell, is malformed, or does not produce a finite number
    """
    ctx = _Evaluation(_as_rows(rows))
    try:
        return _evaluate(formula or "", ctx, frozenset({(current_row, current_col)}))
    except FormulaError as e:
        logger.debug(f"Error evaluating formula {formula!r} at ({current_row}, {current_col}): {e}")
        return None
    except RecursionError:
        logger.warning(f"Reference chain too deep for formula {formula!r} at ({current_row}, {current_col})")
        return None


def recalculate_grid(rows: RowsLike, max_passes: int = MAX_RECALC_PASSES) -> List[Row]:
    """
    Recalculate every formula cell until values stop changing.

    Works on a deep copy; the caller's rows are left untouched. Each pass
    walks the grid row-major, so a range reads values already refreshed
    earlier in the same pass. Cycles longer than a single cell are not an
    error: they stop once max_passes is reached, keeping the last values.

    Args:
        rows: Grid rows (Row models or equivalent dicts)
        max_passes: Upper bound of passes over the grid

    Returns:
        New list of rows with refreshed formula values
    """
    new_rows = [r.model_copy(deep=True) if isinstance(r, Row) else Row.model_validate(r) for r in rows]

    for pass_no in range(1, max_passes + 1):
        changed = False

        for row_idx, row in enumerate(new_rows):
            for col_idx, cell in enumerate(row.cells):
                if not cell.has_formula:
                    continue
                new_value = evaluate_formula(cell.formula, new_rows, row_idx, col_idx)
                if new_value is not None and new_value != cell.value:
                    cell.value = new_value
                    changed = True

        if not changed:
            logger.debug(f"Grid converged after {pass_no} pass(es)")
            break
    else:
        logger.warning(
            f"Grid still changing after {max_passes} passes; "
            "formulas may form a reference cycle. Keeping last computed values."
        )

    return new_rows
