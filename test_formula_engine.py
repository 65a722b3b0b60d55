#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the formula engine (incubator_core/formula)

Covers the cell-reference codec, formula evaluation (references, range
functions, arithmetic allow-list, circular references) and multi-pass
grid recalculation.
"""

import sys
import time

sys.path.insert(0, ".")

import pytest

from incubator_core.formula.engine import evaluate_formula, recalculate_grid
from incubator_core.formula.refs import column_label, format_cell_reference, parse_cell_reference
from incubator_core.formula.types import Cell, Row

# ============================================================================
# Test Data
# ============================================================================


def make_rows(*values_per_row):
    """Rows of literal cells: make_rows([1, 2], [3, 4])."""
    return [
        Row(row_name=f"Row {i + 1}", cells=[Cell(value=v) for v in values])
        for i, values in enumerate(values_per_row)
    ]


def formula_cell(formula, value=0.0):
    return Cell(value=value, formula=formula)


# ============================================================================
# Cell-reference codec
# ============================================================================


@pytest.mark.parametrize("ref, row, col", [
    ("A1", 0, 0),
    ("C1", 0, 2),
    ("Z10", 9, 25),
    ("AA1", 0, 26),
    ("AZ3", 2, 51),
    ("BA1", 0, 52),
    ("ZZ1", 0, 701),
    ("AAA1", 0, 702),
])
def test_parse_cell_reference(ref, row, col):
    parsed = parse_cell_reference(ref)
    assert parsed is not None
    assert (parsed.row, parsed.col) == (row, col)
    assert format_cell_reference(row, col) == ref


@pytest.mark.parametrize("text", ["", "a1", "1A", "A", "12", "A1B", " A1", "A-1", "A0", "$A$1"])
def test_parse_cell_reference_rejects_non_references(text):
    assert parse_cell_reference(text) is None


def test_reference_round_trip():
    for r in range(0, 60, 7):
        for c in range(0, 2000, 13):
            parsed = parse_cell_reference(format_cell_reference(r, c))
            assert (parsed.row, parsed.col) == (r, c)


def test_column_label():
    assert [column_label(i) for i in (0, 1, 25, 26, 27)] == ["A", "B", "Z", "AA", "AB"]
    with pytest.raises(ValueError):
        column_label(-1)


# ============================================================================
# Evaluation: references and arithmetic
# ============================================================================


def test_simple_arithmetic_with_references():
    rows = make_rows([100], [40])
    assert evaluate_formula("=A1-A2", rows, 2, 0) == 60
    assert evaluate_formula("A1*2+A2/4", rows, 2, 0) == 210
    assert evaluate_formula("=(A1+A2)*0.5", rows, 2, 0) == 70
    assert evaluate_formula("=A1 % 30", rows, 2, 0) == 10


def test_literal_formula_without_references():
    assert evaluate_formula("=2+3*4", [], 0, 0) == 14
    assert evaluate_formula("=(2+3)*4", [], 0, 0) == 20


def test_negative_values_substitute_cleanly():
    rows = make_rows([10, -5])
    assert evaluate_formula("=A1-B1", rows, 1, 0) == 15
    assert evaluate_formula("=A1*B1", rows, 1, 0) == -50


def test_small_values_do_not_use_exponent_notation():
    rows = make_rows([1e-7, 2.5e-12])
    assert evaluate_formula("=A1+B1", rows, 1, 0) == pytest.approx(1e-7 + 2.5e-12)


def test_out_of_bounds_reference_is_zero():
    rows = make_rows([5, 6], [7, 8])
    assert evaluate_formula("=A1+C1", rows, 5, 5) == 5
    assert evaluate_formula("=A1+A99", rows, 5, 5) == 5
    assert evaluate_formula("=ZZ500", rows, 5, 5) == 0


def test_ragged_row_reference_is_zero():
    rows = [Row(row_name="a", cells=[Cell(value=1), Cell(value=2)]), Row(row_name="b", cells=[Cell(value=3)])]
    assert evaluate_formula("=B2+A2", rows, 5, 5) == 3


def test_nested_formula_is_evaluated_first():
    rows = make_rows([100], [40])
    rows.append(Row(row_name="Net", cells=[formula_cell("=A1-A2", value=999)]))
    # A3 holds a stale cached value; the reference must re-evaluate it
    assert evaluate_formula("=A3*2", rows, 3, 0) == 120


def test_failed_nested_formula_counts_as_zero():
    rows = make_rows([10])
    rows.append(Row(row_name="bad", cells=[formula_cell("=A1/0")]))
    assert evaluate_formula("=A1+A2", rows, 2, 0) == 10


@pytest.mark.parametrize("formula", ["=A1", "=A1+1", "=2*(A1)", "=MAX(A1:B1)+A1"])
def test_self_reference_fails(formula):
    rows = make_rows([1, 2], [3, 4])
    assert evaluate_formula(formula, rows, 0, 0) is None


def test_mutual_reference_terminates():
    rows = [Row(row_name="loop", cells=[formula_cell("=B1+1"), formula_cell("=A1+1")])]
    # A1 -> B1 -> A1: B1 cannot evaluate on this path, so it contributes 0
    assert evaluate_formula("=B1+1", rows, 0, 0) == 1


@pytest.mark.parametrize("formula", [
    "=A1+foo",
    "=2**10",
    "=7//2",
    "=1/0",
    "=5%0",
    "=(1+",
    "=",
    "=__import__('os')",
    "=(2)(3)",
])
def test_invalid_expressions_return_none(formula):
    rows = make_rows([1])
    assert evaluate_formula(formula, rows, 3, 3) is None


def test_overflow_returns_none():
    rows = make_rows([1e308])
    assert evaluate_formula("=A1*10", rows, 3, 3) is None


def test_accepts_dict_rows():
    rows = [
        {"rowName": "Rev", "cells": [{"value": 100}]},
        {"rowName": "Cost", "cells": [{"value": 40}]},
    ]
    assert evaluate_formula("=A1-A2", rows, 2, 0) == 60


# ============================================================================
# Evaluation: range functions
# ============================================================================


def test_sum_over_span():
    rows = make_rows([1, 2], [3, 4])
    assert evaluate_formula("=SUM(A1:B2)", rows, 5, 5) == 10


@pytest.mark.parametrize("formula, expected", [
    ("=SUM(A1:B2)", 10),
    ("=SUM(A1,B1,A2,B2)", 10),
    ("=AVERAGE(A1:B2)", 2.5),
    ("=AVERAGE(A1, B1, A2, B2)", 2.5),
    ("=MIN(A1:B2)", 1),
    ("=MIN(B2,A2,B1)", 2),
    ("=MAX(A1:B2)", 4),
    ("=MAX(A1,A2)", 3),
])
def test_range_functions_match_manual_computation(formula, expected):
    rows = make_rows([1, 2], [3, 4])
    assert evaluate_formula(formula, rows, 5, 5) == pytest.approx(expected)


def test_range_functions_are_case_insensitive():
    rows = make_rows([1, 2], [3, 4])
    assert evaluate_formula("=sum(A1:B2)", rows, 5, 5) == 10
    assert evaluate_formula("=Max(A1:A2)", rows, 5, 5) == 3


def test_reversed_span_corners():
    rows = make_rows([1, 2], [3, 4])
    assert evaluate_formula("=SUM(B2:A1)", rows, 5, 5) == 10


def test_range_skips_missing_cells():
    rows = make_rows([2, 4])
    assert evaluate_formula("=AVERAGE(A1:D1)", rows, 5, 5) == 3
    assert evaluate_formula("=MIN(A1,Z9)", rows, 5, 5) == 2
    assert evaluate_formula("=SUM(A1:B1,C1)", rows, 5, 5) == 6


def test_empty_range_is_zero():
    rows = make_rows([2, 4])
    for fn in ("SUM", "AVERAGE", "MIN", "MAX"):
        assert evaluate_formula(f"={fn}(E5:F9)", rows, 5, 5) == 0


def test_range_combined_with_arithmetic():
    rows = make_rows([1, 2], [3, 4])
    assert evaluate_formula("=SUM(A1:B1)*10+MAX(A2:B2)", rows, 5, 5) == 34


def test_range_including_negative_values():
    rows = make_rows([-3, 5])
    assert evaluate_formula("=10-MIN(A1:B1)", rows, 5, 5) == 13


def test_range_member_formula_uses_cached_value():
    rows = make_rows([1, 2])
    rows.append(Row(row_name="total", cells=[formula_cell("=A1+B1", value=0), Cell(value=0)]))
    assert evaluate_formula("=SUM(A1:A2)", rows, 5, 5) == 1

    rows.append(Row(row_name="check", cells=[formula_cell("=SUM(A1:A2)")]))
    result = recalculate_grid(rows)
    assert result[3].cells[0].value == 4


def test_range_covering_own_cell_reads_its_value():
    rows = make_rows([1], [2], [0])
    assert evaluate_formula("=SUM(A1:A3)", rows, 2, 0) == 3


def test_leading_zero_literals():
    assert evaluate_formula("=05+1", [], 0, 0) == 6
    assert evaluate_formula("=007*2", [], 0, 0) == 14
    assert evaluate_formula("=100+0.5+00.25", [], 0, 0) == 100.75
    assert evaluate_formula("=0", [], 0, 0) == 0


# ============================================================================
# Grid recalculation
# ============================================================================


def test_recalculate_scenario_grid():
    rows = [
        {"rowName": "Rev", "cells": [{"value": 100}]},
        {"rowName": "Cost", "cells": [{"value": 40}]},
        {"rowName": "Net", "cells": [{"value": 0, "formula": "=A1-A2"}]},
    ]
    result = recalculate_grid(rows)
    assert result[2].cells[0].value == 60
    assert result[2].row_name == "Net"


def test_recalculate_does_not_mutate_input():
    rows = make_rows([100], [40])
    rows.append(Row(row_name="Net", cells=[formula_cell("=A1-A2")]))
    result = recalculate_grid(rows)
    assert rows[2].cells[0].value == 0
    assert result[2].cells[0].value == 60
    assert result[2].cells[0] is not rows[2].cells[0]


def test_recalculate_chain_and_idempotence():
    rows = make_rows([10, 20, 30, 40])
    rows.append(Row(row_name="total", cells=[
        formula_cell("=SUM(A1:D1)"),
        formula_cell("=A2/4"),
        formula_cell("=B2*2"),
        formula_cell("=MAX(A1:D1)-C2"),
    ]))
    once = recalculate_grid(rows)
    values = [c.value for c in once[1].cells]
    assert values == [100, 25, 50, -10]

    twice = recalculate_grid(once)
    assert [r.model_dump() for r in twice] == [r.model_dump() for r in once]


def test_recalculate_keeps_previous_value_on_failure():
    rows = make_rows([5])
    rows.append(Row(row_name="self", cells=[formula_cell("=A2+1", value=7)]))
    result = recalculate_grid(rows)
    assert result[1].cells[0].value == 7


def test_recalculate_cycle_is_bounded():
    rows = [Row(row_name="loop", cells=[formula_cell("=B1+1"), formula_cell("=A1+1")])]
    result = recalculate_grid(rows)
    # Each cell sees the other as 0 on its own evaluation path
    assert [c.value for c in result[0].cells] == [1, 1]


def test_recalculate_respects_pass_cap(caplog):
    rows = [Row(row_name="r", cells=[Cell(value=1), formula_cell("=A1+1")])]
    result = recalculate_grid(rows, max_passes=1)
    assert result[0].cells[1].value == 2
    assert "still changing after 1 passes" in caplog.text


def running_total_rows(n):
    """Column A: 1, then each cell sums every cell above it."""
    rows = [Row(row_name="Row 1", cells=[Cell(value=1)])]
    for i in range(2, n + 1):
        rows.append(Row(row_name=f"Row {i}", cells=[formula_cell(f"=SUM(A1:A{i - 1})")]))
    return rows


def test_running_total_recalculates_quickly():
    rows = running_total_rows(30)

    started = time.perf_counter()
    result = recalculate_grid(rows)
    assert evaluate_formula("=A30", result, 30, 0) == 2 ** 28
    elapsed = time.perf_counter() - started

    assert [r.cells[0].value for r in result[:5]] == [1, 1, 2, 4, 8]
    assert result[29].cells[0].value == 2 ** 28
    assert elapsed < 2.0


def test_shared_references_are_evaluated_once():
    # A_n = A_{n-1} + A_{n-2}: without reuse of nested results this is exponential
    rows = make_rows([1], [1])
    for i in range(3, 41):
        rows.append(Row(row_name=f"Row {i}", cells=[formula_cell(f"=A{i - 1}+A{i - 2}")]))

    started = time.perf_counter()
    assert evaluate_formula("=A40", rows, 40, 0) == 102334155
    assert time.perf_counter() - started < 2.0


def test_recalculate_leaves_literals_alone():
    rows = make_rows([1.5, 2.5])
    result = recalculate_grid(rows)
    assert [c.value for c in result[0].cells] == [1.5, 2.5]
    assert all(c.formula is None for c in result[0].cells)


# ============================================================================
# Main Test Runner
# ============================================================================


def run_all_tests():
    """Run the suite through pytest and report the exit code."""
    return pytest.main([__file__, "-v"])


if __name__ == "__main__":
    sys.exit(run_all_tests())
