#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Cell-reference codec: "C1" <-> (row 0, col 2).
Columns use spreadsheet numbering (A=0 ... Z=25, AA=26, ...), rows are 1-based in text.
"""

import re
from typing import Optional

from .types import CellReference

CELL_REF_PATTERN = re.compile(r"([A-Z]+)([0-9]+)")


def parse_cell_reference(ref: str) -> Optional[CellReference]:
    """
    Convert a textual reference into a zero-based coordinate.

    Args:
        ref: Reference text such as "B3" or "AA10"

    Returns:
        CellReference, or None if the text is not a reference
    """
    match = CELL_REF_PATTERN.fullmatch(ref or "")
    if not match:
        return None

    col_str, row_str = match.groups()

    # Bijective base-26: "A" -> 1 ... "Z" -> 26, "AA" -> 27, then shifted to 0-based
    col = 0
    for ch in col_str:
        col = col * 26 + (ord(ch) - ord("A") + 1)

    row = int(row_str) - 1
    if row < 0:
        return None

    return CellReference(row=row, col=col - 1)


def column_label(col: int) -> str:
    """Letter run for a zero-based column index (0 -> "A", 26 -> "AA")."""
    if col < 0:
        raise ValueError(f"Column index must be non-negative, got {col}")

    letters = ""
    n = col
    while n >= 0:
        letters = chr(ord("A") + n % 26) + letters
        n = n // 26 - 1
    return letters


def format_cell_reference(row: int, col: int) -> str:
    """Inverse of parse_cell_reference: (0, 2) -> "C1"."""
    if row < 0:
        raise ValueError(f"Row index must be non-negative, got {row}")
    return f"{column_label(col)}{row + 1}"
