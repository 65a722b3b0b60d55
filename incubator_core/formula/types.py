#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Formula grid data model: cells, rows and cell coordinates.
Attributes are snake_case; the camelCase aliases match the dashboard payloads.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GridModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Cell(GridModel):
    """Single grid entry. With a formula, `value` is only the last evaluated result."""

    value: float = 0.0
    formula: Optional[str] = None

    @property
    def has_formula(self) -> bool:
        return bool(self.formula)


class Row(GridModel):
    """Named row of cells."""

    row_name: str
    cells: List[Cell] = Field(default_factory=list)


class CellReference(GridModel):
    """Zero-based grid coordinate (`C1` is row 0, col 2)."""

    model_config = ConfigDict(frozen=True)

    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


class GridKPIs(GridModel):
    """Headline figures of a grid; irr is a decimal rate and may be NaN."""

    npv: float
    irr: float
    ebitda: float
