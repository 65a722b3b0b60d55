"""Incubator Core - calculation engines behind the incubator dashboard

Modules:
  - incubator_core.formula: spreadsheet formula engine and editable grid
  - incubator_core.finance: sensitivity analysis, NPV/IRR and KPIs
  - incubator_core.data: campaign payload preparation
  - incubator_core.utils: configuration and logging
"""

from . import formula, finance, data, utils

__all__ = ["formula", "finance", "data", "utils"]
