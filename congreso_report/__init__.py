"""Electoral results and indicator aggregates for the congress dashboard.

This package contains:
- source table loading (CSV/XLSX -> pandas)
- code normalization and scope filters
- ranking and aggregate builders (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""

from congreso_report.service import ReportService

__all__ = ["ReportService"]
