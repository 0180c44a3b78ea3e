from __future__ import annotations

import logging
from typing import Any, Dict, List

import pandas as pd

from congreso_report.data import ReportData
from congreso_report.directory import DepartmentDirectory
from congreso_report.filters import (
    CodeInClause,
    PresentClause,
    ScopeFilter,
    TextEqualsClause,
    apply_clauses,
    normalize_code,
    normalize_code_series,
)


logger = logging.getLogger(__name__)


def dataset_years(votes: pd.DataFrame) -> List[int]:
    if votes.empty or "year" not in votes.columns:
        return []
    years = pd.to_numeric(votes["year"], errors="coerce").dropna().astype(int).unique()
    return sorted(int(y) for y in years)


def compute_trend(scope: ScopeFilter, data: ReportData, *, names: Dict[str, str]) -> Dict[str, Any]:
    """Year x department vote matrix; absent combinations are 0."""
    codes = scope.department_codes
    if not codes:
        return {"years": [], "series": []}

    # Years span the whole table, not only the requested departments.
    years = dataset_years(data.votes)
    if not years:
        return {"years": [], "series": []}

    clauses = [PresentClause("party"), CodeInClause("department_code", codes)]
    if scope.election_body:
        clauses.append(TextEqualsClause("election_body", scope.election_body))
    rows = apply_clauses(data.votes, clauses)

    totals: Dict[tuple, int] = {}
    if not rows.empty:
        grouped = (
            rows.assign(department_norm=normalize_code_series(rows["department_code"]))
            .dropna(subset=["year"])
            .groupby(["department_norm", "year"])["votes"]
            .sum()
        )
        totals = {(str(dept), int(year)): int(v) for (dept, year), v in grouped.items()}
    logger.debug("trend: %s cells for %s", len(totals), codes)

    series = [
        {
            "department": DepartmentDirectory.display_name(code, names),
            "codigo_departamento": code,
            "data": [totals.get((normalize_code(code), y), 0) for y in years],
        }
        for code in codes
    ]
    return {"years": years, "series": series}
