from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from congreso_report.data import ReportData
from congreso_report.directory import DepartmentDirectory
from congreso_report.filters import (
    CodeInClause,
    PresentClause,
    ScopeFilter,
    TextEqualsClause,
    YearClause,
    apply_clauses,
    clean_text_series,
    normalize_code,
    normalize_code_series,
)
from congreso_report.ranking import rank_within, sum_votes, top_ranked


logger = logging.getLogger(__name__)


def empty_summary(year: Optional[int]) -> Dict[str, Any]:
    return {"year": year, "winningByDept": [], "top5ByDept": {}, "top5Parties": [], "top5ByDeptNombre": {}}


def summary_rows(scope: ScopeFilter, votes: pd.DataFrame) -> pd.DataFrame:
    """Party vote sums per requested department, ranked inside each department."""
    clauses = [PresentClause("party"), CodeInClause("department_code", scope.department_codes)]
    if scope.year is not None:
        clauses.append(YearClause(scope.year))
    if scope.election_body:
        clauses.append(TextEqualsClause("election_body", scope.election_body))
    rows = apply_clauses(votes, clauses)
    if rows.empty:
        return rank_within(rows, ["department_norm"])
    rows = rows.assign(
        department_norm=normalize_code_series(rows["department_code"]),
        party=clean_text_series(rows["party"]),
    )
    return rank_within(rows, ["department_norm"], "party", "votes")


def compute_summary(
    scope: ScopeFilter,
    data: ReportData,
    *,
    names: Dict[str, str],
    top_parties: int = 5,
    dept_rank_cutoff: int = 1,
) -> Dict[str, Any]:
    codes = scope.department_codes
    if not codes:
        return empty_summary(scope.year)

    ranked = summary_rows(scope, data.votes)
    logger.debug("summary: %s ranked rows for %s", len(ranked), codes)

    winning_by_dept: List[Dict[str, Any]] = []
    top_by_dept: Dict[str, List[Dict[str, Any]]] = {}
    for code in codes:
        dept_rows = ranked[ranked["department_norm"] == normalize_code(code)]
        winner = dept_rows[dept_rows["rank"] == 1]
        if not winner.empty:
            w = winner.iloc[0]
            winning_by_dept.append(
                {
                    "codigo_departamento": code,
                    "department": DepartmentDirectory.display_name(code, names),
                    "partyName": str(w["party"]),
                    "totalVotes": int(w["votes"]),
                }
            )
        # Only rank <= cutoff (1 by default) rows are kept. pct is each row's share of the
        # kept rows, not of the whole department total, so the default cutoff always gives 100.
        top = top_ranked(dept_rows, dept_rank_cutoff)
        total_votes = sum_votes(top)
        top_by_dept[code] = [
            {
                "partyName": str(r["party"]),
                "votes": int(r["votes"]),
                "pct": (100.0 * int(r["votes"]) / total_votes) if total_votes > 0 else 0.0,
            }
            for _, r in top.iterrows()
        ]

    # Cross-department totals, independent of the per-department ranks.
    overall = top_ranked(rank_within(ranked, [], "party", "votes"), top_parties)
    top_parties_rows = [{"partyName": str(r["party"]), "totalVotes": int(r["votes"])} for _, r in overall.iterrows()]

    return {
        "year": scope.year,
        "winningByDept": winning_by_dept,
        "top5ByDept": top_by_dept,
        "top5Parties": top_parties_rows,
        "top5ByDeptNombre": {code: DepartmentDirectory.display_name(code, names) for code in codes},
    }
