from __future__ import annotations

import logging
from typing import Any, Dict, List

import pandas as pd

from congreso_report.data import ReportData
from congreso_report.filters import PresentClause, ScopeFilter, apply_clauses, clean_text_series
from congreso_report.ranking import rank_within, winners


logger = logging.getLogger(__name__)


def list_corporations(votes: pd.DataFrame) -> List[str]:
    if votes.empty:
        return []
    bodies = clean_text_series(votes["election_body"]).dropna().unique()
    return sorted(str(b) for b in bodies)


def list_parties(scope: ScopeFilter, votes: pd.DataFrame) -> List[str]:
    rows = apply_clauses(votes, scope.without_exclusion().clauses())
    if rows.empty:
        return []
    return sorted(str(p) for p in clean_text_series(rows["party"]).dropna().unique())


def list_feed_years(frame: pd.DataFrame) -> List[int]:
    if frame.empty or "year" not in frame.columns:
        return []
    return sorted(int(y) for y in pd.to_numeric(frame["year"], errors="coerce").dropna().astype(int).unique())


def compute_elections_summary(data: ReportData) -> Dict[str, Any]:
    """Total votes and winning party per (year, election body), newest year first."""
    rows = apply_clauses(data.votes, [PresentClause("party"), PresentClause("election_body")])
    rows = rows.dropna(subset=["year"]) if not rows.empty else rows
    if rows.empty:
        return {"summaries": []}

    rows = rows.assign(
        party=clean_text_series(rows["party"]),
        election_body=clean_text_series(rows["election_body"]),
        year=rows["year"].astype(int),
    )
    ranked = rank_within(rows, ["year", "election_body"], "party", "votes")
    # Totals come from party rows only, so every (year, body) key has a rank-1 winner.
    totals = {
        (int(y), str(b)): int(v) for (y, b), v in ranked.groupby(["year", "election_body"])["votes"].sum().items()
    }

    by_year: Dict[int, List[Dict[str, Any]]] = {}
    for _, r in winners(ranked).iterrows():
        year, body = int(r["year"]), str(r["election_body"])
        by_year.setdefault(year, []).append(
            {
                "corporacion": body,
                "totalVotos": totals[(year, body)],
                "partidoGanador": str(r["party"]),
                "votosPartidoGanador": int(r["votes"]),
            }
        )

    summaries = [
        {"year": year, "corporations": sorted(items, key=lambda c: c["corporacion"])}
        for year, items in sorted(by_year.items(), key=lambda kv: kv[0], reverse=True)
    ]
    logger.debug("elections summary: %s years", len(summaries))
    return {"summaries": summaries}
