from __future__ import annotations

import logging
from typing import Any, Dict

from congreso_report.data import ReportData
from congreso_report.filters import ScopeFilter, TextEqualsClause, apply_clauses, clean_text_series
from congreso_report.ranking import rank_within, sum_votes, top_ranked


logger = logging.getLogger(__name__)

TOP_PARTIDOS_LIMIT = 7


def compute_top_partidos(scope: ScopeFilter, data: ReportData, *, limit: int = TOP_PARTIDOS_LIMIT) -> Dict[str, Any]:
    votes = data.votes

    ranked_rows = apply_clauses(votes, scope.clauses())
    if not ranked_rows.empty:
        ranked_rows = ranked_rows.assign(party=clean_text_series(ranked_rows["party"]))
    top = top_ranked(rank_within(ranked_rows, [], "party", "votes"), limit)

    # The exclusion only decides which parties are ranked; scope totals ignore it.
    scope_total = sum_votes(apply_clauses(votes, scope.clauses(include_exclusion=False)))

    payload: Dict[str, Any] = {
        "data": [
            {"partido": str(r["party"]), "totalVotos": int(r["votes"]), "rank": int(r["rank"])}
            for _, r in top.iterrows()
        ],
        "totalVotosAmbito": scope_total,
    }

    if scope.excluded_party:
        party_clauses = scope.without_exclusion().clauses() + [TextEqualsClause("party", scope.excluded_party)]
        payload["excludedParty"] = {
            "name": scope.excluded_party,
            "totalVotos": sum_votes(apply_clauses(votes, party_clauses)),
        }

    if scope.has_department_and_municipality:
        dept_clauses = scope.department_level().clauses(include_exclusion=False)
        payload["totalVotosDepartamento"] = sum_votes(apply_clauses(votes, dept_clauses))

    logger.debug("top partidos: %s ranked, scope total %s", len(top), scope_total)
    return payload
