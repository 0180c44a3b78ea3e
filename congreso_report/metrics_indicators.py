from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any, Dict, List

import pandas as pd

from congreso_report.directory import DepartmentDirectory
from congreso_report.filters import (
    CodeInClause,
    PresentClause,
    ScopeFilter,
    YearClause,
    apply_clauses,
    clean_text_series,
    normalize_code,
    normalize_code_series,
)


logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = "Otros"
GROUP_LABEL_MAX_LEN = 22
GROUP_LABEL_MAX_WORDS = 3


def fold_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def label_sort_key(label: str) -> tuple:
    """Alphabetical order that files "Ética" among the E's."""
    return (fold_accents(label).casefold(), label.casefold(), label)


def slugify(value: str) -> str:
    ascii_value = fold_accents(value).encode("ascii", "ignore").decode("ascii")
    s = re.sub(r"\s+", "-", ascii_value.lower())
    return re.sub(r"[^a-z0-9-]", "", s)


def short_label(value: str, max_len: int = GROUP_LABEL_MAX_LEN, max_words: int = GROUP_LABEL_MAX_WORDS) -> str:
    t = value.strip()
    if len(t) <= max_len:
        return t
    by_words = " ".join(t.split()[:max_words])
    if len(by_words) > max_len:
        return by_words[: max_len - 1] + "…"
    return by_words


def indicator_dimensions(rows: pd.DataFrame, default: str = DEFAULT_DIMENSION) -> Dict[str, str]:
    """First non-blank dimension seen per indicator, else `default`."""
    out: Dict[str, str] = {}
    if rows.empty:
        return out
    with_dim = rows.dropna(subset=["dimension"]).drop_duplicates(subset=["indicator"], keep="first")
    for r in with_dim.itertuples(index=False):
        out[str(r.indicator)] = str(r.dimension)
    for ind in rows["indicator"].dropna().unique():
        out.setdefault(str(ind), default)
    return out


def build_groups(
    labels: List[str],
    dimensions: Dict[str, str],
    *,
    default: str = DEFAULT_DIMENSION,
    max_len: int = GROUP_LABEL_MAX_LEN,
    max_words: int = GROUP_LABEL_MAX_WORDS,
) -> List[Dict[str, Any]]:
    indices: Dict[str, List[int]] = {}
    for idx, label in enumerate(labels):
        indices.setdefault(dimensions.get(label, default), []).append(idx)
    groups = [
        {
            "id": slugify(name),
            "label": short_label(name, max_len, max_words),
            "fullLabel": name,
            "indicatorIndices": idxs,
        }
        for name, idxs in indices.items()
        if idxs
    ]
    return sorted(groups, key=lambda g: label_sort_key(g["label"]))


def compute_indicator_series(
    scope: ScopeFilter,
    kpis: pd.DataFrame,
    *,
    names: Dict[str, str],
    default_dimension: str = DEFAULT_DIMENSION,
    label_max_len: int = GROUP_LABEL_MAX_LEN,
    label_max_words: int = GROUP_LABEL_MAX_WORDS,
) -> Dict[str, Any]:
    codes = scope.department_codes
    if not codes:
        return {"groups": [], "labels": [], "series": []}

    clauses = [CodeInClause("department_code", codes), PresentClause("indicator")]
    if scope.year is not None:
        clauses.append(YearClause(scope.year))
    rows = apply_clauses(kpis, clauses)
    if rows.empty:
        return {"groups": [], "labels": [], "series": []}

    rows = rows.assign(
        department_norm=normalize_code_series(rows["department_code"]),
        indicator=clean_text_series(rows["indicator"]),
        dimension=clean_text_series(rows["dimension"]),
        value=pd.to_numeric(rows["value"], errors="coerce"),
    )
    # Repeated measurements are averaged, never summed.
    averages = rows.groupby(["department_norm", "indicator"])["value"].mean()
    values = {(str(d), str(i)): (0.0 if pd.isna(v) else float(v)) for (d, i), v in averages.items()}

    labels = sorted(str(i) for i in rows["indicator"].unique())
    series = [
        {
            "department": DepartmentDirectory.display_name(code, names),
            "codigo_departamento": code,
            "data": [values.get((normalize_code(code), label), 0.0) for label in labels],
        }
        for code in codes
    ]
    groups = build_groups(
        labels,
        indicator_dimensions(rows, default_dimension),
        default=default_dimension,
        max_len=label_max_len,
        max_words=label_max_words,
    )
    logger.debug("indicators: %s labels, %s groups", len(labels), len(groups))
    return {"groups": groups, "labels": labels, "series": series}
