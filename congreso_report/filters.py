from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd


MAX_DEPARTMENTS = 3
_LEADING_ZEROS = re.compile(r"^0+")

Code = Union[str, int]


# ---------------- Identifier normalization ----------------
def normalize_code(value: Code) -> str:
    """Canonical form of a department/municipality code: "011" and "11" both become "11"."""
    s = str(value).strip()
    return _LEADING_ZEROS.sub("", s) or "0"


def codes_equivalent(a: Code, b: Code) -> bool:
    return normalize_code(a) == normalize_code(b)


def normalize_code_series(series: pd.Series) -> pd.Series:
    """Vectorized `normalize_code`; missing codes stay missing so they never match."""
    s = series.astype("string").str.strip()
    out = s.str.replace(_LEADING_ZEROS, "", regex=True)
    emptied = out.eq("").fillna(False).astype(bool) & s.notna()
    return out.mask(emptied, "0")


def clean_text_series(series: pd.Series) -> pd.Series:
    s = series.astype("string").str.strip()
    return s.mask(s.eq("").fillna(False).astype(bool))


# ---------------- Predicate clauses ----------------
def _false_mask(df: pd.DataFrame) -> pd.Series:
    return pd.Series(np.zeros(len(df), dtype=bool), index=df.index)


@dataclass(frozen=True)
class YearClause:
    year: int
    column: str = "year"

    def mask(self, df: pd.DataFrame) -> pd.Series:
        if self.column not in df.columns:
            return _false_mask(df)
        years = pd.to_numeric(df[self.column], errors="coerce")
        return years.eq(self.year).fillna(False).astype(bool)


@dataclass(frozen=True)
class TextEqualsClause:
    column: str
    value: str

    def mask(self, df: pd.DataFrame) -> pd.Series:
        if self.column not in df.columns:
            return _false_mask(df)
        return clean_text_series(df[self.column]).eq(self.value.strip()).fillna(False).astype(bool)


@dataclass(frozen=True)
class TextNotEqualsClause:
    column: str
    value: str

    def mask(self, df: pd.DataFrame) -> pd.Series:
        if self.column not in df.columns:
            return ~_false_mask(df)
        return clean_text_series(df[self.column]).fillna("").ne(self.value.strip()).astype(bool)


@dataclass(frozen=True)
class PresentClause:
    """Column is non-null and non-blank after trimming."""

    column: str

    def mask(self, df: pd.DataFrame) -> pd.Series:
        if self.column not in df.columns:
            return _false_mask(df)
        return clean_text_series(df[self.column]).notna().astype(bool)


@dataclass(frozen=True)
class CodeInClause:
    """Zero-padded and unpadded forms of a code match each other (one mask, no double counting)."""

    column: str
    codes: Sequence[str]

    def mask(self, df: pd.DataFrame) -> pd.Series:
        if self.column not in df.columns or not self.codes:
            return _false_mask(df)
        wanted = {normalize_code(c) for c in self.codes}
        return normalize_code_series(df[self.column]).isin(wanted).fillna(False).astype(bool)


Clause = Union[YearClause, TextEqualsClause, TextNotEqualsClause, PresentClause, CodeInClause]


def compose_and(clauses: Iterable[Clause]) -> Callable[[pd.DataFrame], pd.Series]:
    clauses = list(clauses)

    def predicate(df: pd.DataFrame) -> pd.Series:
        mask = ~_false_mask(df)
        for clause in clauses:
            mask &= clause.mask(df)
        return mask

    return predicate


def apply_clauses(df: pd.DataFrame, clauses: Iterable[Clause]) -> pd.DataFrame:
    if df.empty:
        return df
    return df[compose_and(clauses)(df)]


# ---------------- Scope ----------------
@dataclass(frozen=True)
class ScopeFilter:
    year: Optional[int] = None
    election_body: Optional[str] = None
    department_code: Optional[str] = None
    municipality_code: Optional[str] = None
    excluded_party: Optional[str] = None
    department_codes: List[str] = field(default_factory=list)

    def clauses(self, *, party_bearing: bool = True, include_exclusion: bool = True) -> List[Clause]:
        out: List[Clause] = []
        if party_bearing:
            out.append(PresentClause("party"))
        if self.year is not None:
            out.append(YearClause(self.year))
        if self.election_body:
            out.append(TextEqualsClause("election_body", self.election_body))
        if self.department_code:
            out.append(CodeInClause("department_code", [self.department_code]))
        if self.municipality_code:
            out.append(CodeInClause("municipality_code", [self.municipality_code]))
        if include_exclusion and self.excluded_party:
            out.append(TextNotEqualsClause("party", self.excluded_party))
        return out

    def without_exclusion(self) -> "ScopeFilter":
        return replace(self, excluded_party=None)

    def department_level(self) -> "ScopeFilter":
        return replace(self, municipality_code=None)

    @property
    def has_department_and_municipality(self) -> bool:
        return bool(self.department_code) and bool(self.municipality_code)


def _as_optional_text(value: object) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_year(value: object) -> Optional[int]:
    """Non-numeric years mean "no year filter"; whole floats such as 2022.0 still count."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, np.integer)):
        return int(value)
    s = str(value).strip()
    try:
        return int(s)
    except ValueError:
        pass
    try:
        number = float(s)
    except ValueError:
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def parse_department_codes(value: object, *, limit: int = MAX_DEPARTMENTS) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[object] = value.split(",")
    elif isinstance(value, (int, np.integer)):
        items = [value]
    else:
        items = value  # type: ignore[assignment]
    out: List[str] = []
    for item in items:
        if item is None:
            continue
        code = str(item).strip()
        if code and code not in out:
            out.append(code)
    return out[: max(0, limit)]


def normalize_scope(raw: Mapping[str, object], *, max_departments: int = MAX_DEPARTMENTS) -> ScopeFilter:
    return ScopeFilter(
        year=parse_year(raw.get("year")),
        election_body=_as_optional_text(raw.get("election_body") or raw.get("corporation")),
        department_code=_as_optional_text(raw.get("department_code") or raw.get("department")),
        municipality_code=_as_optional_text(raw.get("municipality_code") or raw.get("municipality")),
        excluded_party=_as_optional_text(raw.get("excluded_party") or raw.get("exclude_party")),
        department_codes=parse_department_codes(raw.get("department_codes") or raw.get("departments"), limit=max_departments),
    )
