from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from congreso_report.errors import DataSourceError


logger = logging.getLogger(__name__)

VOTES_TABLE = "congreso_resultados"
TERADATA_TABLE = "kpis_gestion_teridata"
DANE_TABLE = "kpis_realidad_dane"
DEPARTMENTS_TABLE = "divi_departamentos"
MUNICIPALITIES_TABLE = "divi_municipio"
TABLE_SUFFIXES = (".xlsx", ".csv")

VOTE_COLUMNS = {
    "id": "id",
    "anio_eleccion": "year",
    "corporacion": "election_body",
    "circunscripcion": "circumscription",
    "circ_rep": "circ_rep",
    "codigo_departamento": "department_code",
    "codigo_divipola": "municipality_code",
    "codigo_divipole": "municipality_code",
    "nombre_puesto": "polling_place",
    "comuna": "comuna",
    "mesa": "mesa",
    "votos": "votes",
    "partido": "party",
    "nombre_candidato": "candidate",
    "origen": "source",
    "fecha_carga": "load_date",
}

TERADATA_COLUMNS = {
    "codigo_divipole": "municipality_code",
    "codigo_divipola": "municipality_code",
    "codigo_departamento": "department_code",
    "dimension": "dimension",
    "subcategoria": "subcategory",
    "indicador": "indicator",
    "unidad_medida": "unit",
    "dato_numerico": "value",
    "dato_cualitativo": "qualitative_value",
    "anio": "year",
    "mes": "month",
    "fuente": "source",
}

DANE_COLUMNS = {
    "codigo_departamento": "department_code",
    "variable": "indicator",
    "anio": "year",
    "total": "value",
    "cabeceras": "cabeceras",
    "centros_poblados_rural": "centros_poblados_rural",
}

DEPARTMENT_COLUMNS = {
    "codigo_departamento": "department_code",
    "nombre": "name",
}

MUNICIPALITY_COLUMNS = {
    "codigo_divipole": "municipality_code",
    "codigo_divipola": "municipality_code",
    "des_municipio": "name",
    "nombre": "name",
    "codigo_departamento": "department_code",
}

VOTE_TEXT = ["election_body", "circumscription", "circ_rep", "department_code", "municipality_code",
             "polling_place", "comuna", "mesa", "party", "candidate", "source", "load_date"]
KPI_TEXT = ["department_code", "municipality_code", "dimension", "subcategory", "indicator", "unit",
            "qualitative_value", "source"]


# ---------------- Frame helpers ----------------
def drop_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, ~df.columns.duplicated()]


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col]
            if isinstance(series, pd.DataFrame):
                series = series.iloc[:, 0]
            series = series.astype("string").str.strip()
            series = series.replace({"nan": pd.NA, "None": pd.NA, "NULL": pd.NA, "<NA>": pd.NA, "": pd.NA})
            df[col] = series
    return df


def ensure_int_cols(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").round().astype("Int64")
    return df


def conform(df: Optional[pd.DataFrame], columns: Dict[str, str]) -> pd.DataFrame:
    """Rename source headers to canonical names and add any missing canonical column."""
    canonical = list(dict.fromkeys(columns.values()))
    if df is None or df.empty:
        return pd.DataFrame({c: pd.Series(dtype="object") for c in canonical})
    out = df.copy()
    out.columns = [str(c).strip().lower() for c in out.columns]
    out = out.rename(columns=columns)
    out = drop_duplicate_columns(out)
    for col in canonical:
        if col not in out.columns:
            out[col] = pd.NA
    extra = [c for c in out.columns if c not in canonical]
    return out[canonical + extra].reset_index(drop=True)


def prepare_votes(df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    out = conform(df, VOTE_COLUMNS)
    out = coerce_str_safe(out, VOTE_TEXT)
    out = ensure_int_cols(out, ["year", "id"])
    out["votes"] = pd.to_numeric(out["votes"], errors="coerce").fillna(0).clip(lower=0).round().astype("int64")
    return out


def prepare_teradata(df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    out = conform(df, TERADATA_COLUMNS)
    out = coerce_str_safe(out, KPI_TEXT)
    out = ensure_int_cols(out, ["year", "month"])
    return numericize(out, ["value"])


def prepare_dane(df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    out = conform(df, DANE_COLUMNS)
    out = coerce_str_safe(out, KPI_TEXT)
    out = ensure_int_cols(out, ["year"])
    # DANE carries no dimension; every variable falls into the default group.
    if "dimension" not in out.columns:
        out["dimension"] = pd.Series(pd.NA, index=out.index, dtype="string")
    return numericize(out, ["value", "cabeceras", "centros_poblados_rural"])


def prepare_departments(df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    out = conform(df, DEPARTMENT_COLUMNS)
    return coerce_str_safe(out, ["department_code", "name"])


def prepare_municipalities(df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    out = conform(df, MUNICIPALITY_COLUMNS)
    return coerce_str_safe(out, ["municipality_code", "name", "department_code"])


# ---------------- Source bundle ----------------
@dataclass(frozen=True, eq=False)
class ReportData:
    votes: pd.DataFrame = field(default_factory=prepare_votes)
    teradata: pd.DataFrame = field(default_factory=prepare_teradata)
    dane: pd.DataFrame = field(default_factory=prepare_dane)
    departments: pd.DataFrame = field(default_factory=prepare_departments)
    municipalities: pd.DataFrame = field(default_factory=prepare_municipalities)
    files: Tuple[str, ...] = ()

    @classmethod
    def from_frames(
        cls,
        *,
        votes: Optional[pd.DataFrame] = None,
        teradata: Optional[pd.DataFrame] = None,
        dane: Optional[pd.DataFrame] = None,
        departments: Optional[pd.DataFrame] = None,
        municipalities: Optional[pd.DataFrame] = None,
        files: Tuple[str, ...] = (),
    ) -> "ReportData":
        return cls(
            votes=prepare_votes(votes),
            teradata=prepare_teradata(teradata),
            dane=prepare_dane(dane),
            departments=prepare_departments(departments),
            municipalities=prepare_municipalities(municipalities),
            files=files,
        )

    def kpi_feed(self, feed: str) -> pd.DataFrame:
        if feed == "teradata":
            return self.teradata
        if feed == "dane":
            return self.dane
        raise ValueError(f"Unknown indicator feed: {feed}")


# ---------------- Loaders ----------------
def find_table(data_dir: Path, stem: str) -> Optional[Path]:
    for suffix in TABLE_SUFFIXES:
        path = data_dir / f"{stem}{suffix}"
        if path.exists():
            return path
    return None


def read_table(path: Path) -> pd.DataFrame:
    # Everything is read as text so zero-padded codes survive; numerics are coerced later.
    try:
        if path.suffix.lower() == ".xlsx":
            return pd.read_excel(path, dtype=str, engine="openpyxl")
        if path.suffix.lower() == ".csv":
            return pd.read_csv(path, dtype=str, encoding="utf-8-sig", keep_default_na=False)
    except Exception as exc:
        raise DataSourceError(f"Could not read {path.name}: {exc}") from exc
    raise DataSourceError(f"Unsupported table format: {path.name}")


def get_source_files(data_dir: Path) -> List[Path]:
    stems = [VOTES_TABLE, TERADATA_TABLE, DANE_TABLE, DEPARTMENTS_TABLE, MUNICIPALITIES_TABLE]
    return [p for p in (find_table(data_dir, s) for s in stems) if p is not None]


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((f.name, f.stat().st_mtime) for f in files)


@lru_cache(maxsize=4)
def _load_report_data_cached(data_dir: str, files_sig: Tuple[Tuple[str, float], ...]) -> ReportData:
    base = Path(data_dir)
    frames: Dict[str, pd.DataFrame] = {}
    for name, _ in files_sig:
        path = base / name
        frames[path.stem] = read_table(path)
        logger.debug("loaded %s: %s rows", name, len(frames[path.stem]))
    return ReportData.from_frames(
        votes=frames.get(VOTES_TABLE),
        teradata=frames.get(TERADATA_TABLE),
        dane=frames.get(DANE_TABLE),
        departments=frames.get(DEPARTMENTS_TABLE),
        municipalities=frames.get(MUNICIPALITIES_TABLE),
        files=tuple(name for name, _ in files_sig),
    )


def load_report_data(data_dir: Path) -> ReportData:
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise DataSourceError(f"Data directory not found: {data_dir}")
    files = get_source_files(data_dir)
    if not files:
        logger.warning("no source tables found in %s", data_dir)
        return ReportData.from_frames()
    return _load_report_data_cached(str(data_dir), file_signature(files))
