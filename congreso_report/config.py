from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from congreso_report.errors import ConfigError


DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data"
ENV_DATA_DIR = "CONGRESO_REPORT_DATA_DIR"
ENV_CACHE_TTL = "CONGRESO_REPORT_CACHE_TTL"
ENV_LOG_LEVEL = "CONGRESO_REPORT_LOG_LEVEL"


@dataclass(frozen=True)
class ReportSettings:
    data_dir: Path = DEFAULT_DATA_DIR
    max_departments: int = 3
    top_partidos_limit: int = 7
    summary_top_parties: int = 5
    # The per-department summary list keeps rank <= 1 rows only.
    summary_dept_rank_cutoff: int = 1
    count_cache_ttl_seconds: float = 3600.0
    default_dimension: str = "Otros"
    group_label_max_len: int = 22
    group_label_max_words: int = 3
    log_level: str = "INFO"


def _as_int(value: object, default: int, *, lo: int, hi: int) -> int:
    try:
        out = int(value)  # type: ignore[arg-type]
    except Exception:
        out = default
    return max(lo, min(hi, out))


def _as_float(value: object, default: float, *, lo: float) -> float:
    try:
        out = float(value)  # type: ignore[arg-type]
    except Exception:
        out = default
    return max(lo, out)


def load_settings(raw: Optional[Mapping[str, Any]] = None) -> ReportSettings:
    raw = raw or {}
    defaults = ReportSettings()

    data_dir = raw.get("data_dir") or defaults.data_dir
    default_dimension = str(raw.get("default_dimension") or defaults.default_dimension).strip() or defaults.default_dimension

    log_level = str(raw.get("log_level") or defaults.log_level).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"Unknown log level: {log_level}")

    return ReportSettings(
        data_dir=Path(data_dir),
        max_departments=_as_int(raw.get("max_departments", defaults.max_departments), defaults.max_departments, lo=1, hi=50),
        top_partidos_limit=_as_int(raw.get("top_partidos_limit", defaults.top_partidos_limit), defaults.top_partidos_limit, lo=1, hi=200),
        summary_top_parties=_as_int(raw.get("summary_top_parties", defaults.summary_top_parties), defaults.summary_top_parties, lo=1, hi=200),
        summary_dept_rank_cutoff=_as_int(
            raw.get("summary_dept_rank_cutoff", defaults.summary_dept_rank_cutoff), defaults.summary_dept_rank_cutoff, lo=1, hi=200
        ),
        count_cache_ttl_seconds=_as_float(raw.get("count_cache_ttl_seconds", defaults.count_cache_ttl_seconds), defaults.count_cache_ttl_seconds, lo=0.0),
        default_dimension=default_dimension,
        group_label_max_len=_as_int(raw.get("group_label_max_len", defaults.group_label_max_len), defaults.group_label_max_len, lo=2, hi=200),
        group_label_max_words=_as_int(raw.get("group_label_max_words", defaults.group_label_max_words), defaults.group_label_max_words, lo=1, hi=50),
        log_level=log_level,
    )


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> ReportSettings:
    env = os.environ if environ is None else environ
    raw: dict = {}
    if env.get(ENV_DATA_DIR):
        raw["data_dir"] = env[ENV_DATA_DIR]
    if env.get(ENV_CACHE_TTL):
        raw["count_cache_ttl_seconds"] = env[ENV_CACHE_TTL]
    if env.get(ENV_LOG_LEVEL):
        raw["log_level"] = env[ENV_LOG_LEVEL]
    return load_settings(raw)


PACKAGE_LOGGER = "congreso_report"


def apply_log_level(level: str) -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())
    return logger


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger (safe to call repeatedly)."""
    logger = apply_log_level(level)
    if not any(getattr(h, "_congreso_report", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler._congreso_report = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
