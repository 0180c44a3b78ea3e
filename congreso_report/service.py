from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel

from congreso_report.cache import CountCache
from congreso_report.charts import indicator_chart, top_partidos_chart, trend_chart
from congreso_report.config import ReportSettings, apply_log_level, settings_from_env
from congreso_report.data import ReportData, load_report_data
from congreso_report.directory import DepartmentDirectory, MunicipalityDirectory
from congreso_report.errors import AggregateComputationError
from congreso_report.filters import ScopeFilter, normalize_scope
from congreso_report.metrics_elections import compute_elections_summary, list_corporations, list_feed_years, list_parties
from congreso_report.metrics_indicators import compute_indicator_series
from congreso_report.metrics_summary import compute_summary, empty_summary
from congreso_report.metrics_top_partidos import compute_top_partidos
from congreso_report.metrics_trend import compute_trend, dataset_years
from congreso_report.schemas import DepartmentModel, IndicatorParamsModel, MunicipalityOptionModel


logger = logging.getLogger(__name__)

T = TypeVar("T")
Params = Union[BaseModel, Mapping[str, Any], ScopeFilter, None]


class ReportService:
    """Entry point for every dashboard aggregate.

    Each call loads the (memoized) source tables, normalizes its parameters into a
    `ScopeFilter` and runs one builder. Any failure underneath is logged and raised
    as `AggregateComputationError`; no partial payload is returned.
    """

    def __init__(
        self,
        settings: Optional[ReportSettings] = None,
        *,
        loader: Optional[Callable[[], ReportData]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or settings_from_env()
        apply_log_level(self.settings.log_level)
        self._loader = loader or (lambda: load_report_data(self.settings.data_dir))
        self.count_cache = CountCache(self.settings.count_cache_ttl_seconds, clock=clock)

    @classmethod
    def from_data(cls, data: ReportData, settings: Optional[ReportSettings] = None, **kwargs: Any) -> "ReportService":
        return cls(settings, loader=lambda: data, **kwargs)

    # ---------------- plumbing ----------------
    def _run(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except AggregateComputationError:
            raise
        except Exception as exc:
            logger.exception("%s failed", operation)
            raise AggregateComputationError(operation, f"{operation} failed: {type(exc).__name__}: {exc}") from exc

    def scope(self, params: Params) -> ScopeFilter:
        if isinstance(params, ScopeFilter):
            return params
        if params is None:
            raw: Mapping[str, Any] = {}
        elif isinstance(params, BaseModel):
            raw = params.model_dump()
        else:
            raw = params
        return normalize_scope(raw, max_departments=self.settings.max_departments)

    @staticmethod
    def _feed(params: Params) -> str:
        if isinstance(params, IndicatorParamsModel):
            return params.feed
        if isinstance(params, Mapping):
            return str(params.get("feed") or "teradata")
        return "teradata"

    @staticmethod
    def _names(data: ReportData) -> Dict[str, str]:
        return DepartmentDirectory(data.departments).name_by_code()

    # ---------------- aggregates ----------------
    def summary(self, params: Params) -> Dict[str, Any]:
        def run() -> Dict[str, Any]:
            scope = self.scope(params)
            if not scope.department_codes:
                return empty_summary(scope.year)
            data = self._loader()
            return compute_summary(
                scope,
                data,
                names=self._names(data),
                top_parties=self.settings.summary_top_parties,
                dept_rank_cutoff=self.settings.summary_dept_rank_cutoff,
            )

        return self._run("summary", run)

    def trend(self, params: Params) -> Dict[str, Any]:
        def run() -> Dict[str, Any]:
            scope = self.scope(params)
            if not scope.department_codes:
                return {"years": [], "series": []}
            data = self._loader()
            return compute_trend(scope, data, names=self._names(data))

        return self._run("trend", run)

    def top_partidos(self, params: Params) -> Dict[str, Any]:
        def run() -> Dict[str, Any]:
            return compute_top_partidos(self.scope(params), self._loader(), limit=self.settings.top_partidos_limit)

        return self._run("top_partidos", run)

    def indicators(self, params: Params, feed: Optional[str] = None) -> Dict[str, Any]:
        def run() -> Dict[str, Any]:
            scope = self.scope(params)
            if not scope.department_codes:
                return {"groups": [], "labels": [], "series": []}
            data = self._loader()
            chosen = feed or self._feed(params)
            return compute_indicator_series(
                scope,
                data.kpi_feed(chosen),
                names=self._names(data),
                default_dimension=self.settings.default_dimension,
                label_max_len=self.settings.group_label_max_len,
                label_max_words=self.settings.group_label_max_words,
            )

        return self._run("indicators", run)

    def elections_summary(self) -> Dict[str, Any]:
        return self._run("elections_summary", lambda: compute_elections_summary(self._loader()))

    # ---------------- charts ----------------
    def trend_chart(self, params: Params) -> Dict[str, Any]:
        payload = self.trend(params)
        return self._run("trend_chart", lambda: trend_chart(payload))

    def top_partidos_chart(self, params: Params) -> Dict[str, Any]:
        payload = self.top_partidos(params)
        return self._run("top_partidos_chart", lambda: top_partidos_chart(payload))

    def indicator_chart(self, params: Params, feed: Optional[str] = None) -> Dict[str, Any]:
        payload = self.indicators(params, feed)
        return self._run("indicator_chart", lambda: indicator_chart(payload))

    # ---------------- catalogs ----------------
    def years(self) -> List[int]:
        return self._run("years", lambda: dataset_years(self._loader().votes))

    def corporations(self) -> List[str]:
        return self._run("corporations", lambda: list_corporations(self._loader().votes))

    def parties(self, params: Params) -> List[str]:
        return self._run("parties", lambda: list_parties(self.scope(params), self._loader().votes))

    def departments(self) -> List[Dict[str, Any]]:
        def run() -> List[Dict[str, Any]]:
            rows = DepartmentDirectory(self._loader().departments).list_all()
            return [DepartmentModel(**r).model_dump() for r in rows]

        return self._run("departments", run)

    def municipalities(self, department: Optional[Union[int, str]]) -> List[Dict[str, Any]]:
        def run() -> List[Dict[str, Any]]:
            if department is None or not str(department).strip():
                return []
            rows = MunicipalityDirectory(self._loader().municipalities).list_by_department(department)
            return [MunicipalityOptionModel(**r).model_dump(exclude_none=True) for r in rows]

        return self._run("municipalities", run)

    def indicator_years(self, feed: str = "teradata") -> List[int]:
        return self._run("indicator_years", lambda: list_feed_years(self._loader().kpi_feed(feed)))

    def count_records(self) -> int:
        return self._run("count", lambda: self.count_cache.get(lambda: len(self._loader().votes)))
