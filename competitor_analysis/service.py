"""Service layer wiring resolver, comparison engine and comparison cache."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from competitor_analysis.comparison.charts import chart_for, normalize_chart_type
from competitor_analysis.comparison.engine import ComparisonEngine, detail_view, normalize_detail_metric
from competitor_analysis.config.settings import Settings
from competitor_analysis.errors import ComparisonFailure, ResolutionFailure
from competitor_analysis.models.comparison import ChartSeries, ComparisonResult, MetricDetail
from competitor_analysis.models.record import CompanyRecord, normalize_key
from competitor_analysis.orchestrator.resolver import CompanyResolver
from competitor_analysis.store.cache import InMemoryRecordStore, RecordStore, is_stale, utcnow

logger = logging.getLogger(__name__)


class CompetitorService:
    """Entry point for the HTTP layer.

    Comparisons are cached by the ordered pair of normalized names and
    recomputed once stale or once either company record is newer.
    """

    def __init__(
        self,
        resolver: Optional[CompanyResolver] = None,
        engine: Optional[ComparisonEngine] = None,
        comparison_store: Optional[RecordStore] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or Settings()
        self._resolver = resolver or CompanyResolver(settings=self._settings)
        self._engine = engine or ComparisonEngine()
        self._comparisons = (
            comparison_store if comparison_store is not None else InMemoryRecordStore()
        )
        self._ttl = timedelta(minutes=self._settings.cache_ttl_minutes)

    @property
    def resolver(self) -> CompanyResolver:
        return self._resolver

    def list_companies(self) -> list[CompanyRecord]:
        return sorted(self._resolver.list_records(), key=lambda r: r.normalized_key)

    async def get_company(self, name: str) -> CompanyRecord:
        return await self._resolver.resolve(name)

    async def refresh_company(self, name: str) -> CompanyRecord:
        """Re-fetch from providers; cached comparisons involving it go stale."""
        logger.info(f"Refresh requested for '{name}'")
        return await self._resolver.refresh(name)

    async def _resolve_pair(self, name1: str, name2: str) -> tuple[CompanyRecord, CompanyRecord]:
        results = await asyncio.gather(
            self._resolver.resolve(name1),
            self._resolver.resolve(name2),
            return_exceptions=True,
        )
        for name, result in zip((name1, name2), results):
            if isinstance(result, ResolutionFailure):
                raise ComparisonFailure(name) from result
            if isinstance(result, BaseException):
                raise result
        return results[0], results[1]

    async def compare(self, name1: str, name2: str) -> ComparisonResult:
        a, b = await self._resolve_pair(name1, name2)
        key = f"{normalize_key(name1)}|{normalize_key(name2)}"

        cached: Optional[ComparisonResult] = self._comparisons.get(key)
        if cached is not None and not self._is_outdated(cached, a, b):
            return cached

        result = self._engine.compare(a, b)
        self._comparisons.put(key, result)
        return result

    async def chart(self, name1: str, name2: str, chart_type: str) -> ChartSeries:
        normalize_chart_type(chart_type)
        a, b = await self._resolve_pair(name1, name2)
        return chart_for(a, b, chart_type)

    async def detail(self, name1: str, name2: str, metric: str) -> MetricDetail:
        normalize_detail_metric(metric)
        result = await self.compare(name1, name2)
        return detail_view(result, metric)

    def _is_outdated(self, cached: ComparisonResult, a: CompanyRecord, b: CompanyRecord) -> bool:
        if is_stale(cached, utcnow(), self._ttl):
            return True
        return any(
            r.last_updated is not None and r.last_updated > cached.last_updated for r in (a, b)
        )

    async def aclose(self) -> None:
        await self._resolver.aclose()
