"""Company resolver -- cache check, symbol lookup, provider tiers, finalize."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from competitor_analysis.config.settings import Settings
from competitor_analysis.errors import ResolutionFailure
from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import (
    CompanyRecord,
    Financials,
    PartialRecord,
    normalize_key,
)
from competitor_analysis.providers.base import ProviderBase
from competitor_analysis.store.cache import (
    InMemoryRecordStore,
    NoDataMarker,
    RecordStore,
    is_stale,
    utcnow,
)

from .estimates import backfill_customer_metrics
from .merge import merge_partial, normalize_units
from .tiers import Tier, default_tiers

logger = logging.getLogger(__name__)


def primary_source(record: CompanyRecord) -> str:
    """Label of the provider that effectively sourced the record.

    The first non-estimate provider of a financial figure, else the first
    non-estimate provider of anything, else "Estimate".
    """
    real = [
        e for e in record.data_source_details
        if e.source != DataSource.ESTIMATE.value and e.field != "financials.stockSymbol"
    ]
    for entry in real:
        if entry.field.startswith("financials."):
            return entry.source
    if real:
        return real[0].source
    return DataSource.ESTIMATE.value


class CompanyResolver:
    """Resolves a company name to a fused, cached CompanyRecord.

    Flow:
    - Cache check: fresh record -> return it; fresh no-data marker -> fail
      fast; stale record -> return it and refresh in the background.
    - Symbol resolution through the first provider that finds a ticker.
    - Tiers in order; a tier runs only while its predicate says data is
      missing. Providers in a tier run concurrently and merge in order.
    - Finalize: fail if nothing descriptive or financial was found,
      otherwise backfill estimates, stamp and store.
    """

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        tiers: Optional[list[Tier]] = None,
        symbol_resolvers: Optional[list[ProviderBase]] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or Settings()
        self._store = store if store is not None else InMemoryRecordStore()
        self._tiers = tiers if tiers is not None else default_tiers(self._settings)
        if symbol_resolvers is None:
            symbol_resolvers = [
                p for tier in self._tiers for p in tier.providers if p.supports_symbol_search
            ]
        self._symbol_resolvers = symbol_resolvers
        self._ttl = timedelta(minutes=self._settings.cache_ttl_minutes)
        self._no_data_ttl = timedelta(minutes=self._settings.no_data_ttl_minutes)
        self._refreshing: dict[str, asyncio.Task] = {}

    @property
    def tiers(self) -> list[Tier]:
        return self._tiers

    @property
    def providers(self) -> list[ProviderBase]:
        return [p for tier in self._tiers for p in tier.providers]

    def list_records(self) -> list[CompanyRecord]:
        return [e for e in self._store.values() if isinstance(e, CompanyRecord)]

    async def resolve(self, name: str) -> CompanyRecord:
        key = normalize_key(name)
        if not key:
            raise ResolutionFailure(name)

        cached = self._store.get(key)
        now = utcnow()
        if isinstance(cached, NoDataMarker):
            if not is_stale(cached, now, self._no_data_ttl):
                logger.info(f"'{name}' recently resolved to no data; not retrying yet")
                raise ResolutionFailure(name)
        elif cached is not None:
            if not is_stale(cached, now, self._ttl):
                return cached
            if self._settings.serve_stale:
                logger.info(f"Serving stale record for '{name}' while refreshing")
                self._schedule_refresh(name, key)
                return cached

        return await self._resolve_fresh(name)

    async def refresh(self, name: str) -> CompanyRecord:
        """Re-resolve from providers, replacing any cached record wholesale."""
        return await self._resolve_fresh(name)

    async def aclose(self) -> None:
        """Wait for in-flight background refreshes and close provider clients."""
        if self._refreshing:
            await asyncio.gather(*self._refreshing.values(), return_exceptions=True)
        for provider in self.providers:
            await provider.aclose()

    def _schedule_refresh(self, name: str, key: str) -> None:
        if key in self._refreshing:
            return
        task = asyncio.create_task(self._background_refresh(name))
        self._refreshing[key] = task
        task.add_done_callback(lambda _: self._refreshing.pop(key, None))

    async def _background_refresh(self, name: str) -> None:
        try:
            await self._resolve_fresh(name, remember_failure=False)
        except ResolutionFailure:
            logger.warning(f"Background refresh found no data for '{name}'; keeping stale record")
        except Exception:
            logger.exception(f"Background refresh failed for '{name}'")

    async def _resolve_fresh(self, name: str, remember_failure: bool = True) -> CompanyRecord:
        record = CompanyRecord.new(name)
        logger.info(f"Resolving '{record.name}'")

        symbol = await self._resolve_symbol(record)
        for tier in self._tiers:
            if not tier.needs_more_data(record):
                logger.info(f"Skipping tier '{tier.name}' for '{record.name}': enough data")
                continue
            await self._run_tier(tier, record, symbol)

        return self._finalize(record, remember_failure)

    async def _resolve_symbol(self, record: CompanyRecord) -> Optional[str]:
        for provider in self._symbol_resolvers:
            symbol = await provider.resolve_symbol(record.name)
            if symbol:
                logger.info(f"{provider.label} resolved '{record.name}' to {symbol}")
                partial = PartialRecord(financials=Financials(stock_symbol=symbol))
                merge_partial(record, partial, provider.source)
                return symbol
        logger.info(f"No ticker symbol found for '{record.name}'")
        return None

    async def _run_tier(self, tier: Tier, record: CompanyRecord, symbol: Optional[str]) -> None:
        results = await asyncio.gather(
            *(p.resolve(record.name, symbol, record.website) for p in tier.providers),
            return_exceptions=True,
        )
        for provider, partial in zip(tier.providers, results):
            if isinstance(partial, BaseException):
                logger.warning(
                    f"{provider.label} raised for '{record.name}' (stage=tier:{tier.name}): {partial}"
                )
                continue
            if partial is None:
                continue
            normalize_units(partial, estimator=provider.is_estimator)
            written = merge_partial(record, partial, provider.source)
            logger.info(
                f"{provider.label} supplied {len(written)} fields for '{record.name}' "
                f"(tier={tier.name})"
            )

    def _finalize(self, record: CompanyRecord, remember_failure: bool) -> CompanyRecord:
        if not record.has_descriptive_data() and not record.has_financial_data():
            logger.warning(f"No descriptive or financial data found for '{record.name}'")
            if remember_failure:
                self._store.put(record.normalized_key, NoDataMarker(record.name, utcnow()))
            record.data_source = DataSource.NO_DATA.value
            raise ResolutionFailure(record.name, placeholder=record)

        backfill_customer_metrics(record)
        record.data_source = primary_source(record)
        record.last_updated = utcnow()
        self._store.put(record.normalized_key, record)
        logger.info(
            f"Resolved '{record.name}' from {record.data_source} "
            f"({len(record.data_source_details)} fields)"
        )
        return record
