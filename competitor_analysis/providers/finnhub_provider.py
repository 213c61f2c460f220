"""Finnhub provider -- symbol lookup, company profile and basic financials."""

from __future__ import annotations

import logging
from typing import Any, Optional

from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import Financials, PartialRecord

from .base import ProviderBase
from .parsing import clean_text, parse_number

logger = logging.getLogger(__name__)


# Financials attribute -> /stock/metric key
METRIC_FIELDS: dict[str, str] = {
    "pe_ratio": "peTTM",
    "eps": "epsTTM",
    "profit_margin": "netProfitMarginTTM",
    "operating_margin": "operatingMarginTTM",
    "gross_margins": "grossMarginTTM",
    "current_ratio": "currentRatioQuarterly",
    "quick_ratio": "quickRatioQuarterly",
    "debt_to_equity": "totalDebt/totalEquityQuarterly",
    "return_on_assets": "roaTTM",
    "return_on_equity": "roeTTM",
    "revenue_growth": "revenueGrowthTTMYoy",
    "price_to_book": "pbQuarterly",
    "book_value": "bookValuePerShareQuarterly",
    "beta": "beta",
}

# Finnhub reports these as percentages and market cap in millions.
_PERCENT_FIELDS = (
    "profit_margin",
    "operating_margin",
    "gross_margins",
    "return_on_assets",
    "return_on_equity",
    "revenue_growth",
)


class FinnhubProvider(ProviderBase):
    source = DataSource.FINNHUB
    requires_symbol = True
    supports_symbol_search = True

    @property
    def enabled(self) -> bool:
        return bool(self._settings.finnhub_api_key)

    def _url(self, path: str) -> str:
        return f"{self._settings.finnhub_base_url.rstrip('/')}/{path}"

    async def _call(self, path: str, **params: str) -> Any:
        return await self._get_json(
            self._url(path), params={**params, "token": self._settings.finnhub_api_key}
        )

    async def search_symbol(self, company_name: str) -> Optional[str]:
        data = await self._call("search", q=company_name)
        results = (data or {}).get("result") or []
        # Prefer primary US listings (no exchange suffix)
        for item in results:
            symbol = item.get("symbol") or ""
            if item.get("type") == "Common Stock" and "." not in symbol:
                return symbol
        return results[0].get("symbol") if results else None

    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        profile = await self._call("stock/profile2", symbol=symbol)
        if not profile:
            return None
        metrics = (await self._call("stock/metric", symbol=symbol, metric="all")) or {}
        values = metrics.get("metric") or {}

        financials = Financials(
            stock_symbol=profile.get("ticker") or symbol,
            market_cap=parse_number(profile.get("marketCapitalization")),
        )
        for attr, key in METRIC_FIELDS.items():
            setattr(financials, attr, parse_number(values.get(key)))

        scales = {"market_cap": 1_000_000.0}
        scales.update({name: 0.01 for name in _PERCENT_FIELDS})

        return PartialRecord(
            official_name=clean_text(profile.get("name")),
            industry=clean_text(profile.get("finnhubIndustry")),
            website=clean_text(profile.get("weburl")),
            logo=clean_text(profile.get("logo")),
            financials=financials,
            scales=scales,
        )
