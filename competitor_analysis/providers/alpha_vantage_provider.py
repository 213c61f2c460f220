"""Alpha Vantage provider -- ticker search and company overview."""

from __future__ import annotations

import logging
from typing import Any, Optional

from competitor_analysis.errors import AdapterFailure
from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import Financials, PartialRecord

from .base import ProviderBase
from .parsing import clean_text, parse_number

logger = logging.getLogger(__name__)


# Financials attribute -> OVERVIEW key
OVERVIEW_FIELDS: dict[str, str] = {
    "market_cap": "MarketCapitalization",
    "pe_ratio": "PERatio",
    "trailing_pe": "TrailingPE",
    "forward_pe": "ForwardPE",
    "peg_ratio": "PEGRatio",
    "eps": "EPS",
    "profit_margin": "ProfitMargin",
    "operating_margin": "OperatingMarginTTM",
    "return_on_assets": "ReturnOnAssetsTTM",
    "return_on_equity": "ReturnOnEquityTTM",
    "revenue": "RevenueTTM",
    "gross_profit": "GrossProfitTTM",
    "revenue_growth": "QuarterlyRevenueGrowthYOY",
    "earnings_growth": "QuarterlyEarningsGrowthYOY",
    "price_to_book": "PriceToBookRatio",
    "book_value": "BookValue",
    "beta": "Beta",
}


class AlphaVantageProvider(ProviderBase):
    """Authoritative quote fundamentals from Alpha Vantage."""

    source = DataSource.ALPHA_VANTAGE
    requires_symbol = True
    supports_symbol_search = True

    @property
    def enabled(self) -> bool:
        return bool(self._settings.alpha_vantage_api_key)

    async def _query(self, function: str, **params: str) -> dict[str, Any]:
        data = await self._get_json(
            self._settings.alpha_vantage_base_url,
            params={"function": function, "apikey": self._settings.alpha_vantage_api_key, **params},
        )
        if not isinstance(data, dict):
            raise AdapterFailure(self.label, f"unexpected {function} payload")
        if "Note" in data or "Information" in data:
            raise AdapterFailure(self.label, f"rate limited on {function}")
        if "Error Message" in data:
            raise AdapterFailure(self.label, data["Error Message"])
        return data

    async def search_symbol(self, company_name: str) -> Optional[str]:
        data = await self._query("SYMBOL_SEARCH", keywords=company_name)
        matches = data.get("bestMatches") or []
        if not matches:
            logger.info(f"Alpha Vantage found no symbol for '{company_name}'")
            return None
        us_matches = [m for m in matches if m.get("4. region") == "United States"]
        best = (us_matches or matches)[0]
        return best.get("1. symbol")

    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        data = await self._query("OVERVIEW", symbol=symbol)
        if not data.get("Symbol"):
            return None

        financials = Financials(stock_symbol=data["Symbol"])
        for attr, key in OVERVIEW_FIELDS.items():
            setattr(financials, attr, parse_number(data.get(key)))

        industry = clean_text(data.get("Industry"))
        sector = clean_text(data.get("Sector"))
        return PartialRecord(
            official_name=clean_text(data.get("Name")),
            description=clean_text(data.get("Description")),
            industry=industry.title() if industry else None,
            sector=sector.title() if sector else None,
            headquarters=clean_text(data.get("Address")),
            website=clean_text(data.get("OfficialSite")),
            financials=financials,
        )
