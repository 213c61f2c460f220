"""Yahoo Finance provider (via yfinance) -- quote, key statistics, price history."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import yfinance as yf

from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import Financials, PartialRecord, PricePoint

from .base import ProviderBase
from .parsing import clean_text, parse_number

logger = logging.getLogger(__name__)


# Financials attribute -> Ticker.info key
INFO_FIELDS: dict[str, str] = {
    "market_cap": "marketCap",
    "enterprise_value": "enterpriseValue",
    "stock_price": "currentPrice",
    "previous_close": "previousClose",
    "day_low": "dayLow",
    "day_high": "dayHigh",
    "volume": "volume",
    "average_volume": "averageVolume",
    "beta": "beta",
    "pe_ratio": "trailingPE",
    "trailing_pe": "trailingPE",
    "forward_pe": "forwardPE",
    "peg_ratio": "trailingPegRatio",
    "price_to_book": "priceToBook",
    "book_value": "bookValue",
    "eps": "trailingEps",
    "trailing_eps": "trailingEps",
    "revenue": "totalRevenue",
    "total_revenue": "totalRevenue",
    "revenue_growth": "revenueGrowth",
    "gross_profit": "grossProfits",
    "gross_margins": "grossMargins",
    "profit_margin": "profitMargins",
    "operating_margin": "operatingMargins",
    "earnings_growth": "earningsGrowth",
    "total_cash": "totalCash",
    "debt_to_equity": "debtToEquity",
    "current_ratio": "currentRatio",
    "quick_ratio": "quickRatio",
    "short_ratio": "shortRatio",
    "return_on_assets": "returnOnAssets",
    "return_on_equity": "returnOnEquity",
}


class YahooFinanceProvider(ProviderBase):
    """Quote data from Yahoo Finance. yfinance is synchronous, so it runs in a thread."""

    source = DataSource.YAHOO_FINANCE
    requires_symbol = True

    history_period = "1mo"

    @property
    def enabled(self) -> bool:
        return self._settings.yahoo_enabled

    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        info, history = await asyncio.to_thread(self._load, symbol)
        if not info or (info.get("marketCap") is None and info.get("regularMarketPrice") is None):
            logger.info(f"Yahoo Finance has no quote for {symbol}")
            return None

        financials = Financials(stock_symbol=info.get("symbol") or symbol)
        for attr, key in INFO_FIELDS.items():
            setattr(financials, attr, parse_number(info.get(key)))
        if financials.stock_price is None:
            financials.stock_price = parse_number(info.get("regularMarketPrice"))
        financials.price_history = _price_history(history)

        return PartialRecord(
            official_name=clean_text(info.get("longName") or info.get("shortName")),
            description=clean_text(info.get("longBusinessSummary")),
            industry=clean_text(info.get("industry")),
            sector=clean_text(info.get("sector")),
            headquarters=_headquarters(info),
            website=clean_text(info.get("website")),
            financials=financials,
        )

    def _load(self, symbol: str) -> tuple[dict[str, Any], Any]:
        ticker = yf.Ticker(symbol)
        info = ticker.info or {}
        history = ticker.history(period=self.history_period)
        return info, history


def _headquarters(info: dict[str, Any]) -> Optional[str]:
    parts = [info.get(k) for k in ("city", "state", "country")]
    joined = ", ".join(p for p in parts if isinstance(p, str) and p.strip())
    return joined or None


def _price_history(history: Any) -> list[PricePoint]:
    """Daily closes, newest first."""
    if history is None or getattr(history, "empty", True) or "Close" not in history:
        return []
    points = [
        PricePoint(date=stamp.strftime("%Y-%m-%d"), price=round(float(close), 2))
        for stamp, close in history["Close"].items()
        if close == close  # drops NaN
    ]
    points.reverse()
    return points
