"""CompaniesMarketCap provider -- scrapes market cap and revenue pages."""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import Financials, PartialRecord

from .base import ProviderBase
from .parsing import clean_text, parse_number

logger = logging.getLogger(__name__)

_COMPANY_LINK = re.compile(r"^/([^/]+)/marketcap/?$")

_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; competitor-analysis/0.1)"}


class CompaniesMarketCapProvider(ProviderBase):
    """Aggregator fallback for market cap and revenue when quote APIs come up empty."""

    source = DataSource.COMPANIES_MARKET_CAP

    @property
    def enabled(self) -> bool:
        return self._settings.marketcap_enabled

    def _url(self, path: str) -> str:
        return f"{self._settings.marketcap_base_url.rstrip('/')}/{path.lstrip('/')}"

    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        query = symbol or company_name
        search_html = await self._get_text(
            self._url("search.do"), params={"query": query}, headers=_HEADERS
        )
        slug = find_company_slug(search_html)
        if slug is None:
            logger.info(f"CompaniesMarketCap has no listing for '{query}'")
            return None

        page = parse_info_boxes(
            await self._get_text(self._url(f"{slug}/marketcap/"), headers=_HEADERS)
        )
        market_cap = parse_number(page.get("marketcap"))

        revenue = None
        try:
            revenue_page = parse_info_boxes(
                await self._get_text(self._url(f"{slug}/revenue/"), headers=_HEADERS)
            )
            revenue = parse_number(revenue_page.get("revenue"))
        except Exception as e:
            logger.warning(f"CompaniesMarketCap revenue page failed for '{company_name}': {e}")

        if market_cap is None and revenue is None:
            return None
        return PartialRecord(
            official_name=page.get("name"),
            financials=Financials(market_cap=market_cap, revenue=revenue),
        )


def find_company_slug(html: str) -> Optional[str]:
    """First company slug linked from a search results page."""
    soup = BeautifulSoup(html, "html.parser")
    for link in soup.find_all("a", href=True):
        match = _COMPANY_LINK.match(link["href"])
        if match:
            return match.group(1)
    return None


def parse_info_boxes(html: str) -> dict[str, str]:
    """Read the headline figures of a company page.

    Each figure is an ``info-box`` with the value in ``.line1`` and its
    label in ``.line2``. Labels are lower-cased with qualifiers such as
    "(TTM)" removed. The company name, when present, is under "name".
    """
    soup = BeautifulSoup(html, "html.parser")
    boxes: dict[str, str] = {}
    for box in soup.select("div.info-box"):
        value = box.select_one(".line1")
        label = box.select_one(".line2")
        if value is None or label is None:
            continue
        key = re.sub(r"\(.*?\)", "", label.get_text()).strip().lower()
        boxes[key] = value.get_text(strip=True)

    name = soup.select_one(".company-name")
    if name is not None:
        text = clean_text(name.get_text())
        if text:
            boxes["name"] = text
    return boxes
