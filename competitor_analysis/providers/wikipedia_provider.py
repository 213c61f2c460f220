"""Wikipedia provider -- page summary plus company infobox."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import Financials, PartialRecord

from .base import ProviderBase
from .parsing import clean_text, parse_number, strip_corporate_suffix

logger = logging.getLogger(__name__)

_YEAR = re.compile(r"\b(1[6-9]\d{2}|20\d{2})\b")
_FOOTNOTE = re.compile(r"\[\d+\]")


class WikipediaProvider(ProviderBase):
    """Descriptive fallback: summary text, founding year, headquarters, industry."""

    source = DataSource.WIKIPEDIA

    @property
    def enabled(self) -> bool:
        return self._settings.wikipedia_enabled

    def _url(self, path: str) -> str:
        return f"{self._settings.wikipedia_base_url.rstrip('/')}/{path}"

    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        base_title = strip_corporate_suffix(company_name)
        summary = await self._summary(base_title)
        if summary is not None and summary.get("type") == "disambiguation":
            summary = await self._summary(f"{base_title} (company)")
        if not summary or summary.get("type") == "disambiguation" or not summary.get("extract"):
            logger.info(f"Wikipedia has no article for '{company_name}'")
            return None

        title = summary.get("title") or base_title
        partial = PartialRecord(
            official_name=clean_text(title),
            description=clean_text(summary["extract"]),
        )

        try:
            infobox = parse_infobox(await self._article_html(title))
        except Exception as e:
            logger.warning(f"Wikipedia infobox failed for '{company_name}': {e}")
            infobox = {}

        partial.founded = infobox.get("founded")
        partial.industry = infobox.get("industry")
        partial.headquarters = infobox.get("headquarters")
        partial.website = infobox.get("website")
        thumbnail = summary.get("thumbnail") or {}
        partial.logo = infobox.get("logo") or clean_text(thumbnail.get("source"))
        if "revenue" in infobox:
            partial.financials = Financials(revenue=parse_number(infobox["revenue"]))
        return partial

    async def _summary(self, title: str) -> Optional[dict[str, Any]]:
        path = "api/rest_v1/page/summary/" + quote(title.replace(" ", "_"), safe="")
        resp = await self._client.get(self._url(path))
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            logger.warning(f"Wikipedia summary for '{title}' returned HTTP {resp.status_code}")
            return None
        return resp.json()

    async def _article_html(self, title: str) -> str:
        data = await self._get_json(
            self._url("w/api.php"),
            params={
                "action": "parse",
                "page": title,
                "prop": "text",
                "format": "json",
                "formatversion": "2",
                "redirects": "1",
            },
        )
        return (data.get("parse") or {}).get("text") or ""


def parse_infobox(html: str) -> dict[str, str]:
    """Pull company facts from an article's infobox.

    Returns any of: founded (year), industry, headquarters, website,
    revenue (raw text) and logo (absolute image URL).
    """
    soup = BeautifulSoup(html, "html.parser")
    infobox = soup.select_one("table.infobox")
    if infobox is None:
        return {}

    facts: dict[str, str] = {}
    for row in infobox.find_all("tr"):
        header = row.find("th")
        cell = row.find("td")
        if header is None or cell is None:
            continue
        label = header.get_text(" ", strip=True).lower()
        value = clean_text(_FOOTNOTE.sub("", cell.get_text(" ", strip=True)))
        if not value:
            continue

        if "founded" in label and "founded" not in facts:
            year = _YEAR.search(value)
            if year:
                facts["founded"] = year.group(1)
        elif label.startswith("industry") and "industry" not in facts:
            facts["industry"] = value
        elif "headquarters" in label and "headquarters" not in facts:
            facts["headquarters"] = value
        elif label.startswith("website") and "website" not in facts:
            link = cell.find("a", href=True)
            facts["website"] = link["href"] if link is not None else value
        elif label.startswith("revenue") and "revenue" not in facts:
            facts["revenue"] = value

    image = infobox.find("img", src=True)
    if image is not None:
        src = image["src"]
        facts["logo"] = f"https:{src}" if src.startswith("//") else src
    return facts
