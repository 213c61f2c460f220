"""Clearbit logo provider."""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import PartialRecord

from .base import ProviderBase
from .parsing import strip_corporate_suffix

logger = logging.getLogger(__name__)


def domain_from_url(url: str) -> Optional[str]:
    """"https://www.apple.com/about" -> "apple.com"."""
    if "://" not in url:
        url = f"https://{url}"
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host or None


def candidate_domains(company_name: str, website: Optional[str] = None) -> list[str]:
    """Domains to try, most likely first: the known website, then name guesses."""
    domains: list[str] = []
    if website:
        domain = domain_from_url(website)
        if domain:
            domains.append(domain)

    base = strip_corporate_suffix(company_name).lower()
    compact = re.sub(r"[^a-z0-9]", "", base)
    if compact:
        for tld in ("com", "net", "org"):
            guess = f"{compact}.{tld}"
            if guess not in domains:
                domains.append(guess)
    return domains


class ClearbitLogoProvider(ProviderBase):
    source = DataSource.CLEARBIT

    @property
    def enabled(self) -> bool:
        return self._settings.clearbit_enabled

    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        for domain in candidate_domains(company_name, website):
            url = f"{self._settings.clearbit_base_url.rstrip('/')}/{domain}"
            if await self._is_image(url):
                return PartialRecord(logo=url)
        logger.info(f"Clearbit has no logo for '{company_name}'")
        return None

    async def _is_image(self, url: str) -> bool:
        resp = await self._client.head(url)
        content_type = resp.headers.get("content-type", "")
        return resp.status_code == 200 and content_type.startswith("image/")
