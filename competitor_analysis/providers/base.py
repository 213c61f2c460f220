from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Optional

import httpx

from competitor_analysis.config.settings import Settings
from competitor_analysis.errors import AdapterFailure
from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import PartialRecord

logger = logging.getLogger(__name__)


class ProviderBase(ABC):
    """Abstract base for all data providers.

    Subclasses implement ``fetch`` (and optionally ``search_symbol``) and
    may raise freely. Callers go through ``resolve`` / ``resolve_symbol``,
    which bound the call with a timeout and turn every failure into None.
    """

    source: DataSource
    requires_symbol: bool = False
    supports_symbol_search: bool = False
    is_estimator: bool = False

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings or Settings()
        self._client = client or httpx.AsyncClient(
            timeout=self._settings.provider_timeout_seconds,
            follow_redirects=True,
        )

    @property
    def label(self) -> str:
        return self.source.value

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether the adapter is configured (key present or switch on)."""
        ...

    @abstractmethod
    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        """Fetch data and return a partially-populated record, or None."""
        ...

    async def search_symbol(self, company_name: str) -> Optional[str]:
        return None

    async def resolve(
        self,
        company_name: str,
        symbol: Optional[str] = None,
        website: Optional[str] = None,
    ) -> Optional[PartialRecord]:
        if not self.enabled:
            return None
        if self.requires_symbol and not symbol:
            logger.info(f"{self.label} skipped for '{company_name}': no ticker symbol")
            return None
        return await self._guard(company_name, "fetch", self.fetch(company_name, symbol, website))

    async def resolve_symbol(self, company_name: str) -> Optional[str]:
        if not self.enabled or not self.supports_symbol_search:
            return None
        return await self._guard(company_name, "symbol", self.search_symbol(company_name))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _guard(self, company_name: str, stage: str, call: Awaitable[Any]) -> Any:
        try:
            return await asyncio.wait_for(call, timeout=self._settings.provider_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"{self.label} timed out for '{company_name}' (stage={stage})")
        except Exception as e:
            logger.warning(f"{self.label} failed for '{company_name}' (stage={stage}): {e}")
        return None

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        resp = await self._client.get(url, **kwargs)
        if resp.status_code != 200:
            raise AdapterFailure(self.label, f"HTTP {resp.status_code} from {url}")
        try:
            return resp.json()
        except ValueError as e:
            raise AdapterFailure(self.label, f"invalid JSON from {url}") from e

    async def _get_text(self, url: str, **kwargs: Any) -> str:
        resp = await self._client.get(url, **kwargs)
        if resp.status_code != 200:
            raise AdapterFailure(self.label, f"HTTP {resp.status_code} from {url}")
        return resp.text
