"""Shared test fixtures for the competitor analysis test suite."""

from datetime import datetime, timezone
from typing import Optional

import pytest

from competitor_analysis.config.settings import Settings
from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import (
    CompanyRecord,
    CustomerMetrics,
    Financials,
    PartialRecord,
    Product,
)
from competitor_analysis.providers.base import ProviderBase


class FakeProvider(ProviderBase):
    """Provider returning a canned partial (or raising) without any I/O."""

    def __init__(
        self,
        source: DataSource,
        partial: Optional[PartialRecord] = None,
        error: Optional[Exception] = None,
        enabled: bool = True,
        estimator: bool = False,
        symbol: Optional[str] = None,
        requires_symbol: bool = False,
        settings: Optional[Settings] = None,
    ):
        super().__init__(settings=settings or Settings(provider_timeout_seconds=1.0))
        self.source = source
        self._partial = partial
        self._error = error
        self._enabled = enabled
        self.is_estimator = estimator
        self.requires_symbol = requires_symbol
        self._symbol = symbol
        self.supports_symbol_search = symbol is not None
        self.calls: list[tuple[str, Optional[str], Optional[str]]] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def fetch(self, company_name, symbol, website=None):
        self.calls.append((company_name, symbol, website))
        if self._error is not None:
            raise self._error
        if self._partial is None:
            return None
        return self._partial.model_copy(deep=True)

    async def search_symbol(self, company_name):
        return self._symbol


@pytest.fixture
def fake_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        alpha_vantage_api_key="av-test",
        finnhub_api_key="fh-test",
        mistral_api_key="mi-test",
        gemini_api_key="ge-test",
        provider_timeout_seconds=1.0,
        cache_ttl_minutes=60,
        no_data_ttl_minutes=10,
    )


def _record(name: str, **financials) -> CompanyRecord:
    record = CompanyRecord.new(name)
    record.financials = Financials(**financials)
    record.last_updated = datetime.now(tz=timezone.utc)
    return record


@pytest.fixture
def make_record():
    """Factory: CompanyRecord with the given financial fields set."""
    return _record


@pytest.fixture
def apple() -> CompanyRecord:
    record = _record(
        "Apple",
        market_cap=3_000_000_000_000,
        revenue=383_000_000_000,
        profit_margin=0.25,
        pe_ratio=None,
        eps=6.1,
    )
    record.official_name = "Apple Inc."
    record.customer_metrics = CustomerMetrics(user_count=1_500_000_000, user_growth=0.05, rating=4.6)
    record.products = [
        Product(name="iPhone", category="Phones", rating=4.7),
        Product(name="Mac", category="Computers", rating=4.5),
    ]
    return record


@pytest.fixture
def microsoft() -> CompanyRecord:
    record = _record(
        "Microsoft",
        market_cap=2_000_000_000_000,
        revenue=212_000_000_000,
        profit_margin=0.34,
        pe_ratio=25,
        eps=9.7,
    )
    record.official_name = "Microsoft Corporation"
    record.customer_metrics = CustomerMetrics(user_count=1_400_000_000, user_growth=0.04, rating=4.4)
    record.products = [Product(name="Windows", category="Software", rating=4.1)]
    return record


class CatalogProvider(FakeProvider):
    """FakeProvider answering per company name from a fixed catalog."""

    def __init__(self, source: DataSource, catalog: dict[str, PartialRecord], **kwargs):
        super().__init__(source, **kwargs)
        self._catalog = {k.lower(): v for k, v in catalog.items()}

    async def fetch(self, company_name, symbol, website=None):
        self.calls.append((company_name, symbol, website))
        partial = self._catalog.get(company_name.strip().lower())
        return partial.model_copy(deep=True) if partial is not None else None


CATALOG = {
    "Apple": PartialRecord(
        official_name="Apple Inc.",
        description="Consumer electronics and services.",
        industry="Technology",
        financials=Financials(market_cap=3e12, revenue=3.8e11, profit_margin=0.25, eps=6.1),
        products=[Product(name="iPhone", rating=4.7)],
    ),
    "Microsoft": PartialRecord(
        official_name="Microsoft Corporation",
        description="Software and cloud services.",
        industry="Technology",
        financials=Financials(market_cap=2e12, revenue=2.1e11, profit_margin=0.34, pe_ratio=25.0, eps=9.7),
        products=[Product(name="Windows", rating=4.1)],
    ),
}


@pytest.fixture
def catalog_service(test_settings):
    """CompetitorService over a single in-memory provider that knows Apple and Microsoft."""
    from competitor_analysis.orchestrator.resolver import CompanyResolver
    from competitor_analysis.orchestrator.tiers import Tier
    from competitor_analysis.service import CompetitorService

    provider = CatalogProvider(DataSource.ALPHA_VANTAGE, CATALOG)
    resolver = CompanyResolver(
        tiers=[Tier("authoritative", [provider])],
        symbol_resolvers=[],
        settings=test_settings,
    )
    return CompetitorService(resolver=resolver, settings=test_settings)
