"""Provider tiers, queried in order until the record has enough data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from competitor_analysis.config.settings import Settings
from competitor_analysis.models.record import CompanyRecord
from competitor_analysis.providers import (
    AlphaVantageProvider,
    ClearbitLogoProvider,
    CompaniesMarketCapProvider,
    FinnhubProvider,
    GeminiProvider,
    MistralProvider,
    ProviderBase,
    WikipediaProvider,
    YahooFinanceProvider,
)

REQUIRED_DESCRIPTIVE = ("description", "industry", "website", "logo")
REQUIRED_FINANCIAL = ("market_cap", "revenue", "profit_margin", "pe_ratio", "eps")
ESTIMATE_LISTS = ("strengths", "weaknesses", "competitors")


def missing_descriptive(record: CompanyRecord) -> bool:
    return any(not getattr(record, f) for f in REQUIRED_DESCRIPTIVE)


def missing_financial(record: CompanyRecord) -> bool:
    return any(getattr(record.financials, f) is None for f in REQUIRED_FINANCIAL)


def missing_estimates(record: CompanyRecord) -> bool:
    return any(not getattr(record, f) for f in ESTIMATE_LISTS)


def needs_more_data(record: CompanyRecord) -> bool:
    return missing_descriptive(record) or missing_financial(record) or missing_estimates(record)


@dataclass
class Tier:
    """A priority group of providers queried together.

    ``providers`` order is the merge order within the tier. The tier is
    skipped when ``needs_more_data`` is false for the record so far.
    """

    name: str
    providers: list[ProviderBase]
    needs_more_data: Callable[[CompanyRecord], bool] = needs_more_data


def default_tiers(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> list[Tier]:
    settings = settings or Settings()
    client = client or httpx.AsyncClient(
        timeout=settings.provider_timeout_seconds, follow_redirects=True
    )

    def build(cls: type[ProviderBase]) -> ProviderBase:
        return cls(settings=settings, client=client)

    return [
        Tier(
            "authoritative",
            [build(AlphaVantageProvider), build(YahooFinanceProvider), build(FinnhubProvider)],
        ),
        Tier("aggregators", [build(CompaniesMarketCapProvider)], missing_financial),
        Tier("estimators", [build(MistralProvider), build(GeminiProvider)]),
        Tier(
            "descriptive",
            [build(WikipediaProvider), build(ClearbitLogoProvider)],
            missing_descriptive,
        ),
    ]
