"""Company record models -- the fused entity, its partials and provenance."""

from __future__ import annotations

import math
import re
import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_NAMESPACE = uuid.UUID("6f1f8a52-3c1e-4b7d-9a0e-2f5c7d9e4b11")
_WHITESPACE = re.compile(r"\s+")


def normalize_key(name: str) -> str:
    """Case-insensitive cache key for a company name."""
    return _WHITESPACE.sub(" ", name.strip()).casefold()


class WireModel(BaseModel):
    """Base for every model that crosses the HTTP boundary (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_wire_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class PricePoint(WireModel):
    date: str
    price: float


class Financials(WireModel):
    stock_symbol: Optional[str] = None

    # Valuation & quote
    market_cap: Optional[float] = None
    enterprise_value: Optional[float] = None
    stock_price: Optional[float] = None
    previous_close: Optional[float] = None
    day_low: Optional[float] = None
    day_high: Optional[float] = None
    volume: Optional[float] = None
    average_volume: Optional[float] = None
    beta: Optional[float] = None

    # Multiples
    pe_ratio: Optional[float] = None
    trailing_pe: Optional[float] = None
    forward_pe: Optional[float] = None
    peg_ratio: Optional[float] = None
    price_to_book: Optional[float] = None
    book_value: Optional[float] = None
    eps: Optional[float] = None
    trailing_eps: Optional[float] = None

    # Income statement
    revenue: Optional[float] = None
    total_revenue: Optional[float] = None
    revenue_growth: Optional[float] = None
    gross_profit: Optional[float] = None
    gross_margins: Optional[float] = None
    profit_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    earnings_growth: Optional[float] = None

    # Balance sheet & returns
    total_cash: Optional[float] = None
    debt_to_equity: Optional[float] = None
    current_ratio: Optional[float] = None
    quick_ratio: Optional[float] = None
    short_ratio: Optional[float] = None
    return_on_assets: Optional[float] = None
    return_on_equity: Optional[float] = None

    # Newest first
    price_history: list[PricePoint] = Field(default_factory=list)


class CustomerMetrics(WireModel):
    user_count: Optional[float] = None
    user_growth: Optional[float] = None
    rating: Optional[float] = None
    churn_rate: Optional[float] = None
    nps: Optional[float] = None


class Product(WireModel):
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    rating: Optional[float] = None


class ProvenanceEntry(WireModel):
    """Which provider supplied a field, and what it supplied."""

    field: str
    source: str
    value: Any = None


# Top-level fields merged first-writer-wins.
DESCRIPTIVE_FIELDS = (
    "official_name",
    "description",
    "industry",
    "sector",
    "founded",
    "headquarters",
    "website",
    "logo",
)
LIST_FIELDS = ("strengths", "weaknesses", "competitors", "products")


class PartialRecord(WireModel):
    """What a single provider returns; any subset may be present.

    ``scales`` lets a provider declare the unit of a numeric field
    (attribute name -> multiplier), e.g. ``{"market_cap": 1e6}`` for a
    value reported in millions.
    """

    official_name: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    sector: Optional[str] = None
    founded: Optional[str] = None
    headquarters: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None

    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    competitors: list[str] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)

    financials: Financials = Field(default_factory=Financials)
    customer_metrics: CustomerMetrics = Field(default_factory=CustomerMetrics)

    scales: dict[str, float] = Field(default_factory=dict)


class CompanyRecord(WireModel):
    """Canonical fused company entity."""

    id: str
    name: str
    normalized_key: str

    official_name: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    sector: Optional[str] = None
    founded: Optional[str] = None
    headquarters: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None

    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    competitors: list[str] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)

    financials: Financials = Field(default_factory=Financials)
    customer_metrics: CustomerMetrics = Field(default_factory=CustomerMetrics)

    data_source: Optional[str] = None
    data_source_details: list[ProvenanceEntry] = Field(default_factory=list)
    last_updated: Optional[datetime] = None

    @classmethod
    def new(cls, name: str) -> CompanyRecord:
        key = normalize_key(name)
        return cls(
            id=str(uuid.uuid5(_NAMESPACE, key)),
            name=name.strip(),
            normalized_key=key,
        )

    @property
    def display_name(self) -> str:
        return self.official_name or self.name

    def has_descriptive_data(self) -> bool:
        return any(getattr(self, f) for f in DESCRIPTIVE_FIELDS if f not in ("logo", "sector"))

    def has_financial_data(self) -> bool:
        values = (
            getattr(self.financials, f)
            for f in Financials.model_fields
            if f not in ("stock_symbol", "price_history")
        )
        return any(v is not None and math.isfinite(v) for v in values)
