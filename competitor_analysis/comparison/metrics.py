from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from pydantic.alias_generators import to_camel

from competitor_analysis.models.enums import MetricCategory
from competitor_analysis.models.record import CompanyRecord

# Global registry -- maps metric key -> MetricDefinition, in registration order
_REGISTRY: dict[str, MetricDefinition] = {}

# Lookup names for callers that pass a bare key not in the registry.
_LOWER_IS_BETTER_NAMES = {"peratio", "pe", "p/e", "price-to-earnings"}


@dataclass(frozen=True)
class MetricDefinition:
    """A comparable metric and how to read it off a CompanyRecord."""

    key: str  # wire name, e.g. "marketCap"
    label: str
    category: MetricCategory
    extract: Callable[[CompanyRecord], Optional[float]]
    lower_is_better: bool = False
    # Opposite signs decide the metric outright (profit vs loss)
    signed: bool = False


def register_metric(
    key: str,
    label: str,
    category: MetricCategory = MetricCategory.FINANCIAL,
    lower_is_better: bool = False,
    signed: bool = False,
) -> Callable:
    """Decorator to register an extractor function as a comparable metric."""

    def decorator(fn: Callable[[CompanyRecord], Optional[float]]) -> Callable:
        _REGISTRY[key] = MetricDefinition(
            key=key,
            label=label,
            category=category,
            extract=fn,
            lower_is_better=lower_is_better,
            signed=signed,
        )
        return fn

    return decorator


def _financial_field(attr: str, label: str, lower_is_better: bool = False, signed: bool = False) -> None:
    register_metric(to_camel(attr), label, MetricCategory.FINANCIAL, lower_is_better, signed)(
        lambda record: getattr(record.financials, attr)
    )


def _customer_field(key: str, attr: str, label: str, lower_is_better: bool = False, signed: bool = False) -> None:
    register_metric(key, label, MetricCategory.CUSTOMER, lower_is_better, signed)(
        lambda record: getattr(record.customer_metrics, attr)
    )


def get_metric(key: str) -> Optional[MetricDefinition]:
    """Look up a metric definition by key."""
    return _REGISTRY.get(key)


def find_metric(name: str) -> Optional[MetricDefinition]:
    """Case-insensitive lookup, e.g. "marketcap" -> marketCap."""
    definition = _REGISTRY.get(name)
    if definition is not None:
        return definition
    folded = name.casefold()
    for key, candidate in _REGISTRY.items():
        if key.casefold() == folded:
            return candidate
    return None


def get_metrics(category: Optional[MetricCategory] = None) -> list[MetricDefinition]:
    """Registered metrics in registration order, optionally for one category."""
    return [m for m in _REGISTRY.values() if category is None or m.category == category]


def metric_label(key: str) -> str:
    definition = _REGISTRY.get(key)
    return definition.label if definition is not None else key


def is_lower_better(metric: str) -> bool:
    definition = _REGISTRY.get(metric)
    if definition is not None:
        return definition.lower_is_better
    return metric.lower() in _LOWER_IS_BETTER_NAMES


# ---------------------------------------------------------------------------
# Financial metrics
# ---------------------------------------------------------------------------

_financial_field("market_cap", "Market Cap")
_financial_field("revenue", "Revenue")
_financial_field("total_revenue", "Total Revenue")
_financial_field("profit_margin", "Profit Margin", signed=True)
_financial_field("pe_ratio", "P/E Ratio", lower_is_better=True, signed=True)
_financial_field("eps", "EPS", signed=True)
_financial_field("stock_price", "Stock Price")
_financial_field("previous_close", "Previous Close")
_financial_field("day_low", "Day Low")
_financial_field("day_high", "Day High")
_financial_field("volume", "Volume")
_financial_field("average_volume", "Average Volume")
_financial_field("enterprise_value", "Enterprise Value")
_financial_field("trailing_pe", "Trailing P/E", lower_is_better=True, signed=True)
_financial_field("forward_pe", "Forward P/E", lower_is_better=True, signed=True)
_financial_field("peg_ratio", "PEG Ratio", lower_is_better=True, signed=True)
_financial_field("trailing_eps", "Trailing EPS", signed=True)
_financial_field("price_to_book", "Price to Book")
_financial_field("book_value", "Book Value")
_financial_field("beta", "Beta")
_financial_field("revenue_growth", "Revenue Growth", signed=True)
_financial_field("earnings_growth", "Earnings Growth", signed=True)
_financial_field("gross_profit", "Gross Profit", signed=True)
_financial_field("gross_margins", "Gross Margin", signed=True)
_financial_field("operating_margin", "Operating Margin", signed=True)
_financial_field("total_cash", "Total Cash")
_financial_field("debt_to_equity", "Debt to Equity", lower_is_better=True)
_financial_field("current_ratio", "Current Ratio")
_financial_field("quick_ratio", "Quick Ratio")
_financial_field("short_ratio", "Short Ratio", lower_is_better=True)
_financial_field("return_on_assets", "Return on Assets", signed=True)
_financial_field("return_on_equity", "Return on Equity", signed=True)


@register_metric("stockPerformance", "Stock Performance", signed=True)
def stock_performance(record: CompanyRecord) -> Optional[float]:
    """Fractional price change across the price history (oldest to newest)."""
    history = record.financials.price_history
    if len(history) < 2:
        return None
    newest, oldest = history[0].price, history[-1].price
    if not oldest:
        return None
    return (newest - oldest) / oldest


# ---------------------------------------------------------------------------
# Customer metrics
# ---------------------------------------------------------------------------

_customer_field("userBase", "user_count", "User Base")
_customer_field("userGrowth", "user_growth", "User Growth", signed=True)
_customer_field("rating", "rating", "Customer Rating")
_customer_field("churnRate", "churn_rate", "Churn Rate", lower_is_better=True)
_customer_field("nps", "nps", "Net Promoter Score", signed=True)


# ---------------------------------------------------------------------------
# Product metrics
# ---------------------------------------------------------------------------

@register_metric("quality", "Product Quality", MetricCategory.PRODUCT)
def product_quality(record: CompanyRecord) -> Optional[float]:
    """Average rating of the rated products."""
    ratings = [p.rating for p in record.products if p.rating is not None]
    if not ratings:
        return None
    return sum(ratings) / len(ratings)


@register_metric("variety", "Product Variety", MetricCategory.PRODUCT)
def product_variety(record: CompanyRecord) -> Optional[float]:
    """Number of products; None when none are known."""
    return float(len(record.products)) if record.products else None
