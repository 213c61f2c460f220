"""Chart-ready projections of two company records."""

from __future__ import annotations

from typing import Callable, Optional

from competitor_analysis.errors import UnknownChartType
from competitor_analysis.models.comparison import ChartData, ChartDataset, ChartSeries
from competitor_analysis.models.record import CompanyRecord

FINANCE_LABELS = ["Market Cap (B)", "Revenue (B)", "Profit Margin (%)", "P/E Ratio", "EPS"]
USER_METRIC_LABELS = ["User Count (M)", "User Growth (%)", "Rating"]
MAX_PRODUCTS = 5

BILLION = 1_000_000_000
MILLION = 1_000_000


def _scaled(value: Optional[float], divisor: float = 1.0, factor: float = 1.0) -> float:
    """Human-scale chart number; missing values become 0."""
    if value is None:
        return 0
    return round(value / divisor * factor, 2)


def finance_values(record: CompanyRecord) -> list[float]:
    fin = record.financials
    revenue = fin.revenue if fin.revenue is not None else fin.total_revenue
    return [
        _scaled(fin.market_cap, BILLION),
        _scaled(revenue, BILLION),
        _scaled(fin.profit_margin, factor=100),
        _scaled(fin.pe_ratio),
        _scaled(fin.eps),
    ]


def user_metric_values(record: CompanyRecord) -> list[float]:
    metrics = record.customer_metrics
    return [
        _scaled(metrics.user_count, MILLION),
        _scaled(metrics.user_growth, factor=100),
        _scaled(metrics.rating),
    ]


def finance_chart(a: CompanyRecord, b: CompanyRecord) -> ChartSeries:
    return ChartSeries(
        labels=list(FINANCE_LABELS),
        datasets=[
            ChartDataset(company=a.display_name, data=finance_values(a)),
            ChartDataset(company=b.display_name, data=finance_values(b)),
        ],
    )


def user_metrics_chart(a: CompanyRecord, b: CompanyRecord) -> ChartSeries:
    return ChartSeries(
        labels=list(USER_METRIC_LABELS),
        datasets=[
            ChartDataset(company=a.display_name, data=user_metric_values(a)),
            ChartDataset(company=b.display_name, data=user_metric_values(b)),
        ],
    )


def _rated_products(record: CompanyRecord) -> list[tuple[str, float]]:
    rated = [p for p in record.products if p.rating is not None]
    return [(f"{record.display_name}: {p.name}", p.rating) for p in rated[:MAX_PRODUCTS]]


def product_ratings_chart(a: CompanyRecord, b: CompanyRecord) -> ChartSeries:
    """Up to five rated products per company; each side is 0 on the other's labels."""
    products_a, products_b = _rated_products(a), _rated_products(b)
    ratings_a = [rating for _, rating in products_a]
    ratings_b = [rating for _, rating in products_b]
    return ChartSeries(
        labels=[label for label, _ in products_a + products_b],
        datasets=[
            ChartDataset(company=a.display_name, data=ratings_a + [0] * len(ratings_b)),
            ChartDataset(company=b.display_name, data=[0] * len(ratings_a) + ratings_b),
        ],
    )


def build_chart_data(a: CompanyRecord, b: CompanyRecord) -> ChartData:
    return ChartData(
        finances=finance_chart(a, b),
        user_metrics=user_metrics_chart(a, b),
        products=product_ratings_chart(a, b),
    )


_CHARTS: dict[str, Callable[[CompanyRecord, CompanyRecord], ChartSeries]] = {}
for _alias in ("financial", "financials", "finance", "finances"):
    _CHARTS[_alias] = finance_chart
for _alias in ("user", "users", "usermetrics", "customer", "customers", "customermetrics"):
    _CHARTS[_alias] = user_metrics_chart
for _alias in ("product", "products", "productratings"):
    _CHARTS[_alias] = product_ratings_chart


def normalize_chart_type(chart_type: str) -> str:
    """Canonical alias for a chart type name; raises UnknownChartType."""
    alias = chart_type.replace("-", "").replace("_", "").lower()
    if alias not in _CHARTS:
        raise UnknownChartType(chart_type)
    return alias


def chart_for(a: CompanyRecord, b: CompanyRecord, chart_type: str) -> ChartSeries:
    """Single chart by type name (case-insensitive, common aliases accepted)."""
    return _CHARTS[normalize_chart_type(chart_type)](a, b)
