from .comparison import (
    ChartData,
    ChartDataset,
    ChartSeries,
    ComparisonResult,
    MetricComparison,
    MetricDetail,
    VerdictEntry,
)
from .enums import DataSource, MetricCategory, Sector, TieBreak
from .record import (
    CompanyRecord,
    CustomerMetrics,
    Financials,
    PartialRecord,
    PricePoint,
    Product,
    ProvenanceEntry,
    normalize_key,
)

__all__ = [
    "ChartData",
    "ChartDataset",
    "ChartSeries",
    "ComparisonResult",
    "CompanyRecord",
    "CustomerMetrics",
    "DataSource",
    "Financials",
    "MetricCategory",
    "MetricComparison",
    "MetricDetail",
    "PartialRecord",
    "PricePoint",
    "Product",
    "ProvenanceEntry",
    "Sector",
    "TieBreak",
    "VerdictEntry",
    "normalize_key",
]
