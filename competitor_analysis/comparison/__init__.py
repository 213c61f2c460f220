from .charts import build_chart_data, chart_for
from .comparator import compare_metric
from .engine import ComparisonEngine, comparison_id, detail_view, normalize_detail_metric
from .metrics import MetricDefinition, find_metric, get_metric, get_metrics, register_metric
from .verdict import TIE, Verdict, aggregate

__all__ = [
    "ComparisonEngine",
    "MetricDefinition",
    "TIE",
    "Verdict",
    "aggregate",
    "build_chart_data",
    "chart_for",
    "compare_metric",
    "comparison_id",
    "detail_view",
    "find_metric",
    "get_metric",
    "get_metrics",
    "normalize_detail_metric",
    "register_metric",
]
