from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .record import WireModel


class MetricComparison(WireModel):
    better: Optional[str] = None
    difference_percent: float = 0.0
    value1: Optional[float] = None
    value2: Optional[float] = None
    # Set only when a near-tie or null-null was broken by rule
    tie_break: Optional[str] = None


class ChartDataset(WireModel):
    company: str
    data: list[float]


class ChartSeries(WireModel):
    labels: list[str]
    datasets: list[ChartDataset]


class ChartData(WireModel):
    finances: ChartSeries
    user_metrics: ChartSeries
    products: ChartSeries


class VerdictEntry(WireModel):
    company: str
    area: str
    description: str


class ComparisonResult(WireModel):
    id: str
    companies: list[str]
    company_names: list[str]
    financial_comparison: dict[str, MetricComparison] = Field(default_factory=dict)
    product_comparison: dict[str, MetricComparison] = Field(default_factory=dict)
    user_metrics_comparison: dict[str, MetricComparison] = Field(default_factory=dict)
    chart_data: Optional[ChartData] = None
    overall_winner: Optional[str] = None
    strengths: list[VerdictEntry] = Field(default_factory=list)
    weaknesses: list[VerdictEntry] = Field(default_factory=list)
    last_updated: Optional[datetime] = None


class MetricDetail(WireModel):
    """One section or metric of a comparison, or its overall verdict."""

    metric: str
    companies: list[str]
    company_names: list[str]
    comparisons: dict[str, MetricComparison] = Field(default_factory=dict)
    overall_winner: Optional[str] = None
    strengths: list[VerdictEntry] = Field(default_factory=list)
    weaknesses: list[VerdictEntry] = Field(default_factory=list)
