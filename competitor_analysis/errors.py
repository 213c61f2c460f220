"""Error taxonomy for provider, resolution and comparison failures."""

from __future__ import annotations

from typing import Optional

from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import CompanyRecord


class AdapterFailure(Exception):
    """A single provider could not produce data (transport, status, payload, key)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class MalformedPayload(AdapterFailure):
    """AI response could not be parsed as JSON even after repair."""


class ResolutionFailure(Exception):
    """No provider in any tier produced descriptive or financial data."""

    def __init__(self, company_name: str, placeholder: Optional[CompanyRecord] = None):
        super().__init__(f"Company '{company_name}' not found or data fetch failed.")
        self.company_name = company_name
        if placeholder is None:
            placeholder = CompanyRecord.new(company_name)
            placeholder.data_source = DataSource.NO_DATA.value
        self.placeholder = placeholder


class ComparisonFailure(Exception):
    """One side of a comparison could not be resolved."""

    def __init__(self, company_name: str):
        super().__init__(f"Company '{company_name}' not found or data fetch failed.")
        self.company_name = company_name


class UnknownChartType(ValueError):
    def __init__(self, chart_type: str):
        super().__init__(
            f"Invalid chart type '{chart_type}'. Use one of: financial, userMetrics, productRatings."
        )
        self.chart_type = chart_type


class UnknownMetric(ValueError):
    def __init__(self, metric: str):
        super().__init__(
            f"Unknown metric '{metric}'. Use financial, product, customer, overall, "
            f"or a metric name such as marketCap."
        )
        self.metric = metric
