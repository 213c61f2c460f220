"""Head-to-head comparison of two company records."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from competitor_analysis.errors import UnknownMetric
from competitor_analysis.models.comparison import ComparisonResult, MetricComparison, MetricDetail
from competitor_analysis.models.enums import MetricCategory
from competitor_analysis.models.record import CompanyRecord
from competitor_analysis.store.cache import utcnow

from .charts import build_chart_data
from .comparator import as_number, compare_metric
from .metrics import MetricDefinition, find_metric, get_metrics
from .verdict import aggregate

logger = logging.getLogger(__name__)

OVERALL = "overall"

# Detail section aliases -> canonical section
_SECTIONS: dict[str, str] = {OVERALL: OVERALL}
for _alias in ("financial", "financials", "finance", "finances"):
    _SECTIONS[_alias] = MetricCategory.FINANCIAL.value
for _alias in ("product", "products"):
    _SECTIONS[_alias] = MetricCategory.PRODUCT.value
for _alias in ("customer", "customers", "user", "users", "usermetrics"):
    _SECTIONS[_alias] = MetricCategory.CUSTOMER.value


def comparison_id(a: CompanyRecord, b: CompanyRecord) -> str:
    """"apple+microsoft"; keys are percent-encoded so distinct pairs never collide."""
    return "+".join(quote(r.normalized_key, safe="") for r in (a, b))


def normalize_detail_metric(metric: str) -> str:
    """Canonical section name or metric key; raises UnknownMetric."""
    section = _SECTIONS.get(metric.replace("-", "").replace("_", "").lower())
    if section is not None:
        return section
    definition = find_metric(metric)
    if definition is None:
        raise UnknownMetric(metric)
    return definition.key


def detail_view(result: ComparisonResult, metric: str) -> MetricDetail:
    """Slice of a comparison: one section, one metric, or the overall verdict."""
    name = normalize_detail_metric(metric)
    detail = MetricDetail(
        metric=name,
        companies=list(result.companies),
        company_names=list(result.company_names),
    )
    sections = {
        MetricCategory.FINANCIAL.value: result.financial_comparison,
        MetricCategory.CUSTOMER.value: result.user_metrics_comparison,
        MetricCategory.PRODUCT.value: result.product_comparison,
    }

    if name == OVERALL:
        detail.overall_winner = result.overall_winner
        detail.strengths = list(result.strengths)
        detail.weaknesses = list(result.weaknesses)
    elif name in sections:
        detail.comparisons = dict(sections[name])
    else:
        for comparisons in sections.values():
            if name in comparisons:
                detail.comparisons = {name: comparisons[name]}
    return detail


class ComparisonEngine:
    """Runs every registered metric through the comparator and builds charts."""

    def __init__(
        self,
        financial_metrics: Optional[list[MetricDefinition]] = None,
        customer_metrics: Optional[list[MetricDefinition]] = None,
        product_metrics: Optional[list[MetricDefinition]] = None,
    ):
        self._financial = financial_metrics or get_metrics(MetricCategory.FINANCIAL)
        self._customer = customer_metrics or get_metrics(MetricCategory.CUSTOMER)
        self._product = product_metrics or get_metrics(MetricCategory.PRODUCT)

    def _compare_all(
        self,
        metrics: list[MetricDefinition],
        a: CompanyRecord,
        b: CompanyRecord,
    ) -> dict[str, MetricComparison]:
        names = (a.display_name, b.display_name)
        caps = (a.financials.market_cap, b.financials.market_cap)
        out: dict[str, MetricComparison] = {}
        for metric in metrics:
            v1, v2 = as_number(metric.extract(a)), as_number(metric.extract(b))
            # Neither side has data: omitted, not a tie
            if v1 is None and v2 is None:
                continue
            out[metric.key] = compare_metric(
                v1, v2, a.id, b.id, metric, names=names, market_caps=caps
            )
        return out

    def compare(self, a: CompanyRecord, b: CompanyRecord) -> ComparisonResult:
        result = ComparisonResult(
            id=comparison_id(a, b),
            companies=[a.id, b.id],
            company_names=[a.display_name, b.display_name],
            financial_comparison=self._compare_all(self._financial, a, b),
            product_comparison=self._compare_all(self._product, a, b),
            user_metrics_comparison=self._compare_all(self._customer, a, b),
            chart_data=build_chart_data(a, b),
            last_updated=utcnow(),
        )

        verdict = aggregate(result)
        result.overall_winner = verdict.winner
        result.strengths = verdict.strengths
        result.weaknesses = verdict.weaknesses
        logger.info(
            f"Compared '{a.display_name}' vs '{b.display_name}': "
            f"{len(result.financial_comparison)} financial, "
            f"{len(result.product_comparison)} product, "
            f"{len(result.user_metrics_comparison)} customer metrics, winner={verdict.winner}"
        )
        return result
