"""Merge provider partials into a CompanyRecord, first writer wins."""

from __future__ import annotations

import logging
import math
from typing import Any, Union

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import (
    DESCRIPTIVE_FIELDS,
    LIST_FIELDS,
    CompanyRecord,
    CustomerMetrics,
    Financials,
    PartialRecord,
    ProvenanceEntry,
)

logger = logging.getLogger(__name__)

# Money fields an estimator may report in billions.
MONEY_FIELDS = (
    "market_cap",
    "revenue",
    "total_revenue",
    "gross_profit",
    "total_cash",
    "enterprise_value",
)

# Below this magnitude an estimator's figure is read as billions (millions for users).
UNIT_THRESHOLD = 10_000
BILLION = 1_000_000_000
MILLION = 1_000_000


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return len(value) == 0
    return False


def _plain(value: Any) -> Any:
    """JSON-ready copy of a value for the provenance log."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def normalize_units(partial: PartialRecord, estimator: bool = False) -> PartialRecord:
    """Bring a partial's numbers to absolute units before it is merged.

    Declared ``scales`` always win. Without a declaration, estimator
    figures below UNIT_THRESHOLD are taken as billions (money) or
    millions (user count). This is a known approximation: a genuinely
    tiny absolute value from an estimator is scaled up as well.
    """
    fin = partial.financials
    metrics = partial.customer_metrics

    for name, scale in partial.scales.items():
        if name in Financials.model_fields:
            group = fin
        elif name in CustomerMetrics.model_fields:
            group = metrics
        else:
            logger.warning(f"Ignoring unit scale for unknown field '{name}'")
            continue
        value = getattr(group, name)
        if isinstance(value, (int, float)):
            setattr(group, name, value * scale)

    if estimator:
        for name in MONEY_FIELDS:
            value = getattr(fin, name)
            if name in partial.scales or value is None:
                continue
            if abs(value) < UNIT_THRESHOLD:
                setattr(fin, name, value * BILLION)
        if "user_count" not in partial.scales and metrics.user_count is not None:
            if abs(metrics.user_count) < UNIT_THRESHOLD:
                metrics.user_count = metrics.user_count * MILLION

    partial.scales = {}
    return partial


def _merge_group(
    target: Any,
    partial: Any,
    names: Any,
    prefix: str,
    source: str,
) -> list[ProvenanceEntry]:
    written: list[ProvenanceEntry] = []
    for fname in names:
        value = getattr(partial, fname)
        if _is_empty(value) or not _is_empty(getattr(target, fname)):
            continue
        if isinstance(value, list):
            value = list(value)
        setattr(target, fname, value)
        written.append(
            ProvenanceEntry(field=prefix + to_camel(fname), source=source, value=_plain(value))
        )
    return written


def merge_partial(
    target: CompanyRecord,
    partial: PartialRecord,
    source: Union[str, DataSource],
) -> list[ProvenanceEntry]:
    """Copy every populated field of ``partial`` into empty fields of ``target``.

    Fields the target already holds are left alone, so the provider merged
    first keeps its value. Returns the provenance entries written; they are
    also appended to ``target.data_source_details``.
    """
    label = source.value if isinstance(source, DataSource) else source

    written = _merge_group(target, partial, DESCRIPTIVE_FIELDS + LIST_FIELDS, "", label)
    written += _merge_group(
        target.financials, partial.financials, Financials.model_fields, "financials.", label
    )
    written += _merge_group(
        target.customer_metrics,
        partial.customer_metrics,
        CustomerMetrics.model_fields,
        "customerMetrics.",
        label,
    )

    target.data_source_details.extend(written)
    return written
