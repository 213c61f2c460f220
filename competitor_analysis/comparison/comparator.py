"""Per-metric comparison with deterministic tie-breaking."""

from __future__ import annotations

import math
from typing import Any, Optional, Union

from competitor_analysis.models.comparison import MetricComparison
from competitor_analysis.models.enums import TieBreak

from .metrics import MetricDefinition, get_metric, is_lower_better

# Relative gap below which two values are a near-tie (0.1%).
NEAR_TIE = 0.001
_EPSILON = 1e-12

MARKET_CAP_KEY = "marketCap"


def as_number(value: Any) -> Optional[float]:
    """Float value of a metric, or None when missing or not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def relative_gap(a: float, b: float) -> float:
    return abs(a - b) / max(abs(a), abs(b), _EPSILON)


def _alphabetical(id1: str, id2: str, names: tuple[str, str]) -> str:
    first = min((names[0].casefold(), id1), (names[1].casefold(), id2))
    return first[1]


def break_tie(
    id1: str,
    id2: str,
    metric_key: str,
    names: tuple[str, str],
    market_caps: tuple[Optional[float], Optional[float]],
) -> tuple[str, TieBreak]:
    """Pick a side for a tie: larger market cap, else alphabetical by name."""
    cap1, cap2 = (as_number(c) for c in market_caps)
    if (
        metric_key != MARKET_CAP_KEY
        and cap1 is not None
        and cap2 is not None
        and relative_gap(cap1, cap2) >= NEAR_TIE
    ):
        return (id1 if cap1 > cap2 else id2), TieBreak.MARKET_CAP
    return _alphabetical(id1, id2, names), TieBreak.ALPHABETICAL


def compare_metric(
    value1: Any,
    value2: Any,
    id1: str,
    id2: str,
    metric: Union[str, MetricDefinition],
    *,
    names: Optional[tuple[str, str]] = None,
    market_caps: Optional[tuple[Optional[float], Optional[float]]] = None,
) -> MetricComparison:
    """Decide which side is better on one metric.

    Rules, in order:
    1. Both null -> alphabetical winner, difference 0.
    2. One null -> the other side wins, difference 100.
    3. Opposite signs on a signed metric -> positive side wins, difference 100.
    4. Near-tie (<0.1% relative gap) -> market cap, then alphabetical; difference 0.
    5. Otherwise higher (or lower, for P/E-style metrics) wins;
       difference = |v1 - v2| / max(|v1|, |v2|) * 100, rounded to 2 places.

    Swapping the sides swaps nothing but the order: the winner and the
    difference are the same.
    """
    if isinstance(metric, MetricDefinition):
        definition: Optional[MetricDefinition] = metric
        key = metric.key
    else:
        definition = get_metric(metric)
        key = metric
    lower_is_better = definition.lower_is_better if definition else is_lower_better(key)
    signed = definition.signed if definition else False

    names = names or (id1, id2)
    market_caps = market_caps or (None, None)

    v1, v2 = as_number(value1), as_number(value2)
    result = MetricComparison(value1=v1, value2=v2)

    if v1 is None and v2 is None:
        result.better = _alphabetical(id1, id2, names)
        result.tie_break = TieBreak.ALPHABETICAL.value
        return result

    if v1 is None or v2 is None:
        result.better = id2 if v1 is None else id1
        result.difference_percent = 100.0
        return result

    if signed and ((v1 < 0 < v2) or (v2 < 0 < v1)):
        result.better = id1 if v1 > 0 else id2
        result.difference_percent = 100.0
        return result

    if relative_gap(v1, v2) < NEAR_TIE:
        better, rule = break_tie(id1, id2, key, names, market_caps)
        result.better = better
        result.tie_break = rule.value
        return result

    first_wins = v1 < v2 if lower_is_better else v1 > v2
    result.better = id1 if first_wins else id2
    diff = abs(v1 - v2) / max(abs(v1), abs(v2)) * 100
    result.difference_percent = min(100.0, round(diff, 2))
    return result
