"""Tally per-metric wins into an overall verdict."""

from __future__ import annotations

from dataclasses import dataclass, field

from competitor_analysis.models.comparison import ComparisonResult, MetricComparison, VerdictEntry

from .metrics import metric_label

TIE = "Tie"


@dataclass
class Verdict:
    winner: str
    strengths: list[VerdictEntry] = field(default_factory=list)
    weaknesses: list[VerdictEntry] = field(default_factory=list)
    wins: dict[str, int] = field(default_factory=dict)


def _describe(label: str, cmp: MetricComparison, winner_is_first: bool, other: str) -> tuple[str, str]:
    loser_value = cmp.value2 if winner_is_first else cmp.value1
    if loser_value is None:
        return f"{label}: reported where {other} has no data", f"{label}: no data reported"
    pct = f"{cmp.difference_percent:.2f}%"
    return f"{label} leads {other} by {pct}", f"{label} trails by {pct}"


def aggregate(result: ComparisonResult) -> Verdict:
    """Unweighted tally of ``better`` across financial, product and customer metrics.

    The side with strictly more wins is the winner, otherwise "Tie".
    Metrics decided by a non-zero difference add one strength for the
    winner and the mirror weakness for the loser; tie-broken metrics
    count toward the tally only.
    """
    id1, id2 = result.companies
    names = dict(zip(result.companies, result.company_names))
    verdict = Verdict(winner=TIE, wins={id1: 0, id2: 0})

    sections = (
        result.financial_comparison,
        result.product_comparison,
        result.user_metrics_comparison,
    )
    for comparisons in sections:
        for key, cmp in comparisons.items():
            if cmp.better not in verdict.wins:
                continue
            verdict.wins[cmp.better] += 1
            if cmp.difference_percent <= 0:
                continue

            winner = cmp.better
            loser = id2 if winner == id1 else id1
            label = metric_label(key)
            strength, weakness = _describe(label, cmp, winner == id1, names.get(loser, loser))
            verdict.strengths.append(VerdictEntry(company=winner, area=label, description=strength))
            verdict.weaknesses.append(VerdictEntry(company=loser, area=label, description=weakness))

    if verdict.wins[id1] > verdict.wins[id2]:
        verdict.winner = id1
    elif verdict.wins[id2] > verdict.wins[id1]:
        verdict.winner = id2
    return verdict
