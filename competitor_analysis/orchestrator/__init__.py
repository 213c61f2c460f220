from .company_classifier import classify_sector
from .estimates import backfill_customer_metrics, estimate_customer_metrics
from .merge import merge_partial, normalize_units
from .resolver import CompanyResolver
from .tiers import Tier, default_tiers

__all__ = [
    "CompanyResolver",
    "Tier",
    "backfill_customer_metrics",
    "classify_sector",
    "default_tiers",
    "estimate_customer_metrics",
    "merge_partial",
    "normalize_units",
]
