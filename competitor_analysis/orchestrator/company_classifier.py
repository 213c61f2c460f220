"""Classify a company into a broad sector for estimate scaling."""

from __future__ import annotations

from typing import Optional

from competitor_analysis.models.enums import Sector

# Large consumer-facing tech platforms (case-insensitive match).
_TECH_COMPANIES = {
    "google", "alphabet", "microsoft", "apple", "meta", "facebook",
    "amazon", "netflix", "intel", "spotify", "uber", "airbnb",
}

# Mass-market consumer brands.
_CONSUMER_COMPANIES = {
    "coca", "pepsi", "walmart", "target", "mcdonalds", "mcdonald's",
    "nike", "adidas", "toyota", "honda", "starbucks", "costco",
}

# Provider-reported sector names that map to a bucket.
_TECH_SECTORS = ("technology", "communication", "software", "internet", "semiconductor")
_CONSUMER_SECTORS = ("consumer", "retail", "beverage", "food", "apparel", "auto")


def classify_sector(name: str, sector_hint: Optional[str] = None) -> Sector:
    """Classify a company as TECH, CONSUMER, or OTHER.

    Uses a heuristic approach:
    1. Known company names -> their bucket
    2. Provider-reported sector/industry text -> matching bucket
    3. Unknown -> OTHER
    """
    lower = name.lower().strip()

    for known in _TECH_COMPANIES:
        if known in lower:
            return Sector.TECH
    for known in _CONSUMER_COMPANIES:
        if known in lower:
            return Sector.CONSUMER

    if sector_hint:
        hint = sector_hint.lower()
        if any(s in hint for s in _TECH_SECTORS):
            return Sector.TECH
        if any(s in hint for s in _CONSUMER_SECTORS):
            return Sector.CONSUMER

    return Sector.OTHER
