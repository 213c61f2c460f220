"""Helpers for turning provider strings into numbers and text."""

from __future__ import annotations

import math
import re
from typing import Any, Optional

_MISSING = ("n/a", "na", "not available", "none", "null", "-", "--", "")

_MULTIPLIERS = {
    "trillion": 1_000_000_000_000,
    "billion": 1_000_000_000,
    "million": 1_000_000,
    "thousand": 1_000,
    "t": 1_000_000_000_000,
    "b": 1_000_000_000,
    "m": 1_000_000,
    "k": 1_000,
}


def parse_number(value: Any) -> Optional[float]:
    """Parse a provider value into a float.

    Handles:
      - 123.4, "123.4", "1,234" -> plain floats
      - "$2.85 T", "$394.3 B" -> 2_850_000_000_000, 394_300_000_000
      - "$51.2 billion" -> 51_200_000_000
      - "None", "-", "N/A", NaN, infinity -> None

    Percent strings are not converted; callers that receive "45.3%" use
    parse_percent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.lower() in _MISSING:
        return None

    match = re.search(
        r"(-?\d[\d,]*\.?\d*)\s*(trillion|billion|million|thousand|[tbmk])?\b",
        text.replace("$", ""),
        re.IGNORECASE,
    )
    if not match:
        return None
    try:
        number = float(match.group(1).replace(",", ""))
    except ValueError:
        return None
    suffix = (match.group(2) or "").lower()
    number *= _MULTIPLIERS.get(suffix, 1)
    return number if math.isfinite(number) else None


def parse_percent(value: Any) -> Optional[float]:
    """"45.3%" -> 0.453; bare numbers are returned unchanged."""
    if isinstance(value, str) and "%" in value:
        number = parse_number(value.replace("%", ""))
        return number / 100.0 if number is not None else None
    return parse_number(value)


def clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = " ".join(value.split())
    if text.lower() in _MISSING:
        return None
    return text


_CORPORATE_SUFFIX = re.compile(
    r"[,\s]+(inc\.?|incorporated|corporation|corp\.?|company|co\.?|ltd\.?|limited|llc|plc|ag|sa|nv)$",
    re.IGNORECASE,
)


def strip_corporate_suffix(name: str) -> str:
    """"Apple Inc." -> "Apple"; "Microsoft Corporation" -> "Microsoft"."""
    stripped = name.strip()
    while True:
        shorter = _CORPORATE_SUFFIX.sub("", stripped).strip()
        if shorter == stripped or not shorter:
            return stripped
        stripped = shorter
