"""Context normalizer: any partial input becomes a complete BusinessContext.

Normalization never fails. Missing, empty, or oddly-typed values fall back
to the defaults declared on BusinessContext so that scoring, recommendation
and roadmap code can assume every field is present.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

from .models import BusinessContext

_TEXT_FIELDS = (
    "company_name",
    "client_name",
    "industry",
    "business_stage",
    "challenge_text",
    "company_description",
    "website_url",
    "linkedin_url",
    "twitter_url",
)

_INT_RE = re.compile(r"\d+")
_AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)(?:\s*([km])(?![a-z]))?", re.IGNORECASE)
_SUFFIX_MULTIPLIERS = {"k": 1_000, "m": 1_000_000}


def normalize(raw: Optional[Mapping[str, Any] | BusinessContext] = None) -> BusinessContext:
    """Build a BusinessContext from a partial mapping.

    Args:
        raw: Canonical field names mapped to arbitrary values. Wire aliases
             (``company``, ``market``, ...) are resolved by the transport
             layer before this is called. ``None`` yields the all-default context.
    """
    if isinstance(raw, BusinessContext):
        return raw
    if not isinstance(raw, Mapping):
        raw = {}

    values: dict[str, Any] = {}
    for field in _TEXT_FIELDS:
        text = _clean_text(raw.get(field))
        if text:
            values[field] = text

    values["team_size"] = parse_team_size(raw.get("team_size"))
    values["monthly_budget"] = parse_budget(raw.get("monthly_budget"))
    return BusinessContext(**values)


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def parse_team_size(value: Any) -> Optional[int]:
    """Team headcount from an int or a string such as '10-20' (first number wins)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value >= 0 else None
    if isinstance(value, str):
        match = _INT_RE.search(value)
        if match:
            return int(match.group())
    return None


def parse_budget(value: Any) -> Optional[int]:
    """Monthly budget in whole currency units.

    Strings may carry currency symbols, thousands separators and a ``k`` or
    ``m`` multiplier: ``"$5,000/mo"`` and ``"$5k"`` both parse to 5000,
    ``"1.5m"`` to 1500000. Fractions of a unit are dropped.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value >= 0 else None
    if isinstance(value, str):
        match = _AMOUNT_RE.search(value.replace(",", ""))
        if match:
            amount = Decimal(match.group(1))
            if match.group(2):
                amount *= _SUFFIX_MULTIPLIERS[match.group(2).lower()]
            return int(amount)
    return None
