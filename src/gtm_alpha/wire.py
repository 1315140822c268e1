"""Wire-format field mapping.

HTTP bodies, MCP tool arguments and CLI input use a handful of legacy field
names. They are resolved here so the core only ever sees canonical names.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .core.models import BusinessContext
from .core.normalizer import normalize, parse_budget

# Canonical field -> accepted aliases, in order of preference.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "company_name": ("company",),
    "industry": ("market",),
    "business_stage": ("stage",),
    "challenge_text": ("gtm_challenge", "current_challenges", "challenge", "challenges"),
    "team_size": ("current_team_size", "employees"),
    "monthly_budget": ("budget",),
    "website_url": ("company_website", "website"),
}

# Annual budget band -> lower bound of the band.
ANNUAL_BUDGET_RANGES: dict[str, int] = {
    "<25k": 0,
    "25k-50k": 25_000,
    "50k-100k": 50_000,
    "100k-250k": 100_000,
    "250k-500k": 250_000,
    "500k+": 500_000,
}


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def monthly_from_annual_range(value: Any) -> Optional[int]:
    """Monthly budget for an annual ``budget_range`` value.

    Known bands use their lower bound; anything else is parsed as an annual
    amount. The monthly figure is rounded up so that twelve months of it
    stay inside the band.
    """
    annual = None
    if isinstance(value, str):
        annual = ANNUAL_BUDGET_RANGES.get(value.strip().lower().replace(" ", ""))
    if annual is None:
        annual = parse_budget(value)
    if annual is None:
        return None
    return -(-annual // 12)


def canonical_fields(payload: Any) -> dict[str, Any]:
    """Rename aliased keys to canonical ones. Canonical names win over aliases."""
    if not isinstance(payload, Mapping):
        return {}
    fields = dict(payload)
    for canonical, aliases in FIELD_ALIASES.items():
        if _present(fields.get(canonical)):
            continue
        for alias in aliases:
            if _present(payload.get(alias)):
                fields[canonical] = payload[alias]
                break
    if not _present(fields.get("monthly_budget")) and _present(payload.get("budget_range")):
        fields["monthly_budget"] = monthly_from_annual_range(payload["budget_range"])
    return fields


def context_from_wire(payload: Any) -> BusinessContext:
    return normalize(canonical_fields(payload))
