import pytest

from gtm_alpha.core.models import CapacityTier
from gtm_alpha.core.roadmap import budget_points, capacity_tier
from gtm_alpha.wire import canonical_fields, context_from_wire, monthly_from_annual_range


def test_aliases_map_to_canonical_fields():
    context = context_from_wire({
        "company": "Acme",
        "market": "SaaS",
        "stage": "venture-seed",
        "gtm_challenge": "onboarding is slow",
        "employees": "10-20",
        "budget": "$5k",
        "website": "https://acme.example",
    })
    assert context.company_name == "Acme"
    assert context.industry == "SaaS"
    assert context.business_stage == "venture-seed"
    assert context.challenge_text == "onboarding is slow"
    assert context.team_size == 10
    assert context.monthly_budget == 5000
    assert context.website_url == "https://acme.example"


def test_canonical_name_wins_over_alias():
    fields = canonical_fields({"company_name": "Acme", "company": "Other", "challenge": "", "challenges": "churn"})
    assert fields["company_name"] == "Acme"
    assert fields["challenge_text"] == "churn"


def test_first_present_alias_wins():
    assert canonical_fields({"current_challenges": "a", "challenge": "b"})["challenge_text"] == "a"


def test_non_mapping_payload_is_empty():
    assert canonical_fields(["company", "Acme"]) == {}
    assert context_from_wire("Acme").company_name == "Your Company"


def test_budget_range_is_annual_and_converted_to_monthly():
    context = context_from_wire({"budget_range": "250k-500k", "team_size": "20+"})
    assert context.monthly_budget == 20834
    assert context.team_size == 20
    assert capacity_tier(context) == CapacityTier.STRONG


@pytest.mark.parametrize(
    "budget_range, points",
    [("<25k", 1), ("25k-50k", 2), ("50k-100k", 3), ("100k-250k", 4), ("250k-500k", 5), ("500k+", 6), ("$120,000", 4)],
)
def test_budget_range_lands_in_its_band(budget_range, points):
    assert budget_points(context_from_wire({"budget_range": budget_range}).monthly_budget) == points


def test_monthly_budget_wins_over_budget_range():
    assert context_from_wire({"budget": "$5k", "budget_range": "500k+"}).monthly_budget == 5000
    assert monthly_from_annual_range("not a budget") is None
