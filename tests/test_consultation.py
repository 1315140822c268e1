from gtm_alpha.core.consultation import FOCUS_INSIGHTS, compute_consultation, stage_insight
from gtm_alpha.core.models import CapacityTier, EpicLetter
from gtm_alpha.core.roadmap import PHASES

from conftest import SEED_SAAS


def test_identical_input_gives_identical_output():
    assert compute_consultation(SEED_SAAS).model_dump_json() == compute_consultation(dict(SEED_SAAS)).model_dump_json()


def test_empty_input_gives_a_complete_result():
    result = compute_consultation({})
    assert result.primary_focus == EpicLetter.P
    assert result.secondary_focus == EpicLetter.E
    assert result.primary_focus_name == "Product-Led Growth Acceleration"
    assert result.secondary_focus_name == "Ecosystem & ABM-led Sales Motion"
    assert len(result.recommendations) == 5
    assert all(len(getattr(result.roadmap, phase)) == 5 for phase in PHASES)
    assert len(result.risks) == 5
    assert result.digital_presence is None
    assert result.insight == FOCUS_INSIGHTS[EpicLetter.P]


def test_none_input_matches_empty_input():
    assert compute_consultation(None) == compute_consultation({})


def test_stage_clause_is_appended_to_insight():
    result = compute_consultation(SEED_SAAS)
    assert result.insight.endswith(stage_insight("venture-seed"))
    assert result.insight.startswith(FOCUS_INSIGHTS[EpicLetter.P])


def test_pmf_clause_wins_over_seed():
    assert stage_insight("bootstrapped-pmf").startswith("Scale proven")
    assert stage_insight("growth") == ""


def test_capacity_flows_into_roadmap_and_risks():
    small = compute_consultation({"team_size": 2, "monthly_budget": "500"})
    large = compute_consultation({"team_size": 50, "monthly_budget": "100000"})
    assert small.roadmap.capacity == CapacityTier.CONSTRAINED
    assert large.roadmap.capacity == CapacityTier.HIGH
    assert len(small.roadmap.days_30) == 3 < len(large.roadmap.days_30) == 5
    assert len(small.risks) == 6


def test_digital_presence_is_included_when_urls_are_given():
    result = compute_consultation({"website_url": "https://acme.example"})
    assert result.digital_presence is not None
    assert result.digital_presence.digital_maturity_score == 70


def test_recommendations_are_bounded():
    loud = {
        "business_stage": "enterprise",
        "industry": "Finance",
        "challenge_text": "partners ecosystem abm enterprise integration channel alliances b2b",
        "linkedin_url": "https://linkedin.com/company/acme",
    }
    assert len(compute_consultation(loud).recommendations) <= 8
