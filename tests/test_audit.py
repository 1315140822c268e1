import pytest

from gtm_alpha.core.audit import audit_scores, maturity_level, overall_score, parse_focus_areas
from gtm_alpha.core.models import EpicLetter, EpicScores, Priority

SEED_SAAS_SCORES = EpicScores(E=39, P=59, I=30, C=22)


def test_overall_score_is_rounded_mean():
    assert overall_score(SEED_SAAS_SCORES) == 38
    assert overall_score(EpicScores(E=30, P=30, I=30, C=32)) == 31
    assert overall_score(EpicScores(E=30, P=30, I=30, C=31)) == 30


@pytest.mark.parametrize(
    "score, level",
    [(100, "Advanced"), (80, "Advanced"), (79, "Developing"), (60, "Developing"), (59, "Basic"), (40, "Basic"), (39, "Foundational"), (0, "Foundational")],
)
def test_maturity_level(score, level):
    assert maturity_level(score) == level


def test_parse_focus_areas():
    assert parse_focus_areas("community, product-led") == [EpicLetter.C, EpicLetter.P]
    assert parse_focus_areas(["Ecosystem", "e", "inbound"]) == [EpicLetter.E, EpicLetter.I]
    assert parse_focus_areas(None) == [EpicLetter.E, EpicLetter.P, EpicLetter.I, EpicLetter.C]
    assert parse_focus_areas("") == [EpicLetter.E, EpicLetter.P, EpicLetter.I, EpicLetter.C]


def test_parse_focus_areas_rejects_unknown_names():
    with pytest.raises(ValueError, match="Unknown focus area"):
        parse_focus_areas(["community", "telepathy"])
    with pytest.raises(ValueError):
        parse_focus_areas(5)


def test_audit_of_a_foundational_business():
    audit = audit_scores(SEED_SAAS_SCORES)
    assert audit.overall_score == 38
    assert audit.maturity_level == "Foundational"
    assert [(gap.letter, gap.priority) for gap in audit.gaps] == [
        (EpicLetter.E, Priority.MEDIUM),
        (EpicLetter.I, Priority.MEDIUM),
        (EpicLetter.C, Priority.HIGH),
    ]
    assert len(audit.next_steps) == 5
    assert "Product-Led Growth Acceleration" in audit.next_steps[2]
    assert audit.next_steps[-1] == "Schedule follow-up EPIC assessment in 90 days to measure progress"


def test_focus_areas_limit_the_gaps():
    audit = audit_scores(SEED_SAAS_SCORES, [EpicLetter.C, EpicLetter.P])
    assert audit.focus_areas == [EpicLetter.C, EpicLetter.P]
    assert [gap.letter for gap in audit.gaps] == [EpicLetter.C]


def test_advanced_business_has_no_gaps():
    audit = audit_scores(EpicScores(E=90, P=85, I=80, C=75))
    assert audit.maturity_level == "Advanced"
    assert audit.gaps == []
    assert audit.next_steps[2] == "Fine-tune advanced GTM strategies for maximum efficiency"


def test_developing_business_next_steps():
    audit = audit_scores(EpicScores(E=70, P=60, I=55, C=60))
    assert audit.maturity_level == "Developing"
    assert audit.next_steps[3] == "Implement quarterly progress reviews to maintain momentum"
