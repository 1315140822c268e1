import math

import pytest

from gtm_alpha.core.models import BusinessContext
from gtm_alpha.core.normalizer import normalize, parse_budget, parse_team_size


def test_empty_input_gets_defaults():
    context = normalize({})
    assert context.company_name == "Your Company"
    assert context.industry == "General"
    assert context.business_stage == "unspecified"
    assert context.challenge_text == ""
    assert context.team_size is None
    assert context.monthly_budget is None


@pytest.mark.parametrize("raw", [None, [], "acme", 42])
def test_non_mapping_input_is_treated_as_empty(raw):
    assert normalize(raw) == normalize({})


def test_text_is_stripped_and_blank_falls_back():
    context = normalize({"company_name": "  Acme  ", "industry": "   ", "challenge_text": "\tgrowth\n"})
    assert context.company_name == "Acme"
    assert context.industry == "General"
    assert context.challenge_text == "growth"


def test_non_string_text_is_stringified():
    assert normalize({"company_name": 123}).company_name == "123"


def test_existing_context_passes_through():
    context = BusinessContext(company_name="Acme")
    assert normalize(context) is context


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12),
        ("10-20", 10),
        ("about 7 people", 7),
        (5.7, 5),
        (-3, None),
        (True, None),
        (math.nan, None),
        (math.inf, None),
        ("lots", None),
        ([3], None),
    ],
)
def test_parse_team_size(value, expected):
    assert parse_team_size(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("$5,000/mo", 5000),
        ("$5,000.50", 5000),
        ("$5k", 5000),
        ("5K per month", 5000),
        ("$1.5m", 1500000),
        ("2.3k", 2300),
        ("5000mo", 5000),
        ("100000", 100000),
        (2500, 2500),
        (750.9, 750),
        ("unknown", None),
        (False, None),
        ({"amount": 5}, None),
    ],
)
def test_parse_budget(value, expected):
    assert parse_budget(value) == expected


def test_odd_numeric_values_never_fail():
    context = normalize({"team_size": "lots", "monthly_budget": [1, 2], "company_name": None})
    assert context.team_size is None
    assert context.monthly_budget is None
    assert context.company_name == "Your Company"
