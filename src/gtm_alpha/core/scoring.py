"""EPIC scoring and focus classification.

Maps a normalized BusinessContext to four bounded scores and picks the
primary/secondary strategic focus. All arithmetic is integer; multiplicative
steps round half-up so results are always whole numbers.
"""

from __future__ import annotations

from typing import Optional

from .models import BusinessContext, EpicLetter, EpicScores, FocusClassification

LETTERS = (EpicLetter.E, EpicLetter.P, EpicLetter.I, EpicLetter.C)

BASE_SCORE = 30

# Ties are broken in this order.
TIE_BREAK_ORDER = (EpicLetter.P, EpicLetter.E, EpicLetter.I, EpicLetter.C)

# Percent share of GTM effort per stage; contribution is the offset from an even 25% split.
STAGE_WEIGHTS: dict[str, tuple[int, int, int, int]] = {
    "bootstrapped-idea": (20, 30, 30, 20),
    "bootstrapped-pmf": (25, 35, 25, 15),
    "bootstrapped-seed-equivalent": (30, 30, 25, 15),
    "bootstrapped-series-equivalent": (35, 25, 25, 15),
    "venture-seed": (30, 35, 20, 15),
    "venture-series-a": (40, 25, 20, 15),
    "venture-series-b": (45, 20, 20, 15),
    "growth": (40, 30, 20, 10),
    "scale": (50, 20, 20, 10),
    "enterprise": (60, 15, 15, 10),
}
NEUTRAL_STAGE = (25, 25, 25, 25)

# Percent multipliers, matched case-sensitively.
INDUSTRY_MODIFIERS: dict[str, tuple[int, int, int, int]] = {
    "Technology": (120, 130, 110, 100),
    "SaaS": (110, 140, 120, 110),
    "E-commerce": (100, 120, 130, 120),
    "Healthcare": (130, 100, 110, 90),
    "Finance": (140, 100, 100, 80),
    "Education": (110, 110, 120, 130),
    "Manufacturing": (130, 90, 100, 80),
    "Consulting": (120, 80, 130, 140),
}
NEUTRAL_INDUSTRY = (100, 100, 100, 100)

KEYWORDS: dict[EpicLetter, tuple[str, ...]] = {
    EpicLetter.E: ("partners", "ecosystem", "abm", "enterprise", "integration", "channel", "alliances", "b2b"),
    EpicLetter.P: ("product-led", "plg", "user experience", "onboarding", "activation", "self-serve", "viral", "freemium"),
    EpicLetter.I: ("content", "demand", "marketing", "channels", "campaigns", "seo", "paid", "outbound", "inbound"),
    EpicLetter.C: ("community", "advocacy", "engagement", "loyalty", "referrals", "events", "network", "social"),
}


def _round_pct(value: int, pct: int) -> int:
    """value * pct / 100, rounded half-up (values are never negative here)."""
    return (value * pct + 50) // 100


def _clamp(value: int) -> int:
    return max(0, min(100, value))


def stage_weights(business_stage: str) -> tuple[int, int, int, int]:
    return STAGE_WEIGHTS.get(business_stage.strip().lower(), NEUTRAL_STAGE)


def industry_modifiers(industry: str) -> tuple[int, int, int, int]:
    return INDUSTRY_MODIFIERS.get(industry, NEUTRAL_INDUSTRY)


def matched_keywords(text: str, letter: EpicLetter) -> list[str]:
    return [keyword for keyword in KEYWORDS[letter] if keyword in text]


def keyword_hits(text: str, letter: EpicLetter) -> int:
    return len(matched_keywords(text, letter))


def score_epic(context: BusinessContext) -> EpicScores:
    """Compute the four EPIC scores.

    Applied in a fixed order to an accumulator starting at BASE_SCORE:
    stage weighting, industry modification, keyword hits, heuristic bonuses,
    then clamping to [0, 100]. Unknown stages and industries are neutral.
    """
    text = context.match_text
    stage = context.business_stage.lower()

    scores = {letter: BASE_SCORE for letter in LETTERS}

    for letter, weight in zip(LETTERS, stage_weights(context.business_stage)):
        scores[letter] += weight - 25

    for letter, pct in zip(LETTERS, industry_modifiers(context.industry)):
        scores[letter] = _round_pct(max(scores[letter], 0), pct)

    for letter in LETTERS:
        scores[letter] += keyword_hits(text, letter)

    if "seed" in stage:
        scores[EpicLetter.P] += 1
    if "series" in stage:
        scores[EpicLetter.E] += 1
    if "enterprise" in text or "b2b" in text:
        scores[EpicLetter.E] += 1
    if "consumer" in text or "b2c" in text:
        scores[EpicLetter.P] += 1

    return EpicScores(**{letter.value: _clamp(score) for letter, score in scores.items()})


def rank_letters(scores: EpicScores) -> list[EpicLetter]:
    """Letters from highest to lowest score, ties broken by TIE_BREAK_ORDER."""
    return sorted(TIE_BREAK_ORDER, key=lambda letter: (-scores.get(letter), TIE_BREAK_ORDER.index(letter)))


def classify_focus(scores: EpicScores) -> FocusClassification:
    """Primary and secondary focus: the two top-ranked letters."""
    ranked = rank_letters(scores)
    return FocusClassification(primary=ranked[0], secondary=ranked[1])


def parse_letter(value: Optional[str]) -> Optional[EpicLetter]:
    """Parse 'E', 'p', ... into an EpicLetter. Blank means no preference."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return EpicLetter(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown EPIC focus {value!r}; expected one of E, P, I, C") from None


def resolve_focus(
    scores: EpicScores,
    primary: Optional[EpicLetter] = None,
    secondary: Optional[EpicLetter] = None,
) -> FocusClassification:
    """Focus classification honouring caller overrides.

    Missing overrides are filled from the score ranking; a secondary equal
    to the primary is replaced by the best-ranked other letter.
    """
    ranked = rank_letters(scores)
    primary = primary or ranked[0]
    if secondary is None or secondary == primary:
        secondary = next(letter for letter in ranked if letter != primary)
    return FocusClassification(primary=primary, secondary=secondary)
