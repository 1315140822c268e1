"""EPIC audit: overall maturity, gaps in the areas under review, and next steps."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, Optional

from .models import EpicAudit, EpicLetter, EpicScores, FocusGap, Priority
from .scoring import LETTERS, rank_letters

GAP_THRESHOLD = 50
HIGH_PRIORITY_BELOW = 30

# Lower bound of the overall score for each maturity level, highest first.
MATURITY_LEVELS: tuple[tuple[int, str], ...] = (
    (80, "Advanced"),
    (60, "Developing"),
    (40, "Basic"),
    (0, "Foundational"),
)

FOCUS_AREA_NAMES: dict[str, EpicLetter] = {
    "e": EpicLetter.E,
    "ecosystem": EpicLetter.E,
    "abm": EpicLetter.E,
    "p": EpicLetter.P,
    "product_led": EpicLetter.P,
    "plg": EpicLetter.P,
    "i": EpicLetter.I,
    "inbound": EpicLetter.I,
    "demand": EpicLetter.I,
    "c": EpicLetter.C,
    "community": EpicLetter.C,
}


def overall_score(scores: EpicScores) -> int:
    """Mean of the four scores, rounded half-up."""
    return (scores.total + 2) // 4


def maturity_level(score: int) -> str:
    for floor, level in MATURITY_LEVELS:
        if score >= floor:
            return level
    return MATURITY_LEVELS[-1][1]


def parse_focus_areas(value: Any) -> list[EpicLetter]:
    """Letters named by ``value``: a list or comma-separated string of
    letters or area names ('ecosystem', 'product_led', 'inbound', 'community').

    An empty value means all four areas.

    Raises:
        ValueError: for a name that is not an EPIC area.
    """
    if value is None:
        items: Sequence[Any] = []
    elif isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, Sequence):
        items = value
    else:
        raise ValueError(f"focus_areas must be a list or a comma-separated string, not {type(value).__name__}")

    letters: list[EpicLetter] = []
    for item in items:
        name = re.sub(r"[\s-]+", "_", str(item).strip().lower())
        if not name:
            continue
        letter = FOCUS_AREA_NAMES.get(name)
        if letter is None:
            raise ValueError(
                f"Unknown focus area {item!r}; expected one of ecosystem, product_led, inbound, community"
            )
        if letter not in letters:
            letters.append(letter)
    return letters or list(LETTERS)


def focus_gaps(scores: EpicScores, focus_areas: Sequence[EpicLetter]) -> list[FocusGap]:
    """Areas under review scoring below GAP_THRESHOLD, in E, P, I, C order."""
    gaps = []
    for letter in LETTERS:
        score = scores.get(letter)
        if letter in focus_areas and score < GAP_THRESHOLD:
            gaps.append(FocusGap(
                letter=letter,
                name=letter.display_name,
                score=score,
                priority=Priority.HIGH if score < HIGH_PRIORITY_BELOW else Priority.MEDIUM,
            ))
    return gaps


def next_steps(level: str, strongest: EpicLetter) -> list[str]:
    steps = [
        "Review detailed EPIC assessment and identify top priority areas",
        "Implement recommended actions based on effort vs impact matrix",
    ]
    if level in ("Foundational", "Basic"):
        steps.append(f"Focus on building strong foundation in {strongest.display_name}, your highest-scoring EPIC component")
        steps.append("Request a full consultation for a detailed implementation roadmap")
    elif level == "Developing":
        steps.append("Optimize existing strengths while addressing key capability gaps")
        steps.append("Implement quarterly progress reviews to maintain momentum")
    else:
        steps.append("Fine-tune advanced GTM strategies for maximum efficiency")
        steps.append("Plan the next stage of scaling and optimization with a full consultation")
    steps.append("Schedule follow-up EPIC assessment in 90 days to measure progress")
    return steps


def audit_scores(scores: EpicScores, focus_areas: Optional[Sequence[EpicLetter]] = None) -> EpicAudit:
    overall = overall_score(scores)
    level = maturity_level(overall)
    areas = list(focus_areas) if focus_areas else list(LETTERS)
    return EpicAudit(
        overall_score=overall,
        maturity_level=level,
        focus_areas=areas,
        gaps=focus_gaps(scores, areas),
        next_steps=next_steps(level, rank_letters(scores)[0]),
    )
