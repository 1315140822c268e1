"""Recommendation generator.

Generation order decides which recommendations survive truncation, so the
list is never re-sorted: high-confidence EPIC letters first (in ranked order),
then digital-presence gaps, then industry-specific advice.
"""

from __future__ import annotations

from typing import Optional

from .models import (
    BusinessContext,
    DigitalPresence,
    EpicLetter,
    EpicScores,
    FocusClassification,
    Priority,
    Recommendation,
)
from .scoring import rank_letters

HIGH_CONFIDENCE_THRESHOLD = 70
MAX_RECOMMENDATIONS = 8
MAX_DIGITAL_RECOMMENDATIONS = 2
MAX_INDUSTRY_RECOMMENDATIONS = 2

LETTER_RECOMMENDATIONS: dict[EpicLetter, tuple[str, str, str]] = {
    EpicLetter.E: (
        "Implement Account-Based Marketing (ABM) for high-value enterprise prospects",
        "Build strategic partnership ecosystem to leverage unique data advantages",
        "Develop relationship intelligence system for sales acceleration",
    ),
    EpicLetter.P: (
        "Engineer product as primary GTM engine with built-in viral loops",
        "Optimize user onboarding and activation for self-service conversion",
        "Implement usage-based pricing model aligned with product value",
    ),
    EpicLetter.I: (
        "Launch integrated content marketing targeting specific buyer personas",
        "Implement hyper-personalized outbound sequences based on buyer signals",
        "Optimize conversion funnel with mental velocity principles",
    ),
    EpicLetter.C: (
        "Build industry community through thought leadership and expert positioning",
        "Create customer advocacy program with authentic testimonials",
        "Develop content strategy around community-driven insights",
    ),
}

INDUSTRY_RECOMMENDATIONS: dict[str, tuple[tuple[EpicLetter, str], ...]] = {
    "SaaS": (
        (EpicLetter.P, "Focus on product-led growth with freemium-to-paid conversion optimization"),
        (EpicLetter.C, "Developer community building for API adoption"),
        (EpicLetter.E, "Integration ecosystem for platform extensibility"),
    ),
    "Healthcare": (
        (EpicLetter.E, "Emphasize compliance-first messaging and regulatory partnership ecosystem"),
        (EpicLetter.E, "Healthcare provider partnership network"),
        (EpicLetter.C, "Medical professional community engagement"),
    ),
    "Finance": (
        (EpicLetter.I, "Build trust through thought leadership and regulatory compliance expertise"),
        (EpicLetter.E, "Regulatory compliance partnership ecosystem"),
        (EpicLetter.E, "Financial advisor and broker channel development"),
    ),
    "Technology": (
        (EpicLetter.E, "Developer ecosystem and API partnerships"),
        (EpicLetter.I, "Technical content marketing and SEO"),
        (EpicLetter.C, "Open source community contributions"),
    ),
    "Education": (
        (EpicLetter.E, "Educational institution partnerships"),
        (EpicLetter.I, "Content marketing for educators"),
        (EpicLetter.C, "Student and teacher community building"),
    ),
    "Logistics": (
        (EpicLetter.E, "Carrier and fulfillment partner ecosystem"),
        (EpicLetter.I, "Operations-focused inbound content strategy"),
        (EpicLetter.C, "Supply chain professional community"),
    ),
}

GENERIC_RECOMMENDATIONS: tuple[tuple[EpicLetter, str], ...] = (
    (EpicLetter.E, "Partnership ecosystem development"),
    (EpicLetter.I, "Industry-specific content marketing"),
    (EpicLetter.C, "Professional community engagement"),
)


def _letter_recommendations(letter: EpicLetter, priority: Priority) -> list[Recommendation]:
    return [
        Recommendation(text=text, epic_component=letter, priority=priority)
        for text in LETTER_RECOMMENDATIONS[letter]
    ]


def industry_recommendations(industry: str) -> list[Recommendation]:
    """Up to two industry recommendations; unknown industries get generic advice at low priority."""
    entries = INDUSTRY_RECOMMENDATIONS.get(industry)
    priority = Priority.MEDIUM
    if entries is None:
        entries = GENERIC_RECOMMENDATIONS
        priority = Priority.LOW
    return [
        Recommendation(text=text, epic_component=letter, priority=priority)
        for letter, text in entries[:MAX_INDUSTRY_RECOMMENDATIONS]
    ]


def recommend(
    scores: EpicScores,
    focus: FocusClassification,
    context: BusinessContext,
    digital: Optional[DigitalPresence] = None,
) -> list[Recommendation]:
    """Ordered, de-duplicated recommendations, at most MAX_RECOMMENDATIONS long."""
    generated: list[Recommendation] = []

    for letter in rank_letters(scores):
        if scores.get(letter) >= HIGH_CONFIDENCE_THRESHOLD:
            generated.extend(_letter_recommendations(letter, Priority.HIGH))

    if not generated:
        generated.extend(_letter_recommendations(focus.primary, Priority.MEDIUM))

    if digital is not None:
        high = [r for r in digital.recommendations if r.priority == Priority.HIGH]
        generated.extend(high[:MAX_DIGITAL_RECOMMENDATIONS])

    generated.extend(industry_recommendations(context.industry))

    seen: set[str] = set()
    result = []
    for rec in generated:
        if rec.text in seen:
            continue
        seen.add(rec.text)
        result.append(rec)
    return result[:MAX_RECOMMENDATIONS]
