"""Digital presence assessment.

Scores which channels a business has claimed (website, LinkedIn, Twitter/X).
It is a presence check only: no URL is fetched and nothing is inferred from
the URL text itself.
"""

from __future__ import annotations

from typing import Optional

from .models import BusinessContext, DigitalPresence, EpicLetter, Priority, Recommendation

BASE_DIGITAL_SCORE = 40


def maturity_level(score: int) -> str:
    if score > 70:
        return "Advanced"
    if score > 50:
        return "Developing"
    return "Basic"


def assess_digital_presence(context: BusinessContext) -> Optional[DigitalPresence]:
    """Assess digital maturity, or None when neither a website nor LinkedIn is given."""
    has_website = bool(context.website_url)
    has_linkedin = bool(context.linkedin_url)
    has_twitter = bool(context.twitter_url)

    if not has_website and not has_linkedin:
        return None

    score = BASE_DIGITAL_SCORE
    if has_website:
        score += 30
    if has_linkedin:
        score += 20
    if has_twitter:
        score += 10
    score = min(100, score)

    alignment = {
        EpicLetter.E.value: 60 if has_website else 30,
        EpicLetter.P.value: 70 if has_website else 40,
        EpicLetter.I.value: (50 if has_website else 20) + (20 if has_linkedin else 0),
        EpicLetter.C.value: (40 if has_linkedin else 20) + (20 if has_twitter else 0),
    }

    recommendations = []
    if not has_website:
        recommendations.append(Recommendation(
            text="Develop professional website with clear value proposition",
            epic_component=EpicLetter.I,
            priority=Priority.HIGH,
        ))
    if not has_linkedin:
        recommendations.append(Recommendation(
            text="Establish LinkedIn company presence with regular thought leadership content",
            epic_component=EpicLetter.C,
            priority=Priority.MEDIUM,
        ))

    return DigitalPresence(
        digital_maturity_score=score,
        maturity_level=maturity_level(score),
        epic_alignment=alignment,
        recommendations=recommendations,
    )
