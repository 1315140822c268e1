"""Consultation pipeline: normalize -> score -> classify -> recommend / roadmap."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .digital import assess_digital_presence
from .models import BusinessContext, ConsultationResult, EpicLetter
from .normalizer import normalize
from .recommendations import recommend
from .roadmap import build_roadmap, identify_risks, plan_resources
from .scoring import classify_focus, score_epic

FOCUS_INSIGHTS: dict[EpicLetter, str] = {
    EpicLetter.E: (
        "Focus on leveraging unique data advantages, partner ecosystems, and relationship "
        "intelligence for enterprise sales acceleration. Build strategic partnerships and "
        "account-based approaches that create sustainable competitive moats."
    ),
    EpicLetter.P: (
        "Treat GTM as a dynamic operating system where Product-Led Growth becomes your primary "
        "lever. Focus on engineering the product as the GTM engine, PLG and sales synergy, and "
        "user experience optimization for conversion."
    ),
    EpicLetter.I: (
        "Implement an integrated approach combining content marketing excellence with "
        "hyper-personalized outreach. Focus on eliminating decision dead zones in your buyer "
        "journey rather than optimizing vanity metrics."
    ),
    EpicLetter.C: (
        "Build community-driven advocacy and authentic relationship building as your primary "
        "growth engine. Focus on creating genuine value exchange and thought leadership positioning."
    ),
}


def stage_insight(business_stage: str) -> str:
    stage = business_stage.lower()
    if "pmf" in stage:
        return "Scale proven customer acquisition channels with strategic investment for sustainable growth."
    if "seed" in stage:
        return "Focus on validating product-market fit while building repeatable GTM processes."
    if "series" in stage:
        return "Optimize for scalability and systematic competitive advantage building."
    return ""


def build_insight(context: BusinessContext, primary: EpicLetter) -> str:
    parts = [FOCUS_INSIGHTS[primary]]
    clause = stage_insight(context.business_stage)
    if clause:
        parts.append(clause)
    return " ".join(parts)


def compute_consultation(raw: Optional[Mapping[str, Any] | BusinessContext] = None) -> ConsultationResult:
    """Run the full consultation for one business.

    Pure and total: any mapping (including an empty one) produces a complete
    result, and identical input always produces an identical result.
    """
    context = normalize(raw)
    scores = score_epic(context)
    focus = classify_focus(scores)
    digital = assess_digital_presence(context)
    roadmap = build_roadmap(focus, context)

    return ConsultationResult(
        epic_scores=scores,
        primary_focus=focus.primary,
        secondary_focus=focus.secondary,
        primary_focus_name=focus.primary.display_name,
        secondary_focus_name=focus.secondary.display_name,
        insight=build_insight(context, focus.primary),
        recommendations=recommend(scores, focus, context, digital),
        roadmap=roadmap,
        risks=identify_risks(roadmap.capacity),
        resources=plan_resources(context),
        digital_presence=digital,
    )
