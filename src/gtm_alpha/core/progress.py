"""Progress comparison between consultations of the same business."""

from __future__ import annotations

from typing import Optional, Sequence

from .models import EpicScores, ProgressReport, StoredConsultation
from .scoring import LETTERS

MIN_DAYS_BETWEEN_CHECKS = 14


def overall_improvement(previous: EpicScores, current: EpicScores) -> int:
    """Percent change of the summed scores, rounded half-up."""
    if previous.total <= 0:
        return 0
    delta = (current.total - previous.total) * 100
    return (delta * 2 + previous.total) // (previous.total * 2)


def momentum(improvement: int) -> str:
    if improvement > 15:
        return "accelerate"
    if improvement > 5:
        return "optimize"
    if improvement > -5:
        return "adjust"
    return "restructure"


def _assessment(band: str, improvement: int, timespan_days: int) -> str:
    if band == "accelerate":
        return f"Exceptional progress: {improvement}% improvement in {timespan_days} days shows highly effective GTM execution."
    if band == "optimize":
        return f"Strong progress: {improvement}% improvement shows the strategy is working."
    if band == "adjust":
        if improvement > 0:
            return f"Positive trend: {improvement}% improvement indicates good foundation building."
        return f"Stable performance: {improvement}% change suggests tactical adjustment is needed."
    return f"Significant decline: {abs(improvement)}% decrease requires immediate strategic attention."


def _next_steps(band: str, focus_name: str) -> list[str]:
    if band == "accelerate":
        return [
            f"Double down on successful {focus_name} initiatives",
            "Allocate additional resources to high-performing areas",
            "Document and systematize winning processes",
            "Consider expanding to additional EPIC components",
            "Prepare for next growth phase investments",
        ]
    if band == "optimize":
        return [
            f"Continue current {focus_name} strategy",
            "Fine-tune processes for better efficiency",
            "Expand successful tactics to new segments",
            "Begin preparing secondary EPIC component development",
            "Establish more sophisticated measurement systems",
        ]
    if band == "adjust":
        return [
            f"Analyze what's working vs. what's not in {focus_name}",
            "Make tactical adjustments to underperforming areas",
            "Consider A/B testing different approaches",
            "Increase measurement frequency for faster feedback",
            "Evaluate if strategic pivot is needed",
        ]
    return [
        f"Immediate strategic review of {focus_name} approach",
        "Consider major EPIC component pivot",
        "Analyze external market factors affecting performance",
        "Restructure GTM team and processes",
        "Schedule an expert-led strategy review",
    ]


def compare_progress(previous: StoredConsultation, current: StoredConsultation) -> ProgressReport:
    """Compare an earlier consultation with a later one for the same business."""
    previous_scores = previous.result.epic_scores
    current_scores = current.result.epic_scores
    previous_focus = previous.result.primary_focus
    current_focus = current.result.primary_focus
    timespan = max(0, (current.created_at - previous.created_at).days)
    improvement = overall_improvement(previous_scores, current_scores)
    band = momentum(improvement)
    return ProgressReport(
        timespan_days=timespan,
        previous_scores=previous_scores,
        current_scores=current_scores,
        epic_changes={
            letter.value: current_scores.get(letter) - previous_scores.get(letter)
            for letter in LETTERS
        },
        previous_focus=previous_focus,
        current_focus=current_focus,
        focus_changed=previous_focus != current_focus,
        overall_improvement=improvement,
        momentum=band,
        assessment=_assessment(band, improvement, timespan),
        next_steps=_next_steps(band, current_focus.display_name),
    )


def trend(history: Sequence[EpicScores]) -> Optional[dict]:
    """Average period-over-period improvement across three or more consultations.

    Returns None while the history is too short to show a trend.
    """
    if len(history) < 3:
        return None
    changes = [overall_improvement(prev, curr) for prev, curr in zip(history, history[1:])]
    average = sum(changes) / len(changes)
    if average > 5:
        direction = "strong upward"
    elif average > 0:
        direction = "positive"
    elif average > -5:
        direction = "stable"
    else:
        direction = "declining"
    return {
        "consultations": len(history),
        "average_change": round(average, 1),
        "direction": direction,
    }
