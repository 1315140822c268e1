"""HTML consultation report.

Produces one self-contained HTML document. All user-supplied text is escaped.
"""

from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Optional

from .core.models import BusinessContext, ConsultationResult, RoadmapTask
from .core.roadmap import PHASES

PHASE_TITLES = {
    "days_30": "First 30 Days",
    "days_60": "Days 31-60",
    "first_quarter": "First Quarter",
    "second_quarter": "Second Quarter",
}

_STYLE = """
body { font-family: Arial, sans-serif; max-width: 900px; margin: 0 auto; padding: 24px; color: #222; }
header { background: #1f3b6f; color: #fff; padding: 24px; border-radius: 8px; }
.scores { display: grid; grid-template-columns: repeat(4, 1fr); gap: 12px; margin: 24px 0; }
.score { background: #f3f5f9; border-radius: 8px; padding: 16px; text-align: center; }
.score .value { font-size: 32px; font-weight: bold; }
.score.primary { border: 2px solid #1f3b6f; }
table { width: 100%; border-collapse: collapse; margin-bottom: 16px; }
th, td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #ddd; font-size: 14px; }
.priority-high { color: #b00020; }
.priority-medium { color: #a05a00; }
.priority-low { color: #555; }
"""


def _task_rows(tasks: list[RoadmapTask]) -> str:
    return "".join(
        f"<tr><td>{escape(t.task)}</td><td>{escape(t.owner_role)}</td>"
        f"<td>{escape(t.deadline_label)}</td><td>{escape(t.success_metric)}</td></tr>"
        for t in tasks
    )


def render_report(
    context: BusinessContext,
    result: ConsultationResult,
    consultation_id: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render a consultation as a standalone HTML page."""
    scores = result.epic_scores
    score_cards = "".join(
        f'<div class="score{" primary" if letter == result.primary_focus.value else ""}">'
        f'<div class="value">{getattr(scores, letter)}</div><div>{label}</div></div>'
        for letter, label in (
            ("E", "Ecosystem &amp; ABM"),
            ("P", "Product-Led Growth"),
            ("I", "Inbound &amp; Outbound"),
            ("C", "Community-Led"),
        )
    )

    recommendations = "".join(
        f'<li class="priority-{r.priority.value}">{escape(r.text)} '
        f"<small>({r.epic_component.value}, {r.priority.value})</small></li>"
        for r in result.recommendations
    )

    phases = "".join(
        f"<h3>{PHASE_TITLES[phase]}</h3>"
        "<table><tr><th>Task</th><th>Owner</th><th>Deadline</th><th>Success metric</th></tr>"
        f"{_task_rows(getattr(result.roadmap, phase))}</table>"
        for phase in PHASES
    )

    risks = "".join(
        f"<tr><td>{escape(r.risk)}</td><td>{escape(r.impact)}</td><td>{escape(r.mitigation)}</td></tr>"
        for r in result.risks
    )

    digital = ""
    if result.digital_presence is not None:
        dp = result.digital_presence
        digital = (
            "<h2>Digital Presence</h2>"
            f"<p>Digital maturity: <strong>{dp.digital_maturity_score}/100</strong> ({escape(dp.maturity_level)})</p>"
        )

    meta = []
    if consultation_id:
        meta.append(f"Consultation ID: {escape(consultation_id)}")
    if generated_at:
        meta.append(f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M UTC')}")
    footer = " · ".join(meta)
    prepared_for = f"<p>Prepared for {escape(context.client_name)}</p>" if context.client_name else ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>GTM Alpha Consultation: {escape(context.company_name)}</title>
<style>{_STYLE}</style>
</head>
<body>
<header>
<h1>GTM Alpha Consultation: {escape(context.company_name)}</h1>
<p>{escape(context.industry)} · {escape(context.business_stage)}</p>
{prepared_for}
</header>
<div class="scores">{score_cards}</div>
<h2>Strategic Focus</h2>
<p><strong>Primary:</strong> {escape(result.primary_focus_name)}<br>
<strong>Secondary:</strong> {escape(result.secondary_focus_name)}</p>
<p>{escape(result.insight)}</p>
<h2>Recommendations</h2>
<ul>{recommendations}</ul>
<h2>Roadmap <small>({result.roadmap.capacity.value} capacity)</small></h2>
{phases}
<h2>Risks</h2>
<table><tr><th>Risk</th><th>Impact</th><th>Mitigation</th></tr>{risks}</table>
{digital}
<footer><p>{footer}</p></footer>
</body>
</html>
"""
