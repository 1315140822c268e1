"""Roadmap builder: four-phase GTM action plans sized to team capacity.

The primary focus supplies most tasks in each phase and the secondary focus
contributes one. Every task is annotated with an owner, a deadline and a
success metric derived from fixed keyword tables. Business priorities can
steer the focus and set the KPI targets for the roadmap's timeframe.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, Optional

from .models import (
    BusinessContext,
    CapacityTier,
    EpicLetter,
    FocusClassification,
    ResourcePlan,
    Risk,
    Roadmap,
    RoadmapTask,
    SuccessMetric,
)
from .scoring import TIE_BREAK_ORDER

# Phase name -> length in days.
PHASES: dict[str, int] = {
    "days_30": 30,
    "days_60": 60,
    "first_quarter": 90,
    "second_quarter": 180,
}

TEMPLATES: dict[EpicLetter, dict[str, tuple[str, ...]]] = {
    EpicLetter.E: {
        "days_30": (
            "Map current partner ecosystem and identify strategic gaps",
            "Develop ideal customer profile (ICP) for target accounts",
            "Research and prioritize top 50 enterprise prospects",
            "Create account mapping and stakeholder analysis",
        ),
        "days_60": (
            "Launch pilot ABM campaigns for top 20 accounts",
            "Establish strategic partnerships with key solution providers",
            "Implement account intelligence and relationship mapping tools",
            "Create personalized outbound sequences for target accounts",
        ),
        "first_quarter": (
            "Scale ABM approach with account-based journeys",
            "Expand partner ecosystem with joint go-to-market initiatives",
            "Launch partner enablement program with co-marketing materials",
            "Implement advanced account-based experience (ABX) across teams",
        ),
        "second_quarter": (
            "Develop enterprise channel partner program with certification",
            "Launch strategic alliance partnerships with technology integrations",
            "Measure partnership-driven pipeline and optimize ROI",
            "Establish customer advisory board and reference program",
        ),
    },
    EpicLetter.P: {
        "days_30": (
            "Audit user onboarding flow and identify friction points",
            "Implement product usage analytics and user tracking",
            "Create self-service trial experience design",
            "Establish product-qualified lead (PQL) scoring system",
        ),
        "days_60": (
            "Launch optimized onboarding with progressive feature disclosure",
            "Implement automated engagement triggers and nudges",
            "A/B testing framework for conversion optimization",
            "Create in-product upgrade prompts and expansion paths",
        ),
        "first_quarter": (
            "Scale PLG motions with automated user journey optimization",
            "Launch referral program and viral growth mechanisms",
            "Implement usage-based pricing and expansion revenue tracking",
            "Optimize product-market fit based on usage data",
        ),
        "second_quarter": (
            "Launch advanced product-led sales (PLS) hybrid model",
            "Implement predictive analytics for user behavior and churn",
            "Develop enterprise PLG features with white-glove onboarding",
            "Create product-led customer success and expansion programs",
        ),
    },
    EpicLetter.I: {
        "days_30": (
            "Complete buyer persona research and journey mapping",
            "Audit content strategy and identify high-intent keywords",
            "Create editorial calendar aligned with sales cycles",
            "Set up marketing automation and lead scoring framework",
        ),
        "days_60": (
            "Launch thought leadership content series targeting decision makers",
            "Implement SEO optimization for target keywords",
            "Begin hyper-personalized outbound campaigns",
            "Launch demand generation campaigns across multiple channels",
        ),
        "first_quarter": (
            "Scale content distribution and amplification strategies",
            "Optimize conversion paths with landing page testing",
            "Implement attribution modeling for content-driven pipeline",
            "Launch account-based content strategy for enterprise",
        ),
        "second_quarter": (
            "Develop industry thought leadership and speaking opportunities",
            "Launch advanced marketing automation with predictive scoring",
            "Implement omnichannel demand generation orchestration",
            "Create content-driven customer advocacy and expansion programs",
        ),
    },
    EpicLetter.C: {
        "days_30": (
            "Define community vision and value proposition",
            "Research community platforms and engagement strategies",
            "Create founding member outreach plan",
            "Develop community guidelines and moderation framework",
        ),
        "days_60": (
            "Launch community with initial content and expert positioning",
            "Implement community engagement workflows",
            "Begin thought leadership content creation from community insights",
            "Establish community-driven feedback loops",
        ),
        "first_quarter": (
            "Scale community growth with member-driven advocacy",
            "Launch community-influenced product development",
            "Measure community impact on customer acquisition and retention",
            "Create community-driven customer success programs",
        ),
        "second_quarter": (
            "Develop community-led customer advisory and expansion programs",
            "Launch industry events and community-driven thought leadership",
            "Implement community influence on product roadmap and strategy",
            "Create community-powered partner and ecosystem development",
        ),
    },
}

# First matching keyword wins, so order matters.
OWNER_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("mapping", "Marketing Manager"),
    ("research", "Marketing Analyst"),
    ("content", "Content Manager"),
    ("campaign", "Growth Manager"),
    ("partnership", "Business Development"),
    ("product", "Product Manager"),
    ("automation", "Marketing Ops"),
    ("community", "Community Manager"),
    ("analytics", "Data Analyst"),
)
DEFAULT_OWNER = "Marketing Team"
CONSTRAINED_OWNER = "Marketing Lead"

METRIC_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("mapping", "Strategic gaps identified and documented"),
    ("research", "Target list created with contact details"),
    ("content", "Content pieces published and promoted"),
    ("campaign", "Campaign launched with initial results"),
    ("partnership", "Partner agreements signed"),
    ("product", "Feature released and adoption tracked"),
    ("automation", "Workflows active with performance metrics"),
    ("community", "Community launched with active members"),
    ("analytics", "Tracking implemented with baseline metrics"),
)
DEFAULT_METRIC = "Task completed with measurable outcome"

CAPACITY_MULTIPLIERS: dict[CapacityTier, int] = {
    CapacityTier.CONSTRAINED: 60,
    CapacityTier.MODERATE: 80,
    CapacityTier.STRONG: 100,
    CapacityTier.HIGH: 120,
}

MIN_DEADLINE_DAY = 7
DEADLINE_SHARE = 80
DEFAULT_POINTS = 3

BUDGET_ALLOCATION = {
    "content_creation": "25%",
    "paid_advertising": "30%",
    "tools_and_technology": "20%",
    "events_and_partnerships": "15%",
    "other": "10%",
}

# Keyed by team points (see team_points).
TEAM_REQUIREMENTS: dict[int, list[str]] = {
    1: ["Marketing generalist (1.0 FTE)", "Design contractor (0.2 FTE)"],
    2: ["Marketing manager (1.0 FTE)", "Content creator (0.5 FTE)", "Design support (0.3 FTE)"],
    3: ["Marketing manager (1.0 FTE)", "Content marketer (0.8 FTE)", "Growth specialist (0.5 FTE)", "Designer (0.5 FTE)"],
    4: ["Marketing director (1.0 FTE)", "Content manager (1.0 FTE)", "Growth manager (0.8 FTE)", "Marketing ops (0.5 FTE)", "Designer (0.5 FTE)"],
    5: ["Marketing director (1.0 FTE)", "Content team (2.0 FTE)", "Growth team (1.5 FTE)", "Marketing ops (1.0 FTE)", "Design team (1.0 FTE)"],
}

# Keyed by budget points (see budget_points).
TECHNOLOGY_STACKS: dict[int, list[str]] = {
    1: ["HubSpot CRM (free)", "Mailchimp", "Google Analytics", "Canva"],
    2: ["HubSpot Starter", "ConvertKit", "Google Analytics 4", "Figma", "Calendly"],
    3: ["HubSpot Professional", "Outreach", "Google Analytics 4", "Adobe Creative", "Zoom", "Slack"],
    4: ["HubSpot Enterprise", "Salesforce", "Outreach", "Google Analytics 4", "Adobe Creative Suite", "Zoom", "Slack", "Asana"],
    5: ["Salesforce", "Marketo", "Outreach", "Google Analytics 4", "Adobe Creative Suite", "ZoomInfo", "Slack", "Monday.com"],
    6: ["Salesforce Enterprise", "Marketo", "Outreach", "Google Analytics 4", "Adobe Creative Suite", "ZoomInfo", "Slack", "Asana", "Tableau"],
}

COMMON_RISKS = (
    Risk(
        risk="Content production delays affecting timeline",
        impact="medium",
        mitigation="Build content buffer and establish backup contractor relationships",
    ),
    Risk(
        risk="Limited team bandwidth for simultaneous initiatives",
        impact="high",
        mitigation="Prioritize high-impact activities and phase implementation",
    ),
    Risk(
        risk="Technology integration challenges",
        impact="medium",
        mitigation="Allocate buffer time for setup and testing phases",
    ),
    Risk(
        risk="Market response lower than expected",
        impact="high",
        mitigation="Implement weekly performance reviews and pivot strategies",
    ),
    Risk(
        risk="Extended timeline execution challenges",
        impact="medium",
        mitigation="Quarterly milestone reviews and strategy adjustments",
    ),
)

CONSTRAINED_RISK = Risk(
    risk="Resource constraints limiting execution quality",
    impact="high",
    mitigation="Focus on highest-impact activities and consider external support",
)

# Business priority -> (letters it pulls towards, weight).
PRIORITY_WEIGHTS: dict[str, tuple[tuple[EpicLetter, ...], int]] = {
    "lead generation": ((EpicLetter.I, EpicLetter.P), 3),
    "customer acquisition": ((EpicLetter.E, EpicLetter.I), 3),
    "brand awareness": ((EpicLetter.I, EpicLetter.C), 2),
    "customer retention": ((EpicLetter.P, EpicLetter.C), 3),
    "market expansion": ((EpicLetter.E, EpicLetter.I), 2),
    "product adoption": ((EpicLetter.P,), 3),
    "sales enablement": ((EpicLetter.E, EpicLetter.I), 2),
    "partnership development": ((EpicLetter.E,), 2),
    "content marketing": ((EpicLetter.I,), 2),
    "community building": ((EpicLetter.C,), 1),
    "conversion optimization": ((EpicLetter.P, EpicLetter.I), 3),
    "competitive differentiation": ((EpicLetter.E, EpicLetter.P), 2),
}

# KPI key -> (metric, baseline, targets for the 30-day, 60-day, quarter and half-year horizons).
SUCCESS_METRICS: dict[str, tuple[str, float, tuple[float, float, float, float]]] = {
    "lead_generation": ("Monthly qualified leads", 100, (150, 200, 300, 500)),
    "customer_acquisition": ("New customers per month", 10, (15, 20, 30, 50)),
    "conversion_rate": ("Lead to customer conversion %", 2.1, (2.5, 3.0, 4.0, 6.0)),
    "brand_awareness": ("Brand mention volume", 1000, (1500, 2500, 5000, 10000)),
}
DEFAULT_METRIC_KEY = "overall_growth"
DEFAULT_SUCCESS_METRIC = ("Overall GTM performance index", 100, (120, 150, 200, 300))


# ─── Capacity ────────────────────────────────────────────────────────────────


def budget_points(monthly_budget: Optional[int]) -> int:
    """1-6 from the annualized budget; unknown budgets count as 3."""
    if monthly_budget is None:
        return DEFAULT_POINTS
    annual = monthly_budget * 12
    if annual < 25_000:
        return 1
    if annual < 50_000:
        return 2
    if annual < 100_000:
        return 3
    if annual < 250_000:
        return 4
    if annual < 500_000:
        return 5
    return 6


def team_points(team_size: Optional[int]) -> int:
    """1-5 from headcount; unknown team sizes count as 3."""
    if team_size is None:
        return DEFAULT_POINTS
    if team_size <= 2:
        return 1
    if team_size <= 5:
        return 2
    if team_size <= 10:
        return 3
    if team_size <= 20:
        return 4
    return 5


def capacity_tier(context: BusinessContext) -> CapacityTier:
    total = budget_points(context.monthly_budget) + team_points(context.team_size)
    if total <= 3:
        return CapacityTier.CONSTRAINED
    if total <= 6:
        return CapacityTier.MODERATE
    if total <= 9:
        return CapacityTier.STRONG
    return CapacityTier.HIGH


# ─── Task annotation ─────────────────────────────────────────────────────────


def suggest_owner(task: str, capacity: CapacityTier) -> str:
    lowered = task.lower()
    for keyword, owner in OWNER_KEYWORDS:
        if keyword in lowered:
            return CONSTRAINED_OWNER if capacity == CapacityTier.CONSTRAINED else owner
    return DEFAULT_OWNER


def suggest_metric(task: str) -> str:
    lowered = task.lower()
    for keyword, metric in METRIC_KEYWORDS:
        if keyword in lowered:
            return metric
    return DEFAULT_METRIC


def deadline_day(phase_days: int, capacity: CapacityTier) -> int:
    """Due day within a phase: 80% of its length scaled by capacity, kept inside [7, phase_days]."""
    base = (phase_days * DEADLINE_SHARE + 50) // 100
    adjusted = (base * CAPACITY_MULTIPLIERS[capacity] + 50) // 100
    return min(phase_days, max(MIN_DEADLINE_DAY, adjusted))


def _annotate(task: str, phase_days: int, capacity: CapacityTier) -> RoadmapTask:
    return RoadmapTask(
        task=task,
        owner_role=suggest_owner(task, capacity),
        deadline_label=f"Day {deadline_day(phase_days, capacity)}",
        success_metric=suggest_metric(task),
    )


# ─── Roadmap ─────────────────────────────────────────────────────────────────


def build_roadmap(focus: FocusClassification, context: BusinessContext) -> Roadmap:
    """Blend the primary and secondary templates into a four-phase roadmap.

    Constrained teams get two primary tasks per phase, everyone else four;
    the secondary focus always adds its first task for the phase.
    """
    capacity = capacity_tier(context)
    primary_count = 2 if capacity == CapacityTier.CONSTRAINED else 4

    phases = {}
    for phase, days in PHASES.items():
        tasks = list(TEMPLATES[focus.primary][phase][:primary_count])
        tasks.append(TEMPLATES[focus.secondary][phase][0])
        phases[phase] = [_annotate(task, days, capacity) for task in tasks]

    return Roadmap(capacity=capacity, **phases)


def phases_for_timeframe(timeframe: str) -> list[str]:
    """Phases covered by a timeframe such as '30-day', '60 days', 'first quarter' or '180-day'."""
    lowered = (timeframe or "").lower()
    match = re.search(r"\d+", lowered)
    if match:
        days = int(match.group())
    elif "first quarter" in lowered:
        days = 90
    else:
        days = 180
    names = list(PHASES)
    covered = [name for name in names if PHASES[name] <= days]
    return covered or names[:1]


def identify_risks(capacity: CapacityTier) -> list[Risk]:
    risks = list(COMMON_RISKS)
    if capacity == CapacityTier.CONSTRAINED:
        risks.append(CONSTRAINED_RISK)
    return risks


def plan_resources(context: BusinessContext) -> ResourcePlan:
    return ResourcePlan(
        budget_allocation=dict(BUDGET_ALLOCATION),
        team_requirements=list(TEAM_REQUIREMENTS[team_points(context.team_size)]),
        technology_stack=list(TECHNOLOGY_STACKS[budget_points(context.monthly_budget)]),
    )


# ─── Priorities ──────────────────────────────────────────────────────────────


def parse_priorities(value: Any) -> list[str]:
    """Priorities from a list or a comma-separated string, lowercased and de-duplicated.

    ``"Lead_Generation, customer-acquisition"`` gives
    ``["lead generation", "customer acquisition"]``.
    """
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, Sequence):
        items = [item for item in value if isinstance(item, str)]
    else:
        return []
    priorities = []
    for item in items:
        name = " ".join(re.split(r"[\s_-]+", item.strip().lower())).strip()
        if name and name not in priorities:
            priorities.append(name)
    return priorities


def priority_weights(priorities: Sequence[str]) -> dict[EpicLetter, int]:
    """Summed weight per letter. Unknown priorities contribute nothing."""
    weights = {letter: 0 for letter in TIE_BREAK_ORDER}
    for priority in priorities:
        letters, weight = PRIORITY_WEIGHTS.get(priority, ((), 0))
        for letter in letters:
            weights[letter] += weight
    return weights


def focus_from_priorities(
    priorities: Sequence[str],
    primary: Optional[EpicLetter] = None,
) -> tuple[Optional[EpicLetter], Optional[EpicLetter]]:
    """Primary and secondary letters pulled by the priorities.

    Only letters with a positive weight are candidates; ties follow the usual
    P, E, I, C order. A given ``primary`` is kept and the secondary is the
    best other candidate. Either side is None when the priorities do not
    decide it.
    """
    weights = priority_weights(priorities)
    ranked = [
        letter
        for letter in sorted(TIE_BREAK_ORDER, key=lambda item: (-weights[item], TIE_BREAK_ORDER.index(item)))
        if weights[letter] > 0
    ]
    if primary is None and ranked:
        primary = ranked[0]
    secondary = next((letter for letter in ranked if letter != primary), None)
    return primary, secondary


# ─── Success metrics ─────────────────────────────────────────────────────────


def _horizon(timeframe: str) -> int:
    """Index of the last phase a timeframe covers (0 for 30 days ... 3 for 180 days)."""
    return list(PHASES).index(phases_for_timeframe(timeframe)[-1])


def success_metrics(priorities: Sequence[str], timeframe: str = "180-day") -> dict[str, SuccessMetric]:
    """KPI block for the priorities, with targets for the timeframe.

    Priorities without a KPI of their own are skipped; when none has one the
    block holds the overall growth index.
    """
    horizon = _horizon(timeframe)
    metrics: dict[str, SuccessMetric] = {}
    for priority in priorities:
        key = priority.replace(" ", "_")
        if key in SUCCESS_METRICS and key not in metrics:
            metric, baseline, targets = SUCCESS_METRICS[key]
            metrics[key] = SuccessMetric(metric=metric, baseline=baseline, target=targets[horizon])
    if not metrics:
        metric, baseline, targets = DEFAULT_SUCCESS_METRIC
        metrics[DEFAULT_METRIC_KEY] = SuccessMetric(metric=metric, baseline=baseline, target=targets[horizon])
    return metrics
