"""Pydantic data models — the shared business objects.

The MCP tools, the HTTP routes, the CLI and the consultation store all use
these models as the common interface to the scoring engine.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EpicLetter(str, Enum):
    """The four EPIC go-to-market motions."""

    E = "E"
    P = "P"
    I = "I"
    C = "C"

    @property
    def display_name(self) -> str:
        return FOCUS_NAMES[self]


FOCUS_NAMES: dict[EpicLetter, str] = {
    EpicLetter.E: "Ecosystem & ABM-led Sales Motion",
    EpicLetter.P: "Product-Led Growth Acceleration",
    EpicLetter.I: "Inbound & Outbound Demand Generation",
    EpicLetter.C: "Community-Led Advocacy & Engagement",
}


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CapacityTier(str, Enum):
    """Execution capacity derived from budget and team size."""

    CONSTRAINED = "constrained"
    MODERATE = "moderate"
    STRONG = "strong"
    HIGH = "high"


class BusinessContext(BaseModel):
    """Normalized consultation input. Every field has a usable default."""

    model_config = ConfigDict(frozen=True)

    company_name: str = "Your Company"
    client_name: str = ""
    industry: str = "General"
    business_stage: str = "unspecified"
    challenge_text: str = ""
    company_description: str = ""
    team_size: Optional[int] = None
    monthly_budget: Optional[int] = Field(None, description="Whole currency units per month")
    website_url: str = ""
    linkedin_url: str = ""
    twitter_url: str = ""

    @property
    def match_text(self) -> str:
        """Lower-cased text that keyword matching runs against."""
        return f"{self.challenge_text} {self.company_description} {self.industry}".lower()


class EpicScores(BaseModel):
    """Four bounded EPIC scores."""

    E: int = Field(ge=0, le=100, description="Ecosystem & ABM")
    P: int = Field(ge=0, le=100, description="Product-led growth")
    I: int = Field(ge=0, le=100, description="Inbound & outbound demand")
    C: int = Field(ge=0, le=100, description="Community-led growth")

    def get(self, letter: EpicLetter) -> int:
        return getattr(self, EpicLetter(letter).value)

    @property
    def total(self) -> int:
        return self.E + self.P + self.I + self.C


class FocusClassification(BaseModel):
    primary: EpicLetter
    secondary: EpicLetter

    @model_validator(mode="after")
    def _distinct(self) -> FocusClassification:
        if self.primary == self.secondary:
            raise ValueError("primary and secondary focus must differ")
        return self


class Recommendation(BaseModel):
    text: str
    epic_component: EpicLetter
    priority: Priority


class RoadmapTask(BaseModel):
    task: str
    owner_role: str
    deadline_label: str = Field(description="e.g. 'Day 19'")
    success_metric: str


class Roadmap(BaseModel):
    """Four-phase action plan. Phases always hold 3-5 tasks."""

    capacity: CapacityTier
    days_30: list[RoadmapTask]
    days_60: list[RoadmapTask]
    first_quarter: list[RoadmapTask]
    second_quarter: list[RoadmapTask]


class Risk(BaseModel):
    risk: str
    impact: str
    mitigation: str


class ResourcePlan(BaseModel):
    budget_allocation: dict[str, str]
    team_requirements: list[str]
    technology_stack: list[str]


class SuccessMetric(BaseModel):
    """KPI with its starting value and the target for a timeframe."""

    metric: str
    baseline: float
    target: float


class FocusGap(BaseModel):
    letter: EpicLetter
    name: str
    score: int
    priority: Priority


class EpicAudit(BaseModel):
    """Maturity view of a set of EPIC scores."""

    overall_score: int = Field(ge=0, le=100)
    maturity_level: str = Field(description="Advanced / Developing / Basic / Foundational")
    focus_areas: list[EpicLetter]
    gaps: list[FocusGap] = Field(default_factory=list)
    next_steps: list[str]


class DigitalPresence(BaseModel):
    """Presence-based digital maturity. No content is fetched or analysed."""

    digital_maturity_score: int = Field(ge=0, le=100)
    maturity_level: str = Field(description="Advanced / Developing / Basic")
    epic_alignment: dict[str, int]
    recommendations: list[Recommendation] = Field(default_factory=list)


class ConsultationResult(BaseModel):
    """Complete, deterministic consultation output.

    Carries no ids or timestamps so that identical input always yields an
    identical result.
    """

    epic_scores: EpicScores
    primary_focus: EpicLetter
    secondary_focus: EpicLetter
    primary_focus_name: str
    secondary_focus_name: str
    insight: str
    recommendations: list[Recommendation]
    roadmap: Roadmap
    risks: list[Risk]
    resources: ResourcePlan
    digital_presence: Optional[DigitalPresence] = None


class StoredConsultation(BaseModel):
    """A consultation as persisted by the consultation store."""

    consultation_id: str
    business_key: str
    context: BusinessContext
    result: ConsultationResult
    created_at: datetime


class ProgressReport(BaseModel):
    """Comparison between two consultations of the same business."""

    timespan_days: int
    previous_scores: EpicScores
    current_scores: EpicScores
    epic_changes: dict[str, int]
    previous_focus: EpicLetter
    current_focus: EpicLetter
    focus_changed: bool
    overall_improvement: int = Field(description="Percent change of the summed EPIC scores")
    momentum: str = Field(description="accelerate / optimize / adjust / restructure")
    assessment: str
    next_steps: list[str]
