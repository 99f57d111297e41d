# --- File: scorecard_engine/schemas/scorecard.py ---
"""
Scorecard request and response schemas.

Scorecard input is a tagged union on ``kind``: ``raw`` carries the
operational counters of the percentage scheme, ``legacy`` carries eight
1-5 ratings. The upsert request accepts exactly one of them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field, model_serializer, model_validator

from scorecard_engine.models.enums import UserRole
from scorecard_engine.schemas.common.base import BaseRequestSchema, BaseSchema

__all__ = [
    "RawScorecardInput",
    "LegacyScorecardInput",
    "ScorecardInput",
    "ScorecardUpsertRequest",
    "AgentSummary",
    "AgentMetricResponse",
    "ScorecardResponse",
    "ScorecardDeleteResponse",
    "HistoricalScore",
    "PerformanceSummary",
    "MetricCatalogueEntry",
    "MetricCatalogue",
]

MIN_YEAR = 1900
MAX_YEAR = 2100

LegacyRating = Optional[Union[float, str]]


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class RawScorecardInput(BaseRequestSchema):
    """Operational counters for the percentage scheme (all optional)."""

    kind: Literal["raw"] = "raw"

    scheduled_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    scheduled_days: Optional[float] = None
    days_present: Optional[float] = None
    total_shifts: Optional[float] = None
    on_time_arrivals: Optional[float] = None
    total_breaks: Optional[float] = None
    breaks_within_limit: Optional[float] = None
    tasks_assigned: Optional[float] = None
    tasks_completed: Optional[float] = None
    expected_output: Optional[float] = None
    actual_output: Optional[float] = None
    total_tasks: Optional[float] = None
    error_free_tasks: Optional[float] = None
    standard_time: Optional[float] = None
    actual_time_spent: Optional[float] = None


class LegacyScorecardInput(BaseRequestSchema):
    """
    Eight 1-5 ratings.

    Values are not range-checked here: out-of-range or unreadable ratings
    are clamped (or defaulted to 1) when the scorecard is computed.
    """

    kind: Literal["legacy"] = "legacy"

    service: LegacyRating = None
    productivity: LegacyRating = None
    quality: LegacyRating = None
    assiduity: LegacyRating = None
    performance: LegacyRating = None
    adherence: LegacyRating = None
    lateness: LegacyRating = None
    break_exceeds: LegacyRating = None


ScorecardInput = Annotated[
    Union[RawScorecardInput, LegacyScorecardInput],
    Field(discriminator="kind"),
]


class ScorecardUpsertRequest(BaseRequestSchema):
    """Create or replace the scorecard of one agent for one month."""

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)
    raw_data: Optional[RawScorecardInput] = None
    legacy_metrics: Optional[LegacyScorecardInput] = None
    weights: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Per-metric weight overrides; missing metrics keep their default",
    )
    notes: Optional[str] = Field(default=None, max_length=5000)

    @model_validator(mode="after")
    def _exactly_one_scheme(self) -> "ScorecardUpsertRequest":
        if (self.raw_data is None) == (self.legacy_metrics is None):
            raise ValueError("Exactly one of raw_data or legacy_metrics must be supplied")
        return self

    @property
    def scorecard_input(self) -> Union[RawScorecardInput, LegacyScorecardInput]:
        return self.raw_data if self.raw_data is not None else self.legacy_metrics


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

class AgentSummary(BaseSchema):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole
    team_leader_id: Optional[str] = None


class AgentMetricResponse(BaseSchema):
    """Persisted scorecard record."""

    id: str
    agent_id: str
    month: int
    year: int
    scheme: str

    service: Optional[int] = None
    productivity: Optional[int] = None
    quality: Optional[int] = None
    assiduity: Optional[int] = None
    performance: Optional[int] = None
    adherence: Optional[int] = None
    lateness: Optional[int] = None
    break_exceeds: Optional[int] = None

    service_weight: float
    productivity_weight: float
    quality_weight: float
    assiduity_weight: float
    performance_weight: float
    adherence_weight: float
    lateness_weight: float
    break_exceeds_weight: float

    schedule_adherence: Optional[float] = None
    attendance_rate: Optional[float] = None
    punctuality_score: Optional[float] = None
    break_compliance: Optional[float] = None
    task_completion_rate: Optional[float] = None
    productivity_index: Optional[float] = None
    quality_score: Optional[float] = None
    efficiency_rate: Optional[float] = None

    schedule_adherence_weight: float
    attendance_rate_weight: float
    punctuality_score_weight: float
    break_compliance_weight: float
    task_completion_rate_weight: float
    productivity_index_weight: float
    quality_score_weight: float
    efficiency_rate_weight: float

    scheduled_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    scheduled_days: Optional[float] = None
    days_present: Optional[float] = None
    total_shifts: Optional[float] = None
    on_time_arrivals: Optional[float] = None
    total_breaks: Optional[float] = None
    breaks_within_limit: Optional[float] = None
    tasks_assigned: Optional[float] = None
    tasks_completed: Optional[float] = None
    expected_output: Optional[float] = None
    actual_output: Optional[float] = None
    total_tasks: Optional[float] = None
    error_free_tasks: Optional[float] = None
    standard_time: Optional[float] = None
    actual_time_spent: Optional[float] = None

    total_score: float
    percentage: float
    notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ScorecardResponse(BaseSchema):
    """
    Scorecard view for one agent and year, optionally narrowed to a month.

    ``trends`` and ``yearly_average`` are left out of the serialized payload
    when they do not apply, so a missing previous period never reads as a
    zero change.
    """

    agent: AgentSummary
    year: int
    month: Optional[int] = None
    metrics: List[AgentMetricResponse] = Field(default_factory=list)
    trends: Optional[Dict[str, float]] = None
    yearly_average: Optional[Dict[str, float]] = None

    @model_serializer(mode="wrap")
    def _drop_absent_aggregates(self, handler):
        data = handler(self)
        for key in ("trends", "yearly_average"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class ScorecardDeleteResponse(BaseSchema):
    deleted: bool = True
    agent_id: str
    month: int
    year: int


class HistoricalScore(BaseSchema):
    year: int
    month: int
    score: float
    rating: float = Field(..., description="Score on the 1-5 coaching scale")


class PerformanceSummary(BaseSchema):
    """Recent performance of an agent, newest period first."""

    agent_id: str
    overall_score: float = 0.0
    average_score: float = 0.0
    improvement: float = 0.0
    period_count: int = 0
    historical_scores: List[HistoricalScore] = Field(default_factory=list)


class MetricCatalogueEntry(BaseSchema):
    key: str
    label: str
    description: str
    category: str
    default_weight: float
    impact: str


class MetricCatalogue(BaseSchema):
    metrics: List[MetricCatalogueEntry]
    categories: Dict[str, List[str]]
