"""
AgentMetric model: one scorecard record per agent and calendar month.
"""
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from scorecard_engine.db.base import Base
from scorecard_engine.models.enums import MetricScheme
from scorecard_engine.models.mixins import TimestampMixin


class AgentMetric(Base, TimestampMixin):
    """
    Persisted scorecard.

    ``(agent_id, month, year)`` is the natural key; writes are upserts on it.
    Only the sub-metrics of the record's ``scheme`` are populated, the
    other scheme's columns stay NULL. ``total_score`` and ``percentage``
    are computed once at write time.
    """
    __tablename__ = "agent_metrics"
    __table_args__ = (
        UniqueConstraint("agent_id", "month", "year", name="uq_agent_metrics_agent_period"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_agent_metrics_month"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    agent_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False, index=True)
    scheme = Column(String(10), nullable=False, default=MetricScheme.RAW.value)

    # Legacy sub-metrics (1-5)
    service = Column(Integer, nullable=True)
    productivity = Column(Integer, nullable=True)
    quality = Column(Integer, nullable=True)
    assiduity = Column(Integer, nullable=True)
    performance = Column(Integer, nullable=True)
    adherence = Column(Integer, nullable=True)
    lateness = Column(Integer, nullable=True)
    break_exceeds = Column(Integer, nullable=True)

    service_weight = Column(Float, nullable=False, default=1.0)
    productivity_weight = Column(Float, nullable=False, default=1.0)
    quality_weight = Column(Float, nullable=False, default=1.0)
    assiduity_weight = Column(Float, nullable=False, default=1.0)
    performance_weight = Column(Float, nullable=False, default=1.0)
    adherence_weight = Column(Float, nullable=False, default=1.0)
    lateness_weight = Column(Float, nullable=False, default=1.0)
    break_exceeds_weight = Column(Float, nullable=False, default=1.0)

    # Raw-derived sub-metrics (0-100)
    schedule_adherence = Column(Float, nullable=True)
    attendance_rate = Column(Float, nullable=True)
    punctuality_score = Column(Float, nullable=True)
    break_compliance = Column(Float, nullable=True)
    task_completion_rate = Column(Float, nullable=True)
    productivity_index = Column(Float, nullable=True)
    quality_score = Column(Float, nullable=True)
    efficiency_rate = Column(Float, nullable=True)

    schedule_adherence_weight = Column(Float, nullable=False, default=1.0)
    attendance_rate_weight = Column(Float, nullable=False, default=0.5)
    punctuality_score_weight = Column(Float, nullable=False, default=0.5)
    break_compliance_weight = Column(Float, nullable=False, default=0.5)
    task_completion_rate_weight = Column(Float, nullable=False, default=1.5)
    productivity_index_weight = Column(Float, nullable=False, default=1.5)
    quality_score_weight = Column(Float, nullable=False, default=1.5)
    efficiency_rate_weight = Column(Float, nullable=False, default=1.0)

    # Raw counters backing the derived sub-metrics
    scheduled_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=True)
    scheduled_days = Column(Float, nullable=True)
    days_present = Column(Float, nullable=True)
    total_shifts = Column(Float, nullable=True)
    on_time_arrivals = Column(Float, nullable=True)
    total_breaks = Column(Float, nullable=True)
    breaks_within_limit = Column(Float, nullable=True)
    tasks_assigned = Column(Float, nullable=True)
    tasks_completed = Column(Float, nullable=True)
    expected_output = Column(Float, nullable=True)
    actual_output = Column(Float, nullable=True)
    total_tasks = Column(Float, nullable=True)
    error_free_tasks = Column(Float, nullable=True)
    standard_time = Column(Float, nullable=True)
    actual_time_spent = Column(Float, nullable=True)

    total_score = Column(Float, nullable=False, default=0.0)
    percentage = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=True)

    agent = relationship("User", back_populates="metrics")

    def __repr__(self) -> str:
        return (
            f"<AgentMetric(agent_id={self.agent_id}, "
            f"period={self.year}-{self.month:02d}, percentage={self.percentage})>"
        )
