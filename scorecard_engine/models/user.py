"""
User model configuration.
"""
from uuid import uuid4

from sqlalchemy import Column, Enum, ForeignKey, String
from sqlalchemy.orm import relationship

from scorecard_engine.db.base import Base
from scorecard_engine.models.enums import UserRole
from scorecard_engine.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """
    Principal of the coaching application.

    Supervision edges form a two-level tree: an agent points at its team
    leader through ``team_leader_id`` and a team leader points at its
    manager through ``managed_by``.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.AGENT,
        index=True,
        comment="Primary user role for access control"
    )

    team_leader_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Team leader supervising this agent"
    )
    managed_by = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Manager supervising this team leader"
    )

    team_leader = relationship(
        "User",
        remote_side=[id],
        foreign_keys=[team_leader_id],
    )

    metrics = relationship(
        "AgentMetric",
        back_populates="agent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role})>"
