"""
Database models for the scorecard engine.
"""
from scorecard_engine.models.agent_metric import AgentMetric
from scorecard_engine.models.enums import MetricScheme, UserRole
from scorecard_engine.models.user import User

__all__ = ["AgentMetric", "MetricScheme", "User", "UserRole"]
