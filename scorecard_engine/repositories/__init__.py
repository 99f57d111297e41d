from scorecard_engine.repositories.agent_metric_repository import AgentMetricRepository
from scorecard_engine.repositories.base import BaseRepository
from scorecard_engine.repositories.user_repository import UserRepository

__all__ = ["AgentMetricRepository", "BaseRepository", "UserRepository"]
