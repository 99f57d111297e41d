"""
User repository; also serves as the supervision-edge lookup for access control.
"""

from typing import Set

from sqlalchemy.orm import Session

from scorecard_engine.models.enums import UserRole
from scorecard_engine.models.user import User
from scorecard_engine.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, db: Session):
        super().__init__(User, db)

    def agent_exists(self, agent_id: str) -> bool:
        return self.exists(agent_id)

    def get_supervised_agent_ids(self, team_leader_id: str) -> Set[str]:
        """Ids of the agents whose team leader is ``team_leader_id``."""
        agents = self.find_by_criteria({"team_leader_id": team_leader_id, "role": UserRole.AGENT})
        return {agent.id for agent in agents}
