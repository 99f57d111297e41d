"""
AgentMetric repository keyed on the (agent_id, month, year) natural key.
"""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from scorecard_engine.core.logging import get_logger
from scorecard_engine.models.agent_metric import AgentMetric
from scorecard_engine.repositories.base import BaseRepository

logger = get_logger(__name__)

NEWEST_FIRST = ["-year", "-month"]


class AgentMetricRepository(BaseRepository[AgentMetric]):
    """Keyed record store for scorecards."""

    def __init__(self, db: Session):
        super().__init__(AgentMetric, db)

    def find_many(
        self,
        agent_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> List[AgentMetric]:
        """
        Find an agent's records, newest period first.

        Args:
            agent_id: Agent whose records to load
            year: Restrict to one year
            month: Restrict to one month (with ``year``)
        """
        criteria: Dict[str, Any] = {"agent_id": agent_id}
        if year is not None:
            criteria["year"] = year
        if month is not None:
            criteria["month"] = month
        return self.find_by_criteria(criteria, order_by=NEWEST_FIRST)

    def find_by_natural_key(self, agent_id: str, month: int, year: int) -> Optional[AgentMetric]:
        return self.find_one_by_criteria({"agent_id": agent_id, "month": month, "year": year})

    def latest(self, agent_id: str, limit: int) -> List[AgentMetric]:
        """Most recent ``limit`` records of an agent, newest first."""
        return self.find_by_criteria({"agent_id": agent_id}, order_by=NEWEST_FIRST, limit=limit)

    def upsert(
        self,
        agent_id: str,
        month: int,
        year: int,
        values: Mapping[str, Any],
    ) -> AgentMetric:
        """
        Insert or replace the record for one natural key and flush.

        A concurrent insert of the same key loses the race on the unique
        constraint inside a savepoint; the row that won is then updated, so
        the last writer's values stand.
        """
        try:
            existing = self.find_by_natural_key(agent_id, month, year)
            if existing is not None:
                return self._apply(existing, values)

            entity = AgentMetric(agent_id=agent_id, month=month, year=year, **values)
            try:
                with self.db.begin_nested():
                    self.db.add(entity)
            except IntegrityError:
                logger.info(
                    "Concurrent scorecard insert detected, updating existing row",
                    extra={"agent_id": agent_id, "month": month, "year": year},
                )
                existing = self.find_by_natural_key(agent_id, month, year)
                if existing is None:
                    raise
                return self._apply(existing, values)

            return entity

        except SQLAlchemyError as e:
            self._raise_database_error(e, "upsert")

    def delete_by_natural_key(self, agent_id: str, month: int, year: int) -> bool:
        """
        Delete the record for one natural key.

        Returns:
            True if deleted, False if not found
        """
        entity = self.find_by_natural_key(agent_id, month, year)
        if entity is None:
            return False
        self.delete_entity(entity)
        logger.info(
            "Deleted scorecard",
            extra={"agent_id": agent_id, "month": month, "year": year},
        )
        return True

    def _apply(self, entity: AgentMetric, values: Mapping[str, Any]) -> AgentMetric:
        for key, value in values.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity
