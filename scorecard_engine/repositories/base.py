"""
Base repository with the lookups shared by the domain repositories.

Repositories never commit: they flush so that constraint violations
surface inside the caller's transaction, and the service owning the
session decides when to commit or roll back.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scorecard_engine.core.exceptions import handle_database_exception
from scorecard_engine.core.logging import get_logger
from scorecard_engine.db.base import Base

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one SQLAlchemy model.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def _raise_database_error(self, exc: SQLAlchemyError, operation: str):
        logger.error(
            f"{self.model.__name__} {operation} failed",
            extra={"table": self.table_name, "error_type": type(exc).__name__},
            exc_info=True,
        )
        raise handle_database_exception(exc, operation=operation, table=self.table_name) from exc

    # ==================== Read Operations ====================

    def find_by_id(self, id: Any) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None
        """
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self._raise_database_error(e, "find_by_id")

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        order_by: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Find entities matching criteria.

        Args:
            criteria: Filter criteria as key-value pairs (lists match with IN)
            order_by: List of fields to order by (prefix with - for desc)
            limit: Maximum number of records

        Returns:
            List of matching entities
        """
        try:
            query = self.db.query(self.model)

            for key, value in criteria.items():
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple, set)):
                    query = query.filter(column.in_(list(value)))
                else:
                    query = query.filter(column == value)

            for field in order_by or []:
                if field.startswith('-'):
                    query = query.order_by(getattr(self.model, field[1:]).desc())
                else:
                    query = query.order_by(getattr(self.model, field))

            if limit is not None:
                query = query.limit(limit)

            return query.all()

        except SQLAlchemyError as e:
            self._raise_database_error(e, "find_by_criteria")

    def find_one_by_criteria(self, criteria: Dict[str, Any]) -> Optional[ModelType]:
        results = self.find_by_criteria(criteria, limit=1)
        return results[0] if results else None

    def exists(self, id: Any) -> bool:
        return self.find_by_id(id) is not None

    # ==================== Write Operations ====================

    def delete_entity(self, entity: ModelType) -> None:
        """Delete an entity and flush."""
        try:
            self.db.delete(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            self._raise_database_error(e, "delete")
