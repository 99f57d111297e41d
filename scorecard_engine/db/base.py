"""SQLAlchemy Base class for all models."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def import_models() -> None:
    """Import all models so they are registered on Base.metadata."""
    from scorecard_engine.models import agent_metric, user  # noqa: F401
