"""Database base class and session helpers."""

from scorecard_engine.db.base import Base

__all__ = ["Base"]
