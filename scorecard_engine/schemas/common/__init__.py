from scorecard_engine.schemas.common.base import BaseRequestSchema, BaseSchema

__all__ = ["BaseRequestSchema", "BaseSchema"]
