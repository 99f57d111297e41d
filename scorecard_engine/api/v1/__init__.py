from scorecard_engine.api.v1.router import router

__all__ = ["router"]
