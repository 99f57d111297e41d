"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the scorecard engine
"""
from fastapi import APIRouter

from scorecard_engine.api.v1 import scorecards

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
        503: {"description": "Cache Unavailable"},
    }
)

router.include_router(scorecards.router, tags=["scorecards"])
