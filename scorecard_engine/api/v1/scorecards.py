"""
Scorecard endpoints.

Handlers stay thin: validation, authorization, caching and persistence all
happen in ScorecardService, and its exceptions are rendered by the
application-level handlers.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from scorecard_engine.dependencies import get_current_principal, get_scorecard_service
from scorecard_engine.schemas.scorecard import (
    AgentMetricResponse,
    MetricCatalogue,
    PerformanceSummary,
    ScorecardDeleteResponse,
    ScorecardResponse,
    ScorecardUpsertRequest,
)
from scorecard_engine.services.scorecard.access import Principal
from scorecard_engine.services.scorecard.service import ScorecardService

router = APIRouter()


@router.get("/agents/{agent_id}/scorecard", response_model=ScorecardResponse)
def get_scorecard(
    agent_id: str,
    year: int = Query(..., description="Calendar year"),
    month: Optional[int] = Query(None, description="Month (1-12); omit for the yearly view"),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: ScorecardService = Depends(get_scorecard_service),
):
    return service.get_scorecard(principal, agent_id, year, month)


@router.put("/agents/{agent_id}/scorecard", response_model=AgentMetricResponse)
def upsert_scorecard(
    agent_id: str,
    payload: ScorecardUpsertRequest,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: ScorecardService = Depends(get_scorecard_service),
):
    return service.upsert_scorecard(principal, agent_id, payload)


@router.delete("/agents/{agent_id}/scorecard", response_model=ScorecardDeleteResponse)
def delete_scorecard(
    agent_id: str,
    year: int = Query(...),
    month: int = Query(...),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: ScorecardService = Depends(get_scorecard_service),
):
    return service.delete_scorecard(principal, agent_id, month, year)


@router.get("/agents/{agent_id}/performance", response_model=PerformanceSummary)
def get_performance_summary(
    agent_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: ScorecardService = Depends(get_scorecard_service),
):
    return service.get_performance_summary(principal, agent_id)


@router.get("/scorecards/metrics", response_model=MetricCatalogue)
def get_metric_catalogue():
    return ScorecardService.get_metric_catalogue()
