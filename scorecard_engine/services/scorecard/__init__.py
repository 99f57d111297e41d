from scorecard_engine.services.scorecard.access import (
    AccessAction,
    AccessControlResolver,
    Principal,
)
from scorecard_engine.services.scorecard.cache import ScorecardCache
from scorecard_engine.services.scorecard.service import ScorecardService

__all__ = [
    "AccessAction",
    "AccessControlResolver",
    "Principal",
    "ScorecardCache",
    "ScorecardService",
]
