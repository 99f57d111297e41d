# scorecard_engine/dependencies.py
from __future__ import annotations

from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from scorecard_engine.config import settings
from scorecard_engine.core.logging import get_logger
from scorecard_engine.db.session import get_db
from scorecard_engine.models.enums import UserRole
from scorecard_engine.services.cache.backends import build_cache_backend
from scorecard_engine.services.scorecard.access import Principal
from scorecard_engine.services.scorecard.cache import ScorecardCache
from scorecard_engine.services.scorecard.service import ScorecardService

logger = get_logger(__name__)

# auto_error=False: a missing token reaches the service as "no principal"
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------------ #
# Current principal
# ------------------------------------------------------------------ #
def decode_principal(token: str) -> Optional[Principal]:
    """
    Decode a bearer JWT into a Principal.

    Returns None when the token is invalid, expired or lacks the
    ``sub``/``user_id`` and ``role`` claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.PyJWTError as exc:
        logger.warning(f"Rejected bearer token: {type(exc).__name__}")
        return None

    user_id = payload.get("user_id") or payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        logger.warning("Rejected bearer token: missing claims")
        return None

    try:
        return Principal(user_id=str(user_id), role=UserRole(str(role).upper()))
    except ValueError:
        logger.warning("Rejected bearer token: unknown role")
        return None


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    if credentials is None:
        return None
    return decode_principal(credentials.credentials)


# ------------------------------------------------------------------ #
# Service factories
# ------------------------------------------------------------------ #
@lru_cache()
def get_scorecard_cache() -> ScorecardCache:
    """Process-wide scorecard cache over the configured backend."""
    return ScorecardCache(
        build_cache_backend(settings),
        namespace=settings.SCORECARD_CACHE_NAMESPACE,
        default_ttl=settings.SCORECARD_CACHE_TTL_SECONDS,
    )


def get_scorecard_service(
    db: Session = Depends(get_db),
    cache: ScorecardCache = Depends(get_scorecard_cache),
) -> ScorecardService:
    return ScorecardService(
        db,
        cache,
        history_limit=settings.PERFORMANCE_HISTORY_LIMIT,
    )
