# scorecard_engine/services/scorecard/access.py
"""
Scorecard access control.

Visibility follows the supervision tree:

    AGENT        view self
    TEAM_LEADER  view self and directly supervised agents, modify supervised agents
    MANAGER      view, modify and delete anyone
    ADMIN        view, modify and delete anyone

The rules are plain functions over a ``Principal``, a target agent id and a
``SupervisionLookup``, so they can be exercised without a request or a
database. Decisions are never cached. A target that does not exist, or a
lookup that fails, is denied with the same signal as an invisible target.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Collection, Dict, Optional, Protocol

from scorecard_engine.core.exceptions import AuthenticationError, AuthorizationError
from scorecard_engine.core.logging import get_logger
from scorecard_engine.models.enums import UserRole

logger = get_logger(__name__)

UNRESTRICTED_ROLES = frozenset({UserRole.MANAGER, UserRole.ADMIN})


@dataclass(frozen=True)
class Principal:
    """
    Authenticated caller.

    Attributes:
        user_id: Identifier of the calling user
        role: Caller's role
    """
    user_id: str
    role: UserRole

    def has_any_role(self, roles: Collection[UserRole]) -> bool:
        return self.role in roles


class SupervisionLookup(Protocol):
    """Read access to the supervision edges the rules depend on."""

    def agent_exists(self, agent_id: str) -> bool:
        ...

    def get_supervised_agent_ids(self, team_leader_id: str) -> Collection[str]:
        ...


class AccessAction(str, Enum):
    VIEW = "view"
    MODIFY = "modify"
    DELETE = "delete"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    action: AccessAction
    reason: str


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _supervises(principal: Principal, target_agent_id: str, lookup: SupervisionLookup) -> bool:
    return target_agent_id in set(lookup.get_supervised_agent_ids(principal.user_id))


def can_view(principal: Principal, target_agent_id: str, lookup: SupervisionLookup) -> bool:
    if not lookup.agent_exists(target_agent_id):
        return False
    if principal.has_any_role(UNRESTRICTED_ROLES):
        return True
    if target_agent_id == principal.user_id:
        return True
    if principal.role == UserRole.TEAM_LEADER:
        return _supervises(principal, target_agent_id, lookup)
    return False


def can_modify(principal: Principal, target_agent_id: str, lookup: SupervisionLookup) -> bool:
    """Team leaders may only modify agents they supervise, never their own scorecard."""
    if not lookup.agent_exists(target_agent_id):
        return False
    if principal.has_any_role(UNRESTRICTED_ROLES):
        return True
    if principal.role == UserRole.TEAM_LEADER:
        return _supervises(principal, target_agent_id, lookup)
    return False


def can_delete(principal: Principal, target_agent_id: str, lookup: SupervisionLookup) -> bool:
    if not lookup.agent_exists(target_agent_id):
        return False
    return principal.has_any_role(UNRESTRICTED_ROLES)


RULES: Dict[AccessAction, Callable[[Principal, str, SupervisionLookup], bool]] = {
    AccessAction.VIEW: can_view,
    AccessAction.MODIFY: can_modify,
    AccessAction.DELETE: can_delete,
}


class AccessControlResolver:
    """Evaluates the scorecard rules for each request against a supervision lookup."""

    def __init__(self, lookup: SupervisionLookup) -> None:
        self.lookup = lookup

    def decide(
        self,
        principal: Principal,
        target_agent_id: str,
        action: AccessAction,
    ) -> AccessDecision:
        """
        Evaluate one rule.

        Lookup failures are logged and turned into a denial.
        """
        try:
            allowed = RULES[action](principal, target_agent_id, self.lookup)
        except Exception as exc:
            logger.error(
                "Supervision lookup failed; denying access",
                extra={
                    "principal_id": principal.user_id,
                    "target_agent_id": target_agent_id,
                    "action": action.value,
                    "error_type": type(exc).__name__,
                },
            )
            return AccessDecision(False, action, "lookup_failed")

        return AccessDecision(allowed, action, "granted" if allowed else "denied")

    def require(
        self,
        principal: Optional[Principal],
        target_agent_id: str,
        action: AccessAction,
    ) -> None:
        """
        Raise unless ``principal`` may perform ``action`` on the target.

        Raises:
            AuthenticationError: No principal
            AuthorizationError: Denied, identical for missing and invisible targets
        """
        if principal is None:
            raise AuthenticationError()

        decision = self.decide(principal, target_agent_id, action)
        if decision.allowed:
            return

        logger.warning(
            "Scorecard access denied",
            extra={
                "principal_id": principal.user_id,
                "role": principal.role.value,
                "target_agent_id": target_agent_id,
                "action": action.value,
                "reason": decision.reason,
            },
        )
        raise AuthorizationError(
            f"You do not have permission to {action.value} this scorecard",
            required_permission=f"scorecard.{action.value}",
        )


__all__ = [
    "Principal",
    "SupervisionLookup",
    "AccessAction",
    "AccessDecision",
    "AccessControlResolver",
    "can_view",
    "can_modify",
    "can_delete",
]
