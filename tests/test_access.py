"""Tests for the scorecard authorization rules."""

import pytest

from scorecard_engine.core.exceptions import AuthenticationError, AuthorizationError
from scorecard_engine.models.enums import UserRole
from scorecard_engine.services.scorecard.access import (
    AccessAction,
    AccessControlResolver,
    Principal,
    can_delete,
    can_modify,
    can_view,
)
from tests.helpers import FakeSupervision

AGENT = Principal("a1", UserRole.AGENT)
LEADER = Principal("t1", UserRole.TEAM_LEADER)
MANAGER = Principal("m1", UserRole.MANAGER)
ADMIN = Principal("admin", UserRole.ADMIN)


@pytest.fixture
def lookup():
    return FakeSupervision(
        agents={"a1", "a2", "a3", "t1", "m1"},
        supervised={"t1": ["a1", "a2"]},
    )


def test_agent_sees_only_self(lookup):
    assert can_view(AGENT, "a1", lookup) is True
    assert can_view(AGENT, "a2", lookup) is False


def test_agent_never_modifies_or_deletes(lookup):
    assert can_modify(AGENT, "a1", lookup) is False
    assert can_delete(AGENT, "a1", lookup) is False


def test_team_leader_and_supervised_agent(lookup):
    assert can_view(LEADER, "a1", lookup) is True
    assert can_modify(LEADER, "a1", lookup) is True
    assert can_delete(LEADER, "a1", lookup) is False


def test_team_leader_and_unsupervised_agent(lookup):
    assert can_view(LEADER, "a3", lookup) is False
    assert can_modify(LEADER, "a3", lookup) is False


def test_team_leader_views_but_does_not_modify_own_scorecard(lookup):
    assert can_view(LEADER, "t1", lookup) is True
    assert can_modify(LEADER, "t1", lookup) is False


@pytest.mark.parametrize("principal", [MANAGER, ADMIN])
@pytest.mark.parametrize("target", ["a1", "a3", "t1"])
def test_manager_and_admin_have_full_access(lookup, principal, target):
    assert can_view(principal, target, lookup) is True
    assert can_modify(principal, target, lookup) is True
    assert can_delete(principal, target, lookup) is True


@pytest.mark.parametrize("rule", [can_view, can_modify, can_delete])
def test_unknown_target_is_denied(lookup, rule):
    assert rule(MANAGER, "ghost", lookup) is False


def test_lookup_failure_denies_instead_of_raising():
    resolver = AccessControlResolver(FakeSupervision(agents={"a1"}, fail=True))

    decision = resolver.decide(MANAGER, "a1", AccessAction.VIEW)

    assert decision.allowed is False
    assert decision.reason == "lookup_failed"


def test_require_without_principal_is_unauthenticated(lookup):
    with pytest.raises(AuthenticationError):
        AccessControlResolver(lookup).require(None, "a1", AccessAction.VIEW)


def test_missing_and_invisible_targets_are_indistinguishable(lookup):
    resolver = AccessControlResolver(lookup)

    with pytest.raises(AuthorizationError) as invisible:
        resolver.require(AGENT, "a2", AccessAction.VIEW)
    with pytest.raises(AuthorizationError) as missing:
        resolver.require(AGENT, "ghost", AccessAction.VIEW)

    assert invisible.value.to_dict() == missing.value.to_dict()
    assert invisible.value.status_code == 403


def test_require_passes_for_allowed_action(lookup):
    AccessControlResolver(lookup).require(LEADER, "a2", AccessAction.MODIFY)


def test_decisions_are_not_cached(lookup):
    resolver = AccessControlResolver(lookup)
    assert resolver.decide(LEADER, "a3", AccessAction.VIEW).allowed is False

    lookup.supervised["t1"].append("a3")

    assert resolver.decide(LEADER, "a3", AccessAction.VIEW).allowed is True
