"""Pytest configuration and fixtures for scorecard engine tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scorecard_engine.db.base import Base, import_models
from scorecard_engine.db.session import enable_sqlite_savepoints
from scorecard_engine.models import User, UserRole
from scorecard_engine.services.scorecard.access import Principal
from scorecard_engine.services.scorecard.cache import ScorecardCache
from scorecard_engine.services.scorecard.service import ScorecardService
from tests.helpers import SpyCacheBackend


@pytest.fixture
def engine():
    engine = enable_sqlite_savepoints(
        create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def org(db):
    """
    Two-level supervision tree:

        m1 (MANAGER) -> t1 (TEAM_LEADER) -> a1, a2
                        t2 (TEAM_LEADER) -> a3
        admin (ADMIN)
    """
    users = [
        User(id="m1", role=UserRole.MANAGER, full_name="Maya Manager", email="m1@example.com"),
        User(id="admin", role=UserRole.ADMIN, full_name="Ada Admin", email="admin@example.com"),
        User(id="t1", role=UserRole.TEAM_LEADER, managed_by="m1", email="t1@example.com"),
        User(id="t2", role=UserRole.TEAM_LEADER, managed_by="m1", email="t2@example.com"),
        User(id="a1", role=UserRole.AGENT, team_leader_id="t1", full_name="Alex Agent", email="a1@example.com"),
        User(id="a2", role=UserRole.AGENT, team_leader_id="t1", email="a2@example.com"),
        User(id="a3", role=UserRole.AGENT, team_leader_id="t2", email="a3@example.com"),
    ]
    by_id = {user.id: user for user in users}
    db.add_all(users)
    db.commit()
    # Ids are read before the commit; reading expired rows afterwards would
    # begin a transaction on the shared StaticPool connection
    return by_id


@pytest.fixture
def principals():
    return {
        "a1": Principal("a1", UserRole.AGENT),
        "a2": Principal("a2", UserRole.AGENT),
        "t1": Principal("t1", UserRole.TEAM_LEADER),
        "m1": Principal("m1", UserRole.MANAGER),
        "admin": Principal("admin", UserRole.ADMIN),
    }


@pytest.fixture
def cache_backend():
    return SpyCacheBackend()


@pytest.fixture
def cache(cache_backend):
    return ScorecardCache(cache_backend, namespace="test", default_ttl=60)


@pytest.fixture
def service(db, cache, org):
    return ScorecardService(db, cache, history_limit=6)
