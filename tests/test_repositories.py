"""Tests for the metric and user repositories."""

from scorecard_engine.models import AgentMetric
from scorecard_engine.repositories import AgentMetricRepository, UserRepository


def _values(percentage, **extra):
    values = {"scheme": "raw", "total_score": percentage * 8, "percentage": percentage}
    values.update(extra)
    return values


def test_upsert_keeps_one_record_per_period(db, org):
    repo = AgentMetricRepository(db)

    first = repo.upsert("a1", 3, 2025, _values(60.0, notes="first"))
    db.commit()
    second = repo.upsert("a1", 3, 2025, _values(75.0, notes="second"))
    db.commit()

    assert first.id == second.id
    records = db.query(AgentMetric).filter_by(agent_id="a1").all()
    assert len(records) == 1
    assert records[0].percentage == 75.0
    assert records[0].notes == "second"


def test_upsert_recovers_from_concurrent_insert(db, org, monkeypatch):
    repo = AgentMetricRepository(db)
    repo.upsert("a1", 4, 2025, _values(50.0))
    db.commit()

    original = repo.find_by_natural_key
    calls = []

    def stale_then_fresh(agent_id, month, year):
        calls.append((agent_id, month, year))
        # First lookup misses, as if another writer inserted in between
        if len(calls) == 1:
            return None
        return original(agent_id, month, year)

    monkeypatch.setattr(repo, "find_by_natural_key", stale_then_fresh)

    record = repo.upsert("a1", 4, 2025, _values(90.0))
    db.commit()

    assert len(calls) == 2
    assert record.percentage == 90.0
    assert db.query(AgentMetric).filter_by(agent_id="a1", month=4, year=2025).count() == 1


def test_find_many_orders_newest_first(db, org):
    repo = AgentMetricRepository(db)
    for month, year in [(11, 2024), (2, 2025), (12, 2024), (1, 2025)]:
        repo.upsert("a1", month, year, _values(50.0))
    db.commit()

    periods = [(r.year, r.month) for r in repo.find_many("a1")]
    assert periods == [(2025, 2), (2025, 1), (2024, 12), (2024, 11)]

    assert [r.month for r in repo.find_many("a1", year=2024)] == [12, 11]
    assert [r.month for r in repo.find_many("a1", year=2025, month=1)] == [1]
    assert [(r.year, r.month) for r in repo.latest("a1", 2)] == [(2025, 2), (2025, 1)]


def test_find_many_is_scoped_to_the_agent(db, org):
    repo = AgentMetricRepository(db)
    repo.upsert("a1", 1, 2025, _values(50.0))
    repo.upsert("a2", 1, 2025, _values(70.0))
    db.commit()

    assert [r.agent_id for r in repo.find_many("a2")] == ["a2"]


def test_delete_by_natural_key(db, org):
    repo = AgentMetricRepository(db)
    repo.upsert("a1", 5, 2025, _values(50.0))
    db.commit()

    assert repo.delete_by_natural_key("a1", 5, 2025) is True
    db.commit()
    assert repo.find_by_natural_key("a1", 5, 2025) is None
    assert repo.delete_by_natural_key("a1", 5, 2025) is False


def test_user_supervision_lookups(db, org):
    users = UserRepository(db)

    assert users.agent_exists("a1") is True
    assert users.agent_exists("ghost") is False
    assert users.get_supervised_agent_ids("t1") == {"a1", "a2"}
    assert users.get_supervised_agent_ids("m1") == set()
