"""Shared test doubles and payload builders."""

from scorecard_engine.services.cache.backends import MemoryCacheBackend


class SpyCacheBackend(MemoryCacheBackend):
    """In-memory backend that records every call and can be told to fail."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = []
        self.fail_on = set()

    def _record(self, op, *args):
        self.calls.append((op,) + args)
        if op in self.fail_on:
            raise ConnectionError(f"cache {op} unavailable")

    def get(self, key):
        self._record("get", key)
        return super().get(key)

    def set(self, key, value, ex=None):
        self._record("set", key)
        return super().set(key, value, ex=ex)

    def delete(self, *keys):
        self._record("delete", *keys)
        return super().delete(*keys)

    def delete_prefix(self, prefix):
        self._record("delete_prefix", prefix)
        return super().delete_prefix(prefix)

    def ops(self, name):
        return [call for call in self.calls if call[0] == name]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeSupervision:
    """Dict-backed supervision lookup."""

    def __init__(self, agents, supervised=None, fail=False):
        self.agents = set(agents)
        self.supervised = supervised or {}
        self.fail = fail

    def agent_exists(self, agent_id):
        if self.fail:
            raise RuntimeError("directory unavailable")
        return agent_id in self.agents

    def get_supervised_agent_ids(self, team_leader_id):
        if self.fail:
            raise RuntimeError("directory unavailable")
        return self.supervised.get(team_leader_id, [])


def raw_payload(month, year, pct, **extra):
    """Upsert body whose eight raw ratios all equal ``pct`` percent."""
    counters = {
        "scheduled_hours": 100, "actual_hours": pct,
        "scheduled_days": 100, "days_present": pct,
        "total_shifts": 100, "on_time_arrivals": pct,
        "total_breaks": 100, "breaks_within_limit": pct,
        "tasks_assigned": 100, "tasks_completed": pct,
        "expected_output": 100, "actual_output": pct,
        "total_tasks": 100, "error_free_tasks": pct,
        "standard_time": pct, "actual_time_spent": 100,
    }
    body = {"month": month, "year": year, "raw_data": counters}
    body.update(extra)
    return body


def legacy_payload(month, year, rating, **extra):
    metrics = {
        field: rating
        for field in (
            "service", "productivity", "quality", "assiduity",
            "performance", "adherence", "lateness", "break_exceeds",
        )
    }
    body = {"month": month, "year": year, "legacy_metrics": metrics}
    body.update(extra)
    return body
