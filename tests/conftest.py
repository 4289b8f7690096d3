"""Shared fixtures for the scorecard test suite."""

import pytest

from app.services.engine import ScorecardEngine
from app.store.memory import InMemoryScorecardStore

OWNER = "owner-1"
OTHER_OWNER = "owner-2"
YEAR = 2024


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def other_owner() -> str:
    return OTHER_OWNER


@pytest.fixture
def store() -> InMemoryScorecardStore:
    return InMemoryScorecardStore()


@pytest.fixture
def engine(store) -> ScorecardEngine:
    return ScorecardEngine(store)


@pytest.fixture
def make_metric(engine):
    """Create a role (when needed) and a custom metric on it; returns the Metric."""

    async def _make(owner_id, name, metric_type="count", goal_value=10, is_inverted=False, role_name="Sales"):
        roles = (await engine.list_roles(owner_id)).data
        role = next((r for r in roles if r.name == role_name), None)
        if role is None:
            role = (await engine.create_role(owner_id, role_name)).data
        result = await engine.create_metric(
            owner_id,
            role.id,
            {"name": name, "metric_type": metric_type, "goal_value": goal_value, "is_inverted": is_inverted},
        )
        assert result.success, result.error
        return result.data

    return _make
