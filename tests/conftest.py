"""
Shared fixtures for the capital planning tests.

Engines are exercised directly with in-memory inputs; repository functions
are monkeypatched so no database is needed. The solver is the real CBC
binary shipped with PuLP.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

import pandas as pd
import pytest

from capital_planning.optimization.heuristics import HeuristicSettings
from capital_planning.portfolio.engine import prepare_projects
from capital_planning.optimization.schemas import ComponentSnapshot, OptimizationConfig

from tests.factories import CURRENT_YEAR, PROJECT_ID, USER_ID, project_rows


@pytest.fixture
def heuristics() -> HeuristicSettings:
    return HeuristicSettings()


@pytest.fixture
def config() -> OptimizationConfig:
    return OptimizationConfig(project_id=PROJECT_ID)


@pytest.fixture
def poor_roof() -> ComponentSnapshot:
    """Poor component with an explicit replacement value."""
    return ComponentSnapshot(
        component_code="B3010",
        name="Roof Coverings",
        condition="poor",
        estimated_repair_cost=50_000,
        replacement_value=100_000,
        expected_useful_life=20,
        action_year=CURRENT_YEAR + 2,
    )


@pytest.fixture
def good_doors() -> ComponentSnapshot:
    """Good component without a replacement value (cost derived from repair)."""
    return ComponentSnapshot(
        component_code="C1020",
        name="Interior Doors",
        condition="good",
        estimated_repair_cost=5_000,
        replacement_value=None,
        expected_useful_life=30,
        action_year=CURRENT_YEAR + 2,
    )


@pytest.fixture
def projects_df() -> pd.DataFrame:
    return pd.DataFrame(project_rows())


@pytest.fixture
def projects(projects_df, heuristics):
    return prepare_projects(projects_df, heuristics)


class FakeScenarioStore:
    """In-memory stand-in for the scenarios repository module."""

    def __init__(self):
        self.headers: Dict[UUID, Dict[str, Any]] = {}
        self.strategies: Dict[UUID, List[Dict[str, Any]]] = {}
        self.cash_flows: Dict[UUID, List[Dict[str, Any]]] = {}

    def _owned(self, project_id, scenario_id, user_id) -> Optional[Dict[str, Any]]:
        row = self.headers.get(scenario_id)
        if row and row["project_id"] == project_id and row["user_id"] == user_id:
            return row
        return None

    def create_scenario(self, project_id, user_id, payload):
        now = datetime.now(timezone.utc)
        row = {"id": uuid4(), "project_id": project_id, "user_id": user_id, **payload,
               "created_at": now, "updated_at": now}
        self.headers[row["id"]] = row
        return dict(row)

    def list_scenarios(self, project_id, user_id):
        return [
            {k: r[k] for k in ("id", "name", "status", "optimization_goal", "created_at")}
            for r in self.headers.values()
            if r["project_id"] == project_id and r["user_id"] == user_id
        ]

    def get_scenario(self, project_id, scenario_id, user_id):
        row = self._owned(project_id, scenario_id, user_id)
        return dict(row) if row else None

    def update_scenario_status(self, project_id, scenario_id, user_id, status):
        row = self._owned(project_id, scenario_id, user_id)
        if not row:
            return None
        row.update(status=status, updated_at=datetime.now(timezone.utc))
        return dict(row)

    def save_run(self, project_id, scenario_id, user_id, results, strategies, cash_flows):
        row = self._owned(project_id, scenario_id, user_id)
        if not row:
            return None
        row.update(results, status="optimized", updated_at=datetime.now(timezone.utc))
        self.strategies[scenario_id] = list(strategies)
        self.cash_flows[scenario_id] = list(cash_flows)
        return dict(row)

    def get_scenario_strategies(self, scenario_id):
        return list(self.strategies.get(scenario_id, []))

    def get_cash_flow_projections(self, scenario_id):
        return list(self.cash_flows.get(scenario_id, []))

    def delete_scenario(self, project_id, scenario_id, user_id):
        if not self._owned(project_id, scenario_id, user_id):
            return False
        self.strategies.pop(scenario_id, None)
        self.cash_flows.pop(scenario_id, None)
        del self.headers[scenario_id]
        return True


@pytest.fixture
def scenario_store(monkeypatch) -> FakeScenarioStore:
    from capital_planning.scenarios import repository

    store = FakeScenarioStore()
    for name in (
        "create_scenario",
        "list_scenarios",
        "get_scenario",
        "update_scenario_status",
        "save_run",
        "get_scenario_strategies",
        "get_cash_flow_projections",
        "delete_scenario",
    ):
        monkeypatch.setattr(repository, name, getattr(store, name))
    return store


@pytest.fixture
def assessed_components(monkeypatch, poor_roof, good_doors):
    """Serve the two fixture components from the optimization repository."""
    from capital_planning.optimization import repository

    rows = [poor_roof.model_dump(), good_doors.model_dump()]
    by_code = {r["component_code"]: r for r in rows}

    monkeypatch.setattr(repository, "fetch_assessed_components", lambda project_id: list(rows))
    monkeypatch.setattr(
        repository,
        "fetch_component_snapshot",
        lambda project_id, component_code: by_code.get(component_code),
    )
    return rows


@pytest.fixture(autouse=True)
def project_ownership(monkeypatch):
    """Only USER_ID owns PROJECT_ID."""
    from capital_planning.optimization import repository

    monkeypatch.setattr(
        repository,
        "project_owned_by",
        lambda project_id, user_id: project_id == PROJECT_ID and user_id == USER_ID,
    )
