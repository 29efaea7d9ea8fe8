"""Service-level tests for the optimization scenario lifecycle."""

import pytest
from fastapi import HTTPException

from capital_planning.scenarios import service
from capital_planning.scenarios.schemas import ScenarioCreate
from tests.factories import CURRENT_YEAR, PROJECT_ID

USER = "user-1"


@pytest.fixture
def draft(scenario_store):
    return service.create_scenario(
        PROJECT_ID,
        USER,
        ScenarioCreate(name="Ten-year plan", budget_constraint=50_000, time_horizon=10),
    )


class TestScenarioLifecycle:
    def test_create_then_fetch_is_draft(self, draft):
        fetched = service.get_scenario(PROJECT_ID, draft.id, USER)

        assert fetched.status == "draft"
        assert fetched.total_cost is None
        assert [s.name for s in service.list_scenarios(PROJECT_ID, USER)] == ["Ten-year plan"]

    def test_run_persists_plan_and_marks_optimized(self, draft, scenario_store, assessed_components):
        run = service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)

        assert run.scenario.status == "optimized"
        assert run.result.total_cost <= 50_000
        assert run.scenario.total_cost == pytest.approx(run.result.total_cost)
        assert len(run.cash_flows) == 11
        assert run.cash_flows[0].year == CURRENT_YEAR
        assert run.internal_rate_of_return is None or isinstance(run.internal_rate_of_return, float)

        detail = service.get_scenario_detail(PROJECT_ID, draft.id, USER)
        assert len(detail.strategies) == len(assessed_components)
        assert len(detail.cash_flows) == 11

    def test_rerun_replaces_children(self, draft, scenario_store, assessed_components):
        service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)
        service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)

        assert len(scenario_store.strategies[draft.id]) == 2
        assert len(scenario_store.cash_flows[draft.id]) == 11

    def test_delete_removes_children(self, draft, scenario_store, assessed_components):
        service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)
        service.delete_scenario(PROJECT_ID, draft.id, USER)

        assert draft.id not in scenario_store.headers
        assert draft.id not in scenario_store.strategies
        assert draft.id not in scenario_store.cash_flows
        with pytest.raises(HTTPException) as exc:
            service.get_scenario(PROJECT_ID, draft.id, USER)
        assert exc.value.status_code == 404

    def test_other_users_cannot_see_scenario(self, draft):
        with pytest.raises(HTTPException) as exc:
            service.get_scenario(PROJECT_ID, draft.id, "someone-else")
        assert exc.value.status_code == 404


class TestStatusTransitions:
    def test_forward_path(self, draft, assessed_components):
        service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)

        approved = service.update_status(PROJECT_ID, draft.id, USER, "approved")
        implemented = service.update_status(PROJECT_ID, draft.id, USER, "implemented")

        assert approved.status == "approved"
        assert implemented.status == "implemented"

    @pytest.mark.parametrize("target", ["approved", "implemented", "optimized", "draft"])
    def test_draft_cannot_skip_the_run(self, draft, target):
        with pytest.raises(HTTPException) as exc:
            service.update_status(PROJECT_ID, draft.id, USER, target)
        assert exc.value.status_code == 409

    def test_no_going_back(self, draft, assessed_components):
        service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)
        service.update_status(PROJECT_ID, draft.id, USER, "approved")

        with pytest.raises(HTTPException) as exc:
            service.update_status(PROJECT_ID, draft.id, USER, "draft")
        assert exc.value.status_code == 409

    def test_approved_scenario_cannot_be_rerun(self, draft, assessed_components):
        service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)
        service.update_status(PROJECT_ID, draft.id, USER, "approved")

        with pytest.raises(HTTPException) as exc:
            service.run_scenario(PROJECT_ID, draft.id, USER, current_year=CURRENT_YEAR)
        assert exc.value.status_code == 409


class TestProjectAccess:
    def test_create_on_unowned_project_is_404(self, scenario_store):
        with pytest.raises(HTTPException) as exc:
            service.create_scenario(
                PROJECT_ID, "someone-else", ScenarioCreate(name="Not mine")
            )

        assert exc.value.status_code == 404
        assert scenario_store.headers == {}
