# capital_planning/scenarios/service.py

import logging
from datetime import date
from uuid import UUID
from typing import List, Optional

from fastapi import HTTPException

from capital_planning.errors import NumericalError
from capital_planning.financial.metrics import internal_rate_of_return
from capital_planning.optimization import engine as optimization_engine
from capital_planning.optimization import repository as optimization_repo
from capital_planning.optimization import service as optimization_service
from capital_planning.optimization.schemas import CashFlowProjection, StrategyOption
from .schemas import (
    STATUS_FLOW,
    ScenarioCreate,
    ScenarioDetail,
    ScenarioRead,
    ScenarioRunResult,
    ScenarioSummary,
)
from . import repository as repo

logger = logging.getLogger(__name__)

# Runs are allowed until the plan has been signed off
RUNNABLE_STATUSES = ("draft", "optimized")


def create_scenario(
    project_id: UUID,
    user_id: str,
    payload: ScenarioCreate,
) -> ScenarioRead:
    if not optimization_repo.project_owned_by(project_id, user_id):
        raise HTTPException(status_code=404, detail="Project not found.")
    data = repo.create_scenario(project_id, user_id, {**payload.model_dump(), "status": "draft"})
    return ScenarioRead(**data)


def list_scenarios(
    project_id: UUID,
    user_id: str,
) -> List[ScenarioSummary]:
    rows = repo.list_scenarios(project_id, user_id)
    return [ScenarioSummary(**row) for row in rows]


def get_scenario(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str,
) -> ScenarioRead:
    row = repo.get_scenario(project_id, scenario_id, user_id)
    if not row:
        raise HTTPException(status_code=404, detail="Scenario not found.")
    return ScenarioRead(**row)


def get_scenario_detail(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str,
) -> ScenarioDetail:
    scenario = get_scenario(project_id, scenario_id, user_id)
    return ScenarioDetail(
        scenario=scenario,
        strategies=[StrategyOption(**r) for r in repo.get_scenario_strategies(scenario_id)],
        cash_flows=[CashFlowProjection(**r) for r in repo.get_cash_flow_projections(scenario_id)],
    )


def _cash_flow_irr(cash_flows: List[CashFlowProjection]) -> Optional[float]:
    try:
        return internal_rate_of_return([c.net_cash_flow for c in cash_flows])
    except NumericalError as e:
        logger.info("No IRR for this cash-flow series: %s", e)
        return None


def run_scenario(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str,
    current_year: Optional[int] = None,
) -> ScenarioRunResult:
    """
    Optimize the scenario's project with its stored settings, persist the
    selected strategies plus a (time_horizon + 1)-year cash-flow projection,
    and move the scenario to 'optimized'.
    """
    scenario = get_scenario(project_id, scenario_id, user_id)
    if scenario.status not in RUNNABLE_STATUSES:
        raise HTTPException(
            status_code=409,
            detail=f"Scenario is {scenario.status}; only draft or optimized scenarios can be run.",
        )

    current_year = current_year or date.today().year
    result = optimization_service.optimize_single_project(
        project_id, user_id, scenario.to_config(), current_year=current_year
    )
    cash_flows = optimization_engine.project_cash_flows(
        result, scenario.time_horizon, current_year=current_year
    )

    header = repo.save_run(
        project_id,
        scenario_id,
        user_id,
        results=result.model_dump(exclude={"selected_strategies", "deferred_components"}),
        strategies=[s.model_dump() for s in result.selected_strategies],
        cash_flows=[c.model_dump() for c in cash_flows],
    )
    if not header:
        raise HTTPException(status_code=404, detail="Scenario not found.")

    logger.info(
        "Scenario %s optimized: %d strategies, %d cash-flow years",
        scenario_id,
        len(result.selected_strategies),
        len(cash_flows),
    )
    return ScenarioRunResult(
        scenario=ScenarioRead(**header),
        result=result,
        cash_flows=cash_flows,
        internal_rate_of_return=_cash_flow_irr(cash_flows),
    )


def update_status(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str,
    status: str,
) -> ScenarioRead:
    """
    Move a scenario one step forward. 'optimized' is only reachable by
    running the scenario, so manual updates cover approval and implementation.
    """
    scenario = get_scenario(project_id, scenario_id, user_id)
    current = STATUS_FLOW.index(scenario.status)
    target = STATUS_FLOW.index(status)

    if status == "optimized" or target != current + 1:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot move scenario from {scenario.status} to {status}.",
        )

    row = repo.update_scenario_status(project_id, scenario_id, user_id, status)
    if not row:
        raise HTTPException(status_code=404, detail="Scenario not found.")
    return ScenarioRead(**row)


def delete_scenario(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str,
) -> None:
    ok = repo.delete_scenario(project_id, scenario_id, user_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Scenario not found.")
