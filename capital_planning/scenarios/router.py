# capital_planning/scenarios/router.py

from uuid import UUID
from typing import List
from fastapi import APIRouter, Depends, status

from capital_planning.errors import CapitalPlanningError
from capital_planning.routers.auth import get_current_user_id
from capital_planning.routers.http_errors import to_http_exception
from .schemas import (
    ScenarioCreate,
    ScenarioDetail,
    ScenarioRead,
    ScenarioRunResult,
    ScenarioStatusUpdate,
    ScenarioSummary,
)
from . import service

router = APIRouter()


@router.post(
    "/{project_id}/optimization-scenarios",
    response_model=ScenarioRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a draft optimization scenario",
)
def create_optimization_scenario(
    project_id: UUID,
    payload: ScenarioCreate,
    user_id: str = Depends(get_current_user_id),
):
    return service.create_scenario(project_id, user_id, payload)


@router.get(
    "/{project_id}/optimization-scenarios",
    response_model=List[ScenarioSummary],
)
def list_optimization_scenarios(
    project_id: UUID,
    user_id: str = Depends(get_current_user_id),
):
    return service.list_scenarios(project_id, user_id)


@router.get(
    "/{project_id}/optimization-scenarios/{scenario_id}",
    response_model=ScenarioDetail,
    summary="Scenario header with its selected strategies and cash flows",
)
def get_optimization_scenario(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str = Depends(get_current_user_id),
):
    return service.get_scenario_detail(project_id, scenario_id, user_id)


@router.post(
    "/{project_id}/optimization-scenarios/{scenario_id}/run",
    response_model=ScenarioRunResult,
    summary="Run the optimizer for a scenario and store the plan",
)
def run_optimization_scenario(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str = Depends(get_current_user_id),
):
    try:
        return service.run_scenario(project_id, scenario_id, user_id)
    except CapitalPlanningError as e:
        raise to_http_exception(e)


@router.put(
    "/{project_id}/optimization-scenarios/{scenario_id}/status",
    response_model=ScenarioRead,
    summary="Advance a scenario to approved or implemented",
)
def update_optimization_scenario_status(
    project_id: UUID,
    scenario_id: UUID,
    payload: ScenarioStatusUpdate,
    user_id: str = Depends(get_current_user_id),
):
    return service.update_status(project_id, scenario_id, user_id, payload.status)


@router.delete(
    "/{project_id}/optimization-scenarios/{scenario_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_optimization_scenario(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str = Depends(get_current_user_id),
):
    service.delete_scenario(project_id, scenario_id, user_id)
