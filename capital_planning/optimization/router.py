# capital_planning/optimization/router.py

from uuid import UUID
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from capital_planning.errors import CapitalPlanningError
from capital_planning.routers.auth import get_current_user_id
from capital_planning.routers.http_errors import to_http_exception
from .schemas import (
    BudgetType,
    OptimizationConfig,
    OptimizationGoal,
    OptimizationResult,
    StrategyComparison,
    StrategyOption,
)
from . import service

router = APIRouter()


def config_from_query(
    project_id: UUID,
    budget_constraint: Optional[float] = Query(None, ge=0),
    budget_type: BudgetType = "hard",
    time_horizon: int = Query(10, ge=1, le=50),
    discount_rate: float = Query(0.03, ge=0, le=0.2),
    optimization_goal: OptimizationGoal = "maximize_roi",
) -> OptimizationConfig:
    return OptimizationConfig(
        project_id=project_id,
        budget_constraint=budget_constraint,
        budget_type=budget_type,
        time_horizon=time_horizon,
        discount_rate=discount_rate,
        optimization_goal=optimization_goal,
    )


@router.get(
    "/{project_id}/components/{component_code}/strategies",
    response_model=List[StrategyOption],
    summary="Replace / rehabilitate / defer / do-nothing options for one component",
)
def get_strategy_options(
    project_id: UUID,
    component_code: str,
    config: OptimizationConfig = Depends(config_from_query),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return service.generate_strategy_options(project_id, user_id, component_code, config)
    except CapitalPlanningError as e:
        raise to_http_exception(e)


@router.get(
    "/{project_id}/components/{component_code}/strategies/compare",
    response_model=StrategyComparison,
    summary="Compare strategies for one component and recommend one",
)
def compare_component_strategies(
    project_id: UUID,
    component_code: str,
    config: OptimizationConfig = Depends(config_from_query),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return service.compare_strategies(project_id, user_id, component_code, config)
    except CapitalPlanningError as e:
        raise to_http_exception(e)


@router.post(
    "/{project_id}/optimization",
    response_model=OptimizationResult,
    summary="Budget-constrained strategy selection across a project's components",
)
def optimize_project(
    project_id: UUID,
    payload: OptimizationConfig,
    user_id: str = Depends(get_current_user_id),
):
    config = payload.model_copy(update={"project_id": project_id})
    try:
        return service.optimize_single_project(project_id, user_id, config)
    except CapitalPlanningError as e:
        raise to_http_exception(e)
