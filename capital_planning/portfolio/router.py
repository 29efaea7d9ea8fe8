# capital_planning/portfolio/router.py

from typing import List

from fastapi import APIRouter, Depends, Query

from capital_planning.errors import CapitalPlanningError
from capital_planning.routers.auth import get_current_user_id
from capital_planning.routers.http_errors import to_http_exception
from .schemas import (
    OptimizationConstraints,
    ParetoPoint,
    PortfolioMetrics,
    PortfolioOptimizationResult,
    RankedProject,
    SensitivityAnalysis,
)
from . import service

router = APIRouter()


@router.get(
    "/metrics",
    response_model=PortfolioMetrics,
    summary="Replacement-value-weighted condition of the whole portfolio",
)
def get_portfolio_metrics(user_id: str = Depends(get_current_user_id)):
    return service.get_portfolio_metrics(user_id)


@router.post(
    "/optimize",
    response_model=PortfolioOptimizationResult,
    summary="Select which projects to fund under a global budget (binary program)",
)
def optimize_portfolio(
    payload: OptimizationConstraints,
    user_id: str = Depends(get_current_user_id),
):
    try:
        return service.optimize_across_projects(user_id, payload)
    except CapitalPlanningError as e:
        raise to_http_exception(e)


@router.get(
    "/sensitivity",
    response_model=SensitivityAnalysis,
    summary="Sweep the budget around a base value and report marginal benefit",
)
def get_budget_sensitivity(
    base_budget: float = Query(..., gt=0),
    range_percent: float = Query(50, ge=0, le=100),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return service.analyze_sensitivity(user_id, base_budget, range_percent)
    except CapitalPlanningError as e:
        raise to_http_exception(e)


@router.get(
    "/pareto-frontier",
    response_model=List[ParetoPoint],
    summary="Cumulative cost vs. CI improvement, best value first",
)
def get_pareto_frontier(user_id: str = Depends(get_current_user_id)):
    return service.calculate_pareto_frontier(user_id)


@router.get(
    "/ranking",
    response_model=List[RankedProject],
    summary="Projects ranked by cost per CI point",
)
def get_cost_effectiveness_ranking(user_id: str = Depends(get_current_user_id)):
    return service.get_cost_effectiveness_ranking(user_id)
