# capital_planning/portfolio/service.py

from typing import List

import pandas as pd

from . import engine
from . import repository as repo
from .schemas import (
    OptimizationConstraints,
    ParetoPoint,
    PortfolioMetrics,
    PortfolioOptimizationResult,
    ProjectData,
    RankedProject,
    SensitivityAnalysis,
)


def _projects_df(user_id: str) -> pd.DataFrame:
    return pd.DataFrame(repo.fetch_project_snapshots(user_id))


def get_projects_for_optimization(user_id: str) -> List[ProjectData]:
    return engine.prepare_projects(_projects_df(user_id))


def get_portfolio_metrics(user_id: str) -> PortfolioMetrics:
    return engine.portfolio_metrics(_projects_df(user_id))


def optimize_across_projects(
    user_id: str,
    constraints: OptimizationConstraints,
) -> PortfolioOptimizationResult:
    return engine.optimize_across_projects(get_projects_for_optimization(user_id), constraints)


def analyze_sensitivity(
    user_id: str,
    base_budget: float,
    range_percent: float = 50,
) -> SensitivityAnalysis:
    projects = get_projects_for_optimization(user_id)
    return engine.analyze_sensitivity(projects, base_budget, range_percent)


def calculate_pareto_frontier(user_id: str) -> List[ParetoPoint]:
    return engine.calculate_pareto_frontier(get_projects_for_optimization(user_id))


def get_cost_effectiveness_ranking(user_id: str) -> List[RankedProject]:
    return engine.cost_effectiveness_ranking(get_projects_for_optimization(user_id))
