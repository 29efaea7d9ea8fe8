# capital_planning/portfolio/engine.py

import logging
import math
from typing import List, Optional

import numpy as np
import pandas as pd

from capital_planning.errors import OptimizationInfeasible, ValidationError
from capital_planning.optimization.heuristics import HeuristicSettings, get_heuristics
from .model import build_selection_model, solve_selection_model
from .schemas import (
    OptimizationConstraints,
    ParetoPoint,
    PortfolioConditionMetrics,
    PortfolioMetrics,
    PortfolioOptimizationResult,
    ProjectData,
    RankedProject,
    SelectedProject,
    SensitivityAnalysis,
    SensitivityLevel,
)

logger = logging.getLogger(__name__)

NUMERIC_COLUMNS = [
    "current_ci",
    "current_fci",
    "replacement_value",
    "deferred_maintenance_cost",
    "priority_score",
]


# -------------------------------------------------
# Project metrics
# -------------------------------------------------


def _normalise_projects_df(projects_df: pd.DataFrame) -> pd.DataFrame:
    df = projects_df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    for col in NUMERIC_COLUMNS:
        if col not in df.columns:
            df[col] = 0.0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    if "project_name" not in df.columns:
        df["project_name"] = None
    df["project_name"] = df["project_name"].astype(object).where(df["project_name"].notna(), None)
    return df


def prepare_projects(
    projects_df: pd.DataFrame,
    heuristics: Optional[HeuristicSettings] = None,
) -> List[ProjectData]:
    """
    Derive optimizer inputs from the raw project snapshot. Only projects with
    a replacement value and outstanding deferred maintenance are eligible.
    """
    h = heuristics or get_heuristics()
    if projects_df is None or projects_df.empty:
        return []

    df = _normalise_projects_df(projects_df)
    df = df[(df["replacement_value"] > 0) & (df["deferred_maintenance_cost"] > 0)].copy()
    if df.empty:
        return []

    df["expected_ci_improvement"] = (h.portfolio_target_ci - df["current_ci"]).clip(lower=0)
    residual_fci = df["deferred_maintenance_cost"] * h.residual_deferred_share / df["replacement_value"] * 100
    df["expected_fci_improvement"] = (df["current_fci"] - residual_fci).clip(lower=0)

    # Deferred maintenance stands in for the project cost
    df["estimated_cost"] = df["deferred_maintenance_cost"]

    conditions = [df["current_ci"] < threshold for threshold, _ in h.portfolio_risk_tiers]
    scores = [score for _, score in h.portfolio_risk_tiers]
    df["risk_score"] = np.select(conditions, scores, default=h.portfolio_risk_floor)

    fields = list(ProjectData.model_fields)
    return [ProjectData(**row) for row in df[fields].to_dict(orient="records")]


def portfolio_metrics(projects_df: pd.DataFrame) -> PortfolioMetrics:
    """Replacement-value-weighted headline numbers over every valued project."""
    if projects_df is None or projects_df.empty:
        return PortfolioMetrics(
            total_projects=0,
            total_replacement_value=0.0,
            total_deferred_maintenance=0.0,
            weighted_ci=0.0,
            weighted_fci=0.0,
            average_priority_score=0.0,
        )

    df = _normalise_projects_df(projects_df)
    df = df[df["replacement_value"] > 0]

    total_rv = float(df["replacement_value"].sum())
    weighted_ci = float((df["current_ci"] * df["replacement_value"]).sum() / total_rv) if total_rv else 0.0
    weighted_fci = float((df["current_fci"] * df["replacement_value"]).sum() / total_rv) if total_rv else 0.0

    return PortfolioMetrics(
        total_projects=int(len(df.index)),
        total_replacement_value=total_rv,
        total_deferred_maintenance=float(df["deferred_maintenance_cost"].sum()),
        weighted_ci=weighted_ci,
        weighted_fci=weighted_fci,
        average_priority_score=float(df["priority_score"].mean()) if len(df.index) else 0.0,
    )


# -------------------------------------------------
# Cross-project optimizer
# -------------------------------------------------


def optimize_across_projects(
    projects: List[ProjectData],
    constraints: OptimizationConstraints,
    heuristics: Optional[HeuristicSettings] = None,
) -> PortfolioOptimizationResult:
    """
    Pick the set of projects to fund. A zero budget is a legitimate question
    and returns an empty plan; an empty eligible set is not and raises.
    """
    if not projects:
        raise OptimizationInfeasible(
            "No projects available for optimization. Projects need a replacement value "
            "and deferred maintenance to be eligible."
        )

    model = build_selection_model(projects, constraints, heuristics)
    outcome = solve_selection_model(model)
    chosen = {v.project_id for v in outcome.selected(model)}

    total_rv = sum(p.replacement_value for p in projects)
    before_ci = sum(p.current_ci * p.replacement_value for p in projects) / total_rv
    before_fci = sum(p.current_fci * p.replacement_value for p in projects) / total_rv

    selected: List[SelectedProject] = []
    weighted_ci_gain = 0.0
    weighted_fci_gain = 0.0

    for p in projects:
        if p.project_id not in chosen:
            continue
        selected.append(
            SelectedProject(
                project_id=p.project_id,
                project_name=p.project_name,
                cost=p.estimated_cost,
                ci_improvement=p.expected_ci_improvement,
                fci_improvement=p.expected_fci_improvement,
                priority_score=p.priority_score,
                cost_effectiveness=(
                    p.estimated_cost / p.expected_ci_improvement
                    if p.expected_ci_improvement > 0
                    else math.inf
                ),
            )
        )
        weighted_ci_gain += p.expected_ci_improvement * p.replacement_value
        weighted_fci_gain += p.expected_fci_improvement * p.replacement_value

    total_cost = sum(s.cost for s in selected)
    total_ci_improvement = weighted_ci_gain / total_rv
    total_fci_improvement = weighted_fci_gain / total_rv
    after_ci = before_ci + total_ci_improvement
    after_fci = before_fci - total_fci_improvement

    logger.info(
        "Portfolio plan: %d of %d projects, cost=%.2f of budget %.2f",
        len(selected),
        len(projects),
        total_cost,
        constraints.max_budget,
    )

    return PortfolioOptimizationResult(
        selected_projects=selected,
        total_cost=total_cost,
        total_ci_improvement=total_ci_improvement,
        total_fci_improvement=total_fci_improvement,
        portfolio_metrics=PortfolioConditionMetrics(
            before_ci=before_ci,
            after_ci=after_ci,
            before_fci=before_fci,
            after_fci=after_fci,
            ci_improvement_percent=(after_ci - before_ci) / before_ci * 100 if before_ci > 0 else 0.0,
            fci_improvement_percent=(before_fci - after_fci) / before_fci * 100 if before_fci > 0 else 0.0,
        ),
        budget_utilization=total_cost / constraints.max_budget * 100 if constraints.max_budget > 0 else 0.0,
        average_cost_effectiveness=total_cost / total_ci_improvement if total_ci_improvement > 0 else 0.0,
        solver_status=outcome.status,
    )


# -------------------------------------------------
# Sensitivity
# -------------------------------------------------


def analyze_sensitivity(
    projects: List[ProjectData],
    base_budget: float,
    range_percent: float = 50,
    heuristics: Optional[HeuristicSettings] = None,
) -> SensitivityAnalysis:
    """
    Re-solve the selection program across evenly spaced budgets spanning
    base_budget * (1 +/- range_percent/100). Infeasible levels are skipped;
    an entirely infeasible sweep raises OptimizationInfeasible.
    """
    h = heuristics or get_heuristics()
    if base_budget < 0:
        raise ValidationError("Base budget must be non-negative.")
    if not 0 <= range_percent <= 100:
        raise ValidationError("Range percent must be between 0 and 100.")

    r = range_percent / 100
    levels = np.linspace(base_budget * (1 - r), base_budget * (1 + r), h.sensitivity_steps + 1)

    results: List[SensitivityLevel] = []
    previous_ci = 0.0

    for budget in levels:
        budget = float(budget)
        try:
            plan = optimize_across_projects(projects, OptimizationConstraints(max_budget=budget), h)
        except OptimizationInfeasible as e:
            logger.info("Sensitivity level %.2f skipped: %s", budget, e)
            continue

        results.append(
            SensitivityLevel(
                budget=budget,
                project_count=len(plan.selected_projects),
                total_cost=plan.total_cost,
                ci_improvement=plan.total_ci_improvement,
                fci_improvement=plan.total_fci_improvement,
                marginal_benefit=plan.total_ci_improvement - previous_ci,
                roi=plan.total_ci_improvement / budget * 100 if budget > 0 else 0.0,
            )
        )
        previous_ci = plan.total_ci_improvement

    if not results:
        raise OptimizationInfeasible(
            "No feasible plan in this budget range. Widen the range or raise the base budget."
        )

    optimal_budget = max(results, key=lambda level: level.roi).budget

    inflection_point = base_budget
    for prev, level in zip(results, results[1:]):
        if level.marginal_benefit < prev.marginal_benefit * h.inflection_ratio:
            inflection_point = level.budget
            break

    return SensitivityAnalysis(
        budget_levels=[float(b) for b in levels],
        results=results,
        optimal_budget=optimal_budget,
        inflection_point=inflection_point,
    )


# -------------------------------------------------
# Trade-off curve and ranking
# -------------------------------------------------


def _projects_frame(projects: List[ProjectData]) -> pd.DataFrame:
    return pd.DataFrame([p.model_dump() for p in projects], columns=list(ProjectData.model_fields))


def calculate_pareto_frontier(projects: List[ProjectData]) -> List[ParetoPoint]:
    """
    Greedy cumulative curve: add projects best CI-per-dollar first and emit
    one point per project. Not the full non-dominated set.
    """
    if not projects:
        return []

    df = _projects_frame(projects)
    df["ci_per_dollar"] = np.where(
        df["estimated_cost"] > 0,
        df["expected_ci_improvement"] / df["estimated_cost"].where(df["estimated_cost"] > 0, 1),
        0.0,
    )
    df = df.sort_values("ci_per_dollar", ascending=False, kind="mergesort")

    df["cum_cost"] = df["estimated_cost"].cumsum()
    df["cum_ci"] = df["expected_ci_improvement"].cumsum()
    df["cum_fci"] = df["expected_fci_improvement"].cumsum()

    points: List[ParetoPoint] = []
    ids = []
    for row in df.itertuples(index=False):
        ids.append(row.project_id)
        points.append(
            ParetoPoint(
                cost=float(row.cum_cost),
                ci_improvement=float(row.cum_ci),
                fci_improvement=float(row.cum_fci),
                project_count=len(ids),
                projects=list(ids),
            )
        )
    return points


def cost_effectiveness_ranking(projects: List[ProjectData]) -> List[RankedProject]:
    """Dense 1..N ranking by cost per CI point, cheapest improvement first."""
    if not projects:
        return []

    df = _projects_frame(projects)
    ci = df["expected_ci_improvement"]
    fci = df["expected_fci_improvement"]
    df["cost_per_ci_point"] = np.where(ci > 0, df["estimated_cost"] / ci.where(ci > 0, 1), np.inf)
    df["cost_per_fci_point"] = np.where(fci > 0, df["estimated_cost"] / fci.where(fci > 0, 1), np.inf)

    df = df.sort_values("cost_per_ci_point", ascending=True, kind="mergesort").reset_index(drop=True)
    df["rank"] = np.arange(1, len(df) + 1)

    return [
        RankedProject(
            project_id=row.project_id,
            project_name=row.project_name,
            cost=float(row.estimated_cost),
            ci_improvement=float(row.expected_ci_improvement),
            fci_improvement=float(row.expected_fci_improvement),
            priority_score=float(row.priority_score),
            cost_per_ci_point=float(row.cost_per_ci_point),
            cost_per_fci_point=float(row.cost_per_fci_point),
            rank=int(row.rank),
        )
        for row in df.itertuples(index=False)
    ]
