# capital_planning/portfolio/model.py
"""
Project-selection binary program.

The formulation is kept as plain data (SelectionModel) so it can be
inspected and tested without a solver; solve_selection_model() hands it to
CBC through PuLP.

    maximize    sum_i  w_i * x_i          w_i = ci_improvement_i * replacement_value_i / divisor
    subject to  sum_i  cost_i * x_i <= max_budget
                min_projects <= sum_i x_i <= max_projects        (when given)
                x_i = 1   for required projects and projects above the risk tolerance
                x_i = 0   for excluded projects
                sum_i ci_improvement_i * x_i >= min_ci_improvement  (when given)
                x_i in {0, 1}
"""

import logging
from uuid import UUID
from typing import Dict, List, Literal, Optional

import pulp as pl
from pydantic import BaseModel, Field

from capital_planning.errors import OptimizationInfeasible
from capital_planning.optimization.heuristics import HeuristicSettings, get_heuristics
from .schemas import OptimizationConstraints, ProjectData

logger = logging.getLogger(__name__)


class BinaryVariable(BaseModel):
    name: str
    project_id: UUID
    objective: float
    cost: float
    ci_improvement: float
    low: int = 0
    up: int = 1


class LinearConstraint(BaseModel):
    name: str
    coefficients: Dict[str, float]
    sense: Literal["<=", ">=", "=="]
    rhs: float


class SelectionModel(BaseModel):
    name: str = "PortfolioSelection"
    sense: Literal["maximize"] = "maximize"
    variables: List[BinaryVariable] = Field(default_factory=list)
    constraints: List[LinearConstraint] = Field(default_factory=list)

    def objective(self) -> Dict[str, float]:
        return {v.name: v.objective for v in self.variables}

    def constraint(self, name: str) -> Optional[LinearConstraint]:
        return next((c for c in self.constraints if c.name == name), None)


class SolverOutcome(BaseModel):
    status: str
    objective_value: float
    values: Dict[str, int]

    def selected(self, model: SelectionModel) -> List[BinaryVariable]:
        return [v for v in model.variables if self.values.get(v.name) == 1]


def variable_name(project_id: UUID) -> str:
    return f"project_{project_id.hex}"


def build_selection_model(
    projects: List[ProjectData],
    constraints: OptimizationConstraints,
    heuristics: Optional[HeuristicSettings] = None,
) -> SelectionModel:
    h = heuristics or get_heuristics()

    variables = [
        BinaryVariable(
            name=variable_name(p.project_id),
            project_id=p.project_id,
            # Larger facilities weigh more
            objective=p.expected_ci_improvement * (p.replacement_value / h.value_weight_divisor),
            cost=p.estimated_cost,
            ci_improvement=p.expected_ci_improvement,
        )
        for p in projects
    ]
    by_project = {v.project_id: v for v in variables}
    every = {v.name: 1.0 for v in variables}

    rows: List[LinearConstraint] = [
        LinearConstraint(
            name="budget",
            coefficients={v.name: v.cost for v in variables},
            sense="<=",
            rhs=constraints.max_budget,
        )
    ]

    if constraints.min_projects is not None:
        rows.append(LinearConstraint(name="min_projects", coefficients=every, sense=">=", rhs=constraints.min_projects))
    if constraints.max_projects is not None:
        rows.append(LinearConstraint(name="max_projects", coefficients=every, sense="<=", rhs=constraints.max_projects))

    if constraints.min_ci_improvement is not None:
        rows.append(
            LinearConstraint(
                name="min_ci_improvement",
                coefficients={v.name: v.ci_improvement for v in variables},
                sense=">=",
                rhs=constraints.min_ci_improvement,
            )
        )

    for project_id in constraints.required_project_ids:
        v = by_project.get(project_id)
        if v is None:
            raise OptimizationInfeasible(
                f"Required project {project_id} is not eligible for optimization "
                "(needs a replacement value and deferred maintenance)."
            )
        rows.append(LinearConstraint(name=f"require_{v.name}", coefficients={v.name: 1.0}, sense="==", rhs=1))

    for project_id in constraints.excluded_project_ids:
        v = by_project.get(project_id)
        if v is None:
            continue
        rows.append(LinearConstraint(name=f"exclude_{v.name}", coefficients={v.name: 1.0}, sense="==", rhs=0))

    if constraints.max_risk_tolerance is not None:
        # Risk above tolerance may not be left unfunded
        for p in projects:
            if p.risk_score > constraints.max_risk_tolerance:
                name = variable_name(p.project_id)
                rows.append(LinearConstraint(name=f"risk_{name}", coefficients={name: 1.0}, sense="==", rhs=1))

    return SelectionModel(variables=variables, constraints=rows)


def solve_selection_model(model: SelectionModel) -> SolverOutcome:
    prob = pl.LpProblem(model.name, pl.LpMaximize)
    x = {
        v.name: pl.LpVariable(v.name, lowBound=v.low, upBound=v.up, cat="Binary")
        for v in model.variables
    }

    prob += pl.lpSum(v.objective * x[v.name] for v in model.variables), "weighted_ci_improvement"

    for c in model.constraints:
        expr = pl.lpSum(coef * x[name] for name, coef in c.coefficients.items())
        if c.sense == "<=":
            prob += expr <= c.rhs, c.name
        elif c.sense == ">=":
            prob += expr >= c.rhs, c.name
        else:
            prob += expr == c.rhs, c.name

    prob.solve(pl.PULP_CBC_CMD(msg=False))
    status = pl.LpStatus[prob.status]
    logger.info(
        "Solver status: %s (%d variables, %d constraints)",
        status,
        len(model.variables),
        len(model.constraints),
    )

    if status != "Optimal":
        raise OptimizationInfeasible()

    values = {name: int(round(pl.value(var) or 0)) for name, var in x.items()}
    return SolverOutcome(
        status=status,
        objective_value=float(pl.value(prob.objective) or 0.0),
        values=values,
    )
