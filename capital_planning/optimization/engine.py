# capital_planning/optimization/engine.py

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from capital_planning.errors import ValidationError
from capital_planning.financial.metrics import (
    net_present_value,
    payback_period,
    return_on_investment,
)
from .heuristics import HeuristicSettings, get_heuristics
from .schemas import (
    CashFlowProjection,
    ComponentSnapshot,
    OptimizationConfig,
    OptimizationResult,
    StrategyOption,
)
from .strategies import generate_strategy_options, select_strategy

logger = logging.getLogger(__name__)

DEFERRING_STRATEGIES = ("defer", "do_nothing")


def _option(options: List[StrategyOption], strategy: str) -> StrategyOption:
    return next(o for o in options if o.strategy == strategy)


def _apply_hard_budget(
    all_options: List[List[StrategyOption]],
    selections: List[StrategyOption],
    budget: float,
) -> Tuple[List[StrategyOption], List[str]]:
    """
    Greedy trim: walk selections by cost-effectiveness (best first) and keep
    each one while the running total fits the budget. A rejected component
    falls back to its defer option, or to do_nothing when even the holding
    cost of deferral no longer fits, so the final total never exceeds budget.
    """
    order = sorted(
        range(len(selections)),
        key=lambda i: selections[i].cost_effectiveness,
        reverse=True,
    )

    trimmed: Dict[int, StrategyOption] = {}
    rejected: List[str] = []
    cumulative = 0.0

    for i in order:
        chosen = selections[i]
        if cumulative + chosen.strategy_cost <= budget:
            trimmed[i] = chosen
            cumulative += chosen.strategy_cost
            continue

        fallback = _option(all_options[i], "defer")
        if cumulative + fallback.strategy_cost > budget:
            fallback = _option(all_options[i], "do_nothing")

        logger.debug(
            "Budget trim: %s %s -> %s",
            chosen.component_code,
            chosen.strategy,
            fallback.strategy,
        )
        trimmed[i] = fallback
        cumulative += fallback.strategy_cost
        rejected.append(chosen.component_code)

    return [trimmed[i] for i in range(len(selections))], rejected


def optimize_single_project(
    components: List[ComponentSnapshot],
    config: OptimizationConfig,
    heuristics: Optional[HeuristicSettings] = None,
    current_year: Optional[int] = None,
) -> OptimizationResult:
    """
    Two-phase greedy plan for one project:

    1. every assessed component gets its goal-preferred option, chosen
       independently of the others;
    2. under a hard budget the selection is trimmed to fit (see
       _apply_hard_budget).

    Not a joint optimum; downstream consumers rely on this exact heuristic.
    """
    if not components:
        raise ValidationError("No assessed components found for project")

    h = heuristics or get_heuristics()
    current_year = current_year or date.today().year

    all_options = [
        generate_strategy_options(c, config, h, current_year) for c in components
    ]
    selections = [select_strategy(opts, config.optimization_goal) for opts in all_options]

    deferred = [s.component_code for s in selections if s.strategy in DEFERRING_STRATEGIES]

    if config.budget_type == "hard" and config.budget_constraint is not None:
        selections, rejected = _apply_hard_budget(all_options, selections, config.budget_constraint)
        deferred.extend(code for code in rejected if code not in deferred)

    # --- Condition index ---
    conditions = np.array([opts[0].current_condition for opts in all_options])
    improvements = np.array([s.condition_improvement for s in selections])
    current_ci = float(conditions.mean())
    projected_ci = float((conditions + improvements).mean())

    # --- Facility condition index (backlog / replacement value) ---
    repair_costs = np.array(
        [float(c.estimated_repair_cost or h.default_repair_cost) for c in components]
    )
    replacement_values = np.array(
        [_option(opts, "replace").strategy_cost for opts in all_options]
    )
    unaddressed = np.array([s.strategy in DEFERRING_STRATEGIES for s in selections])

    total_replacement = replacement_values.sum()
    current_fci = repair_costs.sum() / total_replacement * 100 if total_replacement > 0 else 0.0
    projected_fci = (
        repair_costs[unaddressed].sum() / total_replacement * 100 if total_replacement > 0 else 0.0
    )

    # --- Risk ---
    current_risk = float((100 - conditions).sum())
    projected_risk = current_risk - sum(s.risk_reduction for s in selections)

    # --- Money ---
    total_cost = sum(s.strategy_cost for s in selections)
    benefits = [s.failure_cost_avoided + s.maintenance_savings for s in selections]
    total_benefit = sum(benefits)

    result = OptimizationResult(
        total_cost=total_cost,
        total_benefit=total_benefit,
        net_present_value=net_present_value(benefits, [s.present_value_cost for s in selections]),
        return_on_investment=return_on_investment(total_benefit, total_cost),
        payback_period=payback_period(
            total_cost,
            total_benefit / config.time_horizon,
            sentinel=h.payback_sentinel,
        ),
        current_ci=current_ci,
        projected_ci=projected_ci,
        ci_improvement=projected_ci - current_ci,
        current_fci=float(current_fci),
        projected_fci=float(projected_fci),
        fci_improvement=float(current_fci - projected_fci),
        current_risk_score=current_risk,
        projected_risk_score=projected_risk,
        risk_reduction=current_risk - projected_risk,
        selected_strategies=selections,
        deferred_components=deferred,
    )

    logger.info(
        "Single-project plan: %d components, goal=%s, budget=%s (%s), cost=%.2f, deferred=%d",
        len(components),
        config.optimization_goal,
        config.budget_constraint,
        config.budget_type,
        total_cost,
        len(deferred),
    )
    return result


def project_cash_flows(
    result: OptimizationResult,
    time_horizon: int,
    heuristics: Optional[HeuristicSettings] = None,
    current_year: Optional[int] = None,
) -> List[CashFlowProjection]:
    """
    Year-by-year projection from the current year through current_year + time_horizon.

    Capital spend and avoided failure cost land in each strategy's action year
    (overdue actions land in the current year). Maintenance savings accrue
    evenly from the action year on. CI and FCI move linearly from current to
    projected across the horizon.
    """
    h = heuristics or get_heuristics()
    current_year = current_year or date.today().year
    years = pd.Index(range(current_year, current_year + time_horizon + 1), name="year")

    df = pd.DataFrame(
        [
            {
                "action_year": max(s.action_year, current_year),
                "strategy_cost": s.strategy_cost,
                "failure_cost_avoided": s.failure_cost_avoided,
                "annual_savings": s.maintenance_savings / time_horizon,
            }
            for s in result.selected_strategies
        ],
        columns=["action_year", "strategy_cost", "failure_cost_avoided", "annual_savings"],
    )

    by_year = df.groupby("action_year")[["strategy_cost", "failure_cost_avoided", "annual_savings"]].sum()
    by_year = by_year.reindex(years, fill_value=0.0)

    capex = by_year["strategy_cost"]
    cost_avoidance = by_year["failure_cost_avoided"]
    # Savings started in earlier years keep accruing
    efficiency_gains = by_year["annual_savings"].cumsum()

    maintenance = result.total_cost * h.annual_maintenance_rate
    operating = 0.0

    projections: List[CashFlowProjection] = []
    cumulative = 0.0

    for i, year in enumerate(years):
        total_cost = float(capex[year]) + maintenance + operating
        total_benefit = float(cost_avoidance[year]) + float(efficiency_gains[year])
        net = total_benefit - total_cost
        cumulative += net

        progress = i / time_horizon if time_horizon > 0 else 0.0

        projections.append(
            CashFlowProjection(
                year=int(year),
                capital_expenditure=float(capex[year]),
                maintenance_cost=maintenance,
                operating_cost=operating,
                total_cost=total_cost,
                cost_avoidance=float(cost_avoidance[year]),
                efficiency_gains=float(efficiency_gains[year]),
                total_benefit=total_benefit,
                net_cash_flow=net,
                cumulative_cash_flow=cumulative,
                projected_ci=result.current_ci + result.ci_improvement * progress,
                projected_fci=result.current_fci - result.fci_improvement * progress,
            )
        )

    return projections
