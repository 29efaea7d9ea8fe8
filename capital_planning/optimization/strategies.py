# capital_planning/optimization/strategies.py

import logging
import math
import warnings
from datetime import date
from typing import List, Optional

from capital_planning.errors import DataDefaulted
from capital_planning.financial.metrics import present_value
from .heuristics import HeuristicSettings, get_heuristics
from .schemas import (
    ComponentSnapshot,
    OptimizationConfig,
    StrategyComparison,
    StrategyOption,
)

logger = logging.getLogger(__name__)


# -------------------------------------------------
# Per-strategy derivations
# -------------------------------------------------


def replacement_cost(
    repair_cost: float,
    replacement_value: float,
    condition: float,
    h: HeuristicSettings,
) -> float:
    # An explicit replacement value always wins over the estimate
    if replacement_value > 0:
        return replacement_value
    if condition < h.replacement_poor_threshold:
        return repair_cost * h.replacement_multiplier_poor
    return repair_cost * h.replacement_multiplier


def rehabilitation_cost(replacement: float, condition: float, h: HeuristicSettings) -> float:
    for threshold, share in h.rehab_cost_tiers:
        if condition > threshold:
            return replacement * share
    return replacement * h.rehab_cost_floor


def condition_improvement(strategy: str, condition: float, h: HeuristicSettings) -> float:
    if strategy == "replace":
        return 100 - condition
    if strategy == "rehabilitate":
        return max(0.0, min(h.rehab_condition_cap, h.rehab_condition_target - condition))
    return 0.0


def life_extension(strategy: str, useful_life: int, h: HeuristicSettings) -> int:
    if strategy == "replace":
        return useful_life
    if strategy == "rehabilitate":
        return math.floor(useful_life * h.rehab_life_share)
    return 0


def risk_reduction(strategy: str, condition: float, h: HeuristicSettings) -> float:
    base_risk = (100 - condition) * h.criticality_factor
    return base_risk * h.risk_multipliers.get(strategy, 0.0)


def failure_probability(condition: float, h: HeuristicSettings) -> float:
    for threshold, probability in h.failure_probability_tiers:
        if condition < threshold:
            return probability
    return h.failure_probability_floor


def failure_cost_avoided(
    strategy: str,
    replacement: float,
    condition: float,
    h: HeuristicSettings,
) -> float:
    if strategy in ("defer", "do_nothing"):
        return 0.0
    return replacement * h.failure_cost_multiplier * failure_probability(condition, h)


def maintenance_savings(
    strategy: str,
    replacement: float,
    time_horizon: int,
    h: HeuristicSettings,
) -> float:
    multiplier = h.maintenance_savings_multipliers.get(strategy, 0.0)
    return replacement * h.annual_maintenance_rate * multiplier * time_horizon


# -------------------------------------------------
# Input resolution
# -------------------------------------------------


def _defaulted(component_code: str, field: str, value) -> None:
    message = f"Component {component_code}: {field} missing, defaulted to {value}"
    logger.info(message)
    warnings.warn(message, DataDefaulted, stacklevel=3)


def _resolve_inputs(component: ComponentSnapshot, current_year: int, h: HeuristicSettings):
    code = component.component_code

    condition_key = (component.condition or "").strip().lower()
    if condition_key not in h.condition_scores:
        _defaulted(code, "condition", h.default_condition_score)
    condition = h.condition_score(component.condition)

    repair_cost = component.estimated_repair_cost
    if not repair_cost:
        repair_cost = h.default_repair_cost
        _defaulted(code, "estimated_repair_cost", repair_cost)

    useful_life = component.expected_useful_life
    if not useful_life:
        useful_life = h.default_useful_life
        _defaulted(code, "expected_useful_life", useful_life)

    action_year = component.action_year
    if not action_year:
        action_year = current_year + h.default_action_lead_years
        _defaulted(code, "action_year", action_year)

    return condition, float(repair_cost), float(component.replacement_value or 0), useful_life, action_year


# -------------------------------------------------
# Public API
# -------------------------------------------------


def generate_strategy_options(
    component: ComponentSnapshot,
    config: OptimizationConfig,
    heuristics: Optional[HeuristicSettings] = None,
    current_year: Optional[int] = None,
) -> List[StrategyOption]:
    """
    Build the four mutually exclusive treatments for one assessed component,
    always in the order replace, rehabilitate, defer, do_nothing.

    Action years already in the past are discounted as if they happen now.
    """
    h = heuristics or get_heuristics()
    current_year = current_year or date.today().year

    condition, repair_cost, replacement_value, useful_life, action_year = _resolve_inputs(
        component, current_year, h
    )

    replacement = replacement_cost(repair_cost, replacement_value, condition, h)
    rehab = rehabilitation_cost(replacement, condition, h)

    def discounted(cost: float, year: int) -> float:
        return present_value(cost, max(0, year - current_year), config.discount_rate)

    common = {
        "component_code": component.component_code,
        "component_name": component.name,
        "current_condition": condition,
    }

    options: List[StrategyOption] = []

    for strategy, cost in (("replace", replacement), ("rehabilitate", rehab)):
        improvement = condition_improvement(strategy, condition, h)
        avoided = failure_cost_avoided(strategy, replacement, condition, h)
        savings = maintenance_savings(strategy, replacement, config.time_horizon, h)
        benefit = avoided + savings + improvement * h.condition_point_value
        effectiveness = benefit / cost if cost > 0 else 0.0

        options.append(
            StrategyOption(
                **common,
                strategy=strategy,
                action_year=action_year,
                strategy_cost=cost,
                present_value_cost=discounted(cost, action_year),
                life_extension=life_extension(strategy, useful_life, h),
                condition_improvement=improvement,
                risk_reduction=risk_reduction(strategy, condition, h),
                failure_cost_avoided=avoided,
                maintenance_savings=savings,
                priority_score=effectiveness,
                cost_effectiveness=effectiveness,
            )
        )

    # Defer: minimal holding maintenance, action pushed out by a fixed period
    deferred_year = action_year + h.deferral_years
    defer_cost = replacement * h.defer_cost_share
    options.append(
        StrategyOption(
            **common,
            strategy="defer",
            action_year=deferred_year,
            deferral_years=h.deferral_years,
            strategy_cost=defer_cost,
            present_value_cost=discounted(defer_cost, deferred_year),
            life_extension=0,
            condition_improvement=0.0,
            risk_reduction=risk_reduction("defer", condition, h),
            failure_cost_avoided=0.0,
            maintenance_savings=0.0,
            priority_score=h.defer_cost_effectiveness,
            cost_effectiveness=h.defer_cost_effectiveness,
        )
    )

    options.append(
        StrategyOption(
            **common,
            strategy="do_nothing",
            action_year=current_year,
            strategy_cost=0.0,
            present_value_cost=0.0,
            life_extension=0,
            condition_improvement=0.0,
            risk_reduction=0.0,
            failure_cost_avoided=0.0,
            maintenance_savings=0.0,
            priority_score=h.do_nothing_cost_effectiveness,
            cost_effectiveness=h.do_nothing_cost_effectiveness,
        )
    )

    logger.debug(
        "Generated strategies for %s (condition=%s, replacement=%.2f)",
        component.component_code,
        condition,
        replacement,
    )
    return options


def select_strategy(options: List[StrategyOption], goal: str) -> StrategyOption:
    """
    Recommended option for an optimization goal. Ties keep the first option
    in list order (min/max return the first extreme they meet).
    """
    if not options:
        raise ValueError("No strategy options to choose from.")

    if goal == "minimize_cost":
        return min(options, key=lambda s: s.present_value_cost)
    if goal == "maximize_ci":
        return max(options, key=lambda s: s.condition_improvement)
    if goal == "maximize_roi":
        return max(options, key=lambda s: s.cost_effectiveness)
    if goal == "minimize_risk":
        return max(options, key=lambda s: s.risk_reduction)
    return options[0]


def compare_strategies(
    component: ComponentSnapshot,
    config: OptimizationConfig,
    heuristics: Optional[HeuristicSettings] = None,
    current_year: Optional[int] = None,
) -> StrategyComparison:
    strategies = generate_strategy_options(component, config, heuristics, current_year)
    return StrategyComparison(
        component=component.component_code,
        strategies=strategies,
        recommended=select_strategy(strategies, config.optimization_goal),
    )
