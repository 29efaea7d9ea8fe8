# capital_planning/optimization/heuristics.py

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

HEURISTICS_ENV_VAR = "CAPITAL_PLANNING_HEURISTICS"


class HeuristicSettings(BaseModel):
    """
    Every policy constant used by the strategy generator and the portfolio
    optimizer. Defaults reproduce the production behaviour; override through
    a JSON file named by CAPITAL_PLANNING_HEURISTICS or model_copy(update=...).

    Tier lists are (threshold, value) pairs checked in order; the first
    threshold the condition satisfies wins, otherwise the *_floor value applies.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # --- Component inputs ---
    condition_scores: Dict[str, float] = Field(
        default_factory=lambda: {"good": 90, "fair": 65, "poor": 30, "not_assessed": 50}
    )
    default_condition_score: float = 50
    default_repair_cost: float = 10_000
    default_useful_life: int = 25
    default_action_lead_years: int = 1

    # --- Replacement / rehabilitation cost ---
    replacement_poor_threshold: float = 50  # condition below this uses the poor multiplier
    replacement_multiplier_poor: float = 2.0
    replacement_multiplier: float = 1.5
    rehab_cost_tiers: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(60, 0.4), (40, 0.5)]
    )  # condition > threshold -> share of replacement cost
    rehab_cost_floor: float = 0.6
    rehab_condition_target: float = 85
    rehab_condition_cap: float = 40
    rehab_life_share: float = 0.6

    # --- Risk and failure ---
    criticality_factor: float = 1.0
    risk_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {
            "replace": 0.95,
            "rehabilitate": 0.70,
            "defer": 0.10,
            "do_nothing": 0.0,
        }
    )
    failure_cost_multiplier: float = 1.5
    failure_probability_tiers: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(30, 0.8), (50, 0.4)]
    )  # condition < threshold -> probability
    failure_probability_floor: float = 0.1

    # --- Maintenance ---
    annual_maintenance_rate: float = 0.02
    maintenance_savings_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {"replace": 0.5, "rehabilitate": 0.3}
    )

    # --- Deferral and anti-selection values ---
    defer_cost_share: float = 0.1
    deferral_years: int = 3
    defer_cost_effectiveness: float = 0.1
    do_nothing_cost_effectiveness: float = 0.0
    condition_point_value: float = 100

    payback_sentinel: float = 999.0

    # --- Portfolio ---
    portfolio_target_ci: float = 90
    residual_deferred_share: float = 0.2
    value_weight_divisor: float = 1_000_000
    portfolio_risk_tiers: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(50, 10), (70, 7)]
    )  # current CI < threshold -> risk score
    portfolio_risk_floor: float = 5

    # --- Sensitivity ---
    sensitivity_steps: int = Field(10, ge=1)
    inflection_ratio: float = 0.5

    def condition_score(self, condition) -> float:
        if condition is None:
            return self.default_condition_score
        return self.condition_scores.get(str(condition).strip().lower(), self.default_condition_score)


def load_heuristics(path: Path = None) -> HeuristicSettings:
    if path is None:
        return HeuristicSettings()
    overrides = json.loads(Path(path).read_text())
    logger.info("Loaded heuristic overrides from %s: %s", path, sorted(overrides))
    return HeuristicSettings(**overrides)


@lru_cache(maxsize=1)
def get_heuristics() -> HeuristicSettings:
    path = os.getenv(HEURISTICS_ENV_VAR)
    return load_heuristics(Path(path) if path else None)
