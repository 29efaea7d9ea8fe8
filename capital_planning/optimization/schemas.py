# capital_planning/optimization/schemas.py

from uuid import UUID
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field

StrategyName = Literal["replace", "rehabilitate", "defer", "do_nothing"]
OptimizationGoal = Literal["minimize_cost", "maximize_ci", "maximize_roi", "minimize_risk"]
BudgetType = Literal["hard", "soft"]

STRATEGY_ORDER = ("replace", "rehabilitate", "defer", "do_nothing")


# --- Read collaborator snapshot (one row per assessed component) ---
class ComponentSnapshot(BaseModel):
    component_code: str
    name: Optional[str] = None
    condition: Optional[str] = None  # good / fair / poor / not_assessed
    estimated_repair_cost: Optional[float] = None
    replacement_value: Optional[float] = None
    expected_useful_life: Optional[int] = None
    action_year: Optional[int] = None


# --- Settings for one single-project run ---
class OptimizationConfig(BaseModel):
    project_id: Optional[UUID] = None
    budget_constraint: Optional[float] = Field(None, ge=0)
    budget_type: BudgetType = "hard"
    time_horizon: int = Field(10, ge=1, le=50, description="Planning horizon in years")
    discount_rate: float = Field(0.03, ge=0, le=0.2)
    optimization_goal: OptimizationGoal = "maximize_roi"


class StrategyOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    component_code: str
    component_name: Optional[str] = None
    current_condition: float
    strategy: StrategyName
    action_year: int
    deferral_years: Optional[int] = None
    strategy_cost: float
    present_value_cost: float
    life_extension: int
    condition_improvement: float
    risk_reduction: float
    failure_cost_avoided: float
    maintenance_savings: float
    priority_score: float
    cost_effectiveness: float


class StrategyComparison(BaseModel):
    component: str
    strategies: List[StrategyOption]
    recommended: StrategyOption


class OptimizationResult(BaseModel):
    total_cost: float
    total_benefit: float
    net_present_value: float
    return_on_investment: float
    payback_period: float

    current_ci: float
    projected_ci: float
    ci_improvement: float
    current_fci: float
    projected_fci: float
    fci_improvement: float
    current_risk_score: float
    projected_risk_score: float
    risk_reduction: float

    selected_strategies: List[StrategyOption]
    deferred_components: List[str] = Field(default_factory=list)


# --- Year-by-year projection written alongside a scenario ---
class CashFlowProjection(BaseModel):
    year: int
    capital_expenditure: float
    maintenance_cost: float
    operating_cost: float
    total_cost: float
    cost_avoidance: float
    efficiency_gains: float
    total_benefit: float
    net_cash_flow: float
    cumulative_cash_flow: float
    projected_ci: Optional[float] = None
    projected_fci: Optional[float] = None
