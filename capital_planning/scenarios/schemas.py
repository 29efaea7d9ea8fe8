# capital_planning/scenarios/schemas.py

from uuid import UUID
from typing import List, Optional, Literal
from datetime import datetime

from pydantic import BaseModel, Field

from capital_planning.optimization.schemas import (
    BudgetType,
    CashFlowProjection,
    OptimizationConfig,
    OptimizationGoal,
    OptimizationResult,
    StrategyOption,
)

ScenarioStatus = Literal["draft", "optimized", "approved", "implemented"]

# Forward-only lifecycle
STATUS_FLOW = ("draft", "optimized", "approved", "implemented")


# --- CRUD Schemas ---

class ScenarioCreate(BaseModel):
    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    budget_constraint: Optional[float] = Field(None, ge=0)
    budget_type: BudgetType = "hard"
    time_horizon: int = Field(10, ge=1, le=50, description="Planning horizon in years")
    discount_rate: float = Field(0.03, ge=0, le=0.2)
    optimization_goal: OptimizationGoal = "maximize_roi"


class ScenarioStatusUpdate(BaseModel):
    status: ScenarioStatus


class ScenarioRead(BaseModel):
    id: UUID
    project_id: UUID
    user_id: str
    name: str
    description: Optional[str] = None

    budget_constraint: Optional[float] = None
    budget_type: BudgetType
    time_horizon: int
    discount_rate: float
    optimization_goal: OptimizationGoal

    # Filled in by a run
    total_cost: Optional[float] = None
    total_benefit: Optional[float] = None
    net_present_value: Optional[float] = None
    return_on_investment: Optional[float] = None
    payback_period: Optional[float] = None
    current_ci: Optional[float] = None
    projected_ci: Optional[float] = None
    ci_improvement: Optional[float] = None
    current_fci: Optional[float] = None
    projected_fci: Optional[float] = None
    fci_improvement: Optional[float] = None
    current_risk_score: Optional[float] = None
    projected_risk_score: Optional[float] = None
    risk_reduction: Optional[float] = None

    status: ScenarioStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    def to_config(self) -> OptimizationConfig:
        return OptimizationConfig(
            project_id=self.project_id,
            budget_constraint=self.budget_constraint,
            budget_type=self.budget_type,
            time_horizon=self.time_horizon,
            discount_rate=self.discount_rate,
            optimization_goal=self.optimization_goal,
        )


class ScenarioSummary(BaseModel):
    id: UUID
    name: str
    status: ScenarioStatus
    optimization_goal: OptimizationGoal
    created_at: datetime


class ScenarioDetail(BaseModel):
    scenario: ScenarioRead
    strategies: List[StrategyOption]
    cash_flows: List[CashFlowProjection]


class ScenarioRunResult(BaseModel):
    scenario: ScenarioRead
    result: OptimizationResult
    cash_flows: List[CashFlowProjection]
    internal_rate_of_return: Optional[float] = None  # fraction; None when the series has no IRR
