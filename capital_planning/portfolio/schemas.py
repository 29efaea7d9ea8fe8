# capital_planning/portfolio/schemas.py

import math
from uuid import UUID
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer


def _finite_or_none(value: float) -> Optional[float]:
    # JSON has no infinity; unbounded ratios go out as null
    return value if math.isfinite(value) else None


# --- Derived per-project metrics (portfolio granularity) ---
class ProjectData(BaseModel):
    project_id: UUID
    project_name: Optional[str] = None
    current_ci: float
    current_fci: float
    replacement_value: float
    deferred_maintenance_cost: float
    priority_score: float = 0.0
    estimated_cost: float
    expected_ci_improvement: float
    expected_fci_improvement: float
    risk_score: float


class OptimizationConstraints(BaseModel):
    max_budget: float = Field(..., ge=0)
    min_projects: Optional[int] = Field(None, ge=0)
    max_projects: Optional[int] = Field(None, ge=0)
    required_project_ids: List[UUID] = Field(default_factory=list)
    excluded_project_ids: List[UUID] = Field(default_factory=list)
    min_ci_improvement: Optional[float] = Field(None, ge=0)
    max_risk_tolerance: Optional[float] = Field(None, ge=0, le=10)


class SelectedProject(BaseModel):
    project_id: UUID
    project_name: Optional[str] = None
    cost: float
    ci_improvement: float
    fci_improvement: float
    priority_score: float
    cost_effectiveness: float  # cost per CI point; inf when the project adds none

    @field_serializer("cost_effectiveness", when_used="json")
    def _serialize_ratio(self, value: float):
        return _finite_or_none(value)


class PortfolioConditionMetrics(BaseModel):
    before_ci: float
    after_ci: float
    before_fci: float
    after_fci: float
    ci_improvement_percent: float
    fci_improvement_percent: float


class PortfolioOptimizationResult(BaseModel):
    selected_projects: List[SelectedProject]
    total_cost: float
    total_ci_improvement: float
    total_fci_improvement: float
    portfolio_metrics: PortfolioConditionMetrics
    budget_utilization: float
    average_cost_effectiveness: float
    solver_status: str


class SensitivityLevel(BaseModel):
    budget: float
    project_count: int
    total_cost: float
    ci_improvement: float
    fci_improvement: float
    marginal_benefit: float
    roi: float


class SensitivityAnalysis(BaseModel):
    budget_levels: List[float]
    results: List[SensitivityLevel]
    optimal_budget: float
    inflection_point: float


class ParetoPoint(BaseModel):
    cost: float
    ci_improvement: float
    fci_improvement: float
    project_count: int
    projects: List[UUID]


class RankedProject(BaseModel):
    project_id: UUID
    project_name: Optional[str] = None
    cost: float
    ci_improvement: float
    fci_improvement: float
    priority_score: float
    cost_per_ci_point: float
    cost_per_fci_point: float
    rank: int

    @field_serializer("cost_per_ci_point", "cost_per_fci_point", when_used="json")
    def _serialize_ratios(self, value: float):
        return _finite_or_none(value)


class PortfolioMetrics(BaseModel):
    total_projects: int
    total_replacement_value: float
    total_deferred_maintenance: float
    weighted_ci: float
    weighted_fci: float
    average_priority_score: float
