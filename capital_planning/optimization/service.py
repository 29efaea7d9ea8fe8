# capital_planning/optimization/service.py

import logging
from uuid import UUID
from typing import List, Optional

from capital_planning.errors import NotFoundError, ValidationError
from . import engine, strategies
from . import repository as repo
from .schemas import (
    ComponentSnapshot,
    OptimizationConfig,
    OptimizationResult,
    StrategyComparison,
    StrategyOption,
)

logger = logging.getLogger(__name__)


def ensure_project_access(project_id: UUID, user_id: str) -> None:
    if not repo.project_owned_by(project_id, user_id):
        raise NotFoundError(f"Project {project_id} not found")


def _load_component(project_id: UUID, user_id: str, component_code: str) -> ComponentSnapshot:
    ensure_project_access(project_id, user_id)
    row = repo.fetch_component_snapshot(project_id, component_code)
    if not row:
        raise NotFoundError(
            f"Component {component_code} has no assessment in project {project_id}"
        )
    return ComponentSnapshot(**row)


def generate_strategy_options(
    project_id: UUID,
    user_id: str,
    component_code: str,
    config: OptimizationConfig,
) -> List[StrategyOption]:
    component = _load_component(project_id, user_id, component_code)
    return strategies.generate_strategy_options(component, config)


def compare_strategies(
    project_id: UUID,
    user_id: str,
    component_code: str,
    config: OptimizationConfig,
) -> StrategyComparison:
    component = _load_component(project_id, user_id, component_code)
    return strategies.compare_strategies(component, config)


def optimize_single_project(
    project_id: UUID,
    user_id: str,
    config: OptimizationConfig,
    current_year: Optional[int] = None,
) -> OptimizationResult:
    ensure_project_access(project_id, user_id)
    rows = repo.fetch_assessed_components(project_id)
    if not rows:
        raise ValidationError(f"No assessed components found for project {project_id}")

    components = [ComponentSnapshot(**row) for row in rows]
    logger.info("Optimizing project %s over %d components", project_id, len(components))
    return engine.optimize_single_project(components, config, current_year=current_year)
