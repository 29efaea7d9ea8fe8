"""Shared identifiers and raw snapshot rows used across the test modules."""

from typing import Any, Dict, List
from uuid import UUID

CURRENT_YEAR = 2025

USER_ID = "user-1"

PROJECT_ID = UUID("11111111-1111-1111-1111-111111111111")

P1 = UUID("00000000-0000-0000-0000-000000000001")
P2 = UUID("00000000-0000-0000-0000-000000000002")
P3 = UUID("00000000-0000-0000-0000-000000000003")
P4 = UUID("00000000-0000-0000-0000-000000000004")
P5 = UUID("00000000-0000-0000-0000-000000000005")


def project_rows() -> List[Dict[str, Any]]:
    """
    Raw project snapshot rows as the repository returns them.
    P4 has no replacement value and P5 no deferred maintenance, so only
    P1..P3 are eligible for optimization.
    """
    return [
        {"project_id": P1, "project_name": "North Campus", "current_ci": 40, "current_fci": 20,
         "replacement_value": 1_000_000, "deferred_maintenance_cost": 200_000, "priority_score": 80},
        {"project_id": P2, "project_name": "Central Library", "current_ci": 60, "current_fci": 10,
         "replacement_value": 2_000_000, "deferred_maintenance_cost": 300_000, "priority_score": 50},
        {"project_id": P3, "project_name": "New Gym", "current_ci": 90, "current_fci": 5,
         "replacement_value": 500_000, "deferred_maintenance_cost": 50_000, "priority_score": 10},
        {"project_id": P4, "project_name": "Storage Shed", "current_ci": 70, "current_fci": 0,
         "replacement_value": 0, "deferred_maintenance_cost": 10_000, "priority_score": None},
        {"project_id": P5, "project_name": None, "current_ci": 75, "current_fci": 0,
         "replacement_value": 400_000, "deferred_maintenance_cost": 0, "priority_score": 20},
    ]
