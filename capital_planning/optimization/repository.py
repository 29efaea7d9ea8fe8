# capital_planning/optimization/repository.py

from uuid import UUID
from typing import Any, Dict, List, Optional

from capital_planning.db.connection import get_db_connection

# Latest assessment per component, joined to the component catalogue
_COMPONENT_SELECT = """
    SELECT DISTINCT ON (bc.code)
        bc.code AS component_code,
        bc.name,
        a.condition,
        a.estimated_repair_cost,
        a.replacement_value,
        a.expected_useful_life,
        a.action_year
    FROM public.building_components bc
    INNER JOIN public.assessments a
        ON a.component_code = bc.code
       AND a.project_id = %s
"""


def _rows_to_dicts(cur, rows) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, r)) for r in rows]


def fetch_component_snapshot(
    project_id: UUID,
    component_code: str,
) -> Optional[Dict[str, Any]]:
    sql = _COMPONENT_SELECT + """
        WHERE bc.code = %s
        ORDER BY bc.code, a.assessed_at DESC
        LIMIT 1;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (str(project_id), component_code))
            row = cur.fetchone()
            if not row:
                return None
            return _rows_to_dicts(cur, [row])[0]


def fetch_assessed_components(project_id: UUID) -> List[Dict[str, Any]]:
    sql = _COMPONENT_SELECT + """
        ORDER BY bc.code, a.assessed_at DESC;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (str(project_id),))
            rows = cur.fetchall()
            return _rows_to_dicts(cur, rows)


def project_owned_by(project_id: UUID, user_id: str) -> bool:
    sql = """
        SELECT 1
        FROM public.projects
        WHERE id = %s AND user_id = %s;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (str(project_id), user_id))
            return cur.fetchone() is not None
