# capital_planning/portfolio/repository.py

from typing import Any, Dict, List

from capital_planning.db.connection import get_db_connection


def fetch_project_snapshots(user_id: str) -> List[Dict[str, Any]]:
    """
    Current condition and financial snapshot of every project the user owns.
    Eligibility filtering happens in the engine, not here, so portfolio
    metrics can still count valued projects without deferred maintenance.
    """
    sql = """
        SELECT
            p.id AS project_id,
            p.project_name,
            p.ci AS current_ci,
            p.fci AS current_fci,
            p.current_replacement_value AS replacement_value,
            p.deferred_maintenance_cost,
            COALESCE(pps.composite_score, 0) AS priority_score
        FROM public.projects p
        LEFT JOIN public.project_priority_scores pps
            ON pps.project_id = p.id
        WHERE p.user_id = %s
        ORDER BY p.created_at ASC;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (user_id,))
            rows = cur.fetchall()
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, r)) for r in rows]
