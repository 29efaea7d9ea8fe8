# capital_planning/scenarios/repository.py

from uuid import UUID
from typing import List, Dict, Any, Optional

from capital_planning.db.connection import get_db_connection

SCENARIO_CONFIG_FIELDS = (
    "name",
    "description",
    "budget_constraint",
    "budget_type",
    "time_horizon",
    "discount_rate",
    "optimization_goal",
)

SCENARIO_RESULT_FIELDS = (
    "total_cost",
    "total_benefit",
    "net_present_value",
    "return_on_investment",
    "payback_period",
    "current_ci",
    "projected_ci",
    "ci_improvement",
    "current_fci",
    "projected_fci",
    "fci_improvement",
    "current_risk_score",
    "projected_risk_score",
    "risk_reduction",
)

STRATEGY_FIELDS = (
    "component_code",
    "component_name",
    "current_condition",
    "strategy",
    "action_year",
    "deferral_years",
    "strategy_cost",
    "present_value_cost",
    "life_extension",
    "condition_improvement",
    "risk_reduction",
    "failure_cost_avoided",
    "maintenance_savings",
    "priority_score",
    "cost_effectiveness",
)

CASH_FLOW_FIELDS = (
    "year",
    "capital_expenditure",
    "maintenance_cost",
    "operating_cost",
    "total_cost",
    "cost_avoidance",
    "efficiency_gains",
    "total_benefit",
    "net_cash_flow",
    "cumulative_cash_flow",
    "projected_ci",
    "projected_fci",
)


def _row_to_dict(cur, row) -> Dict[str, Any]:
    cols = [d[0] for d in cur.description]
    return dict(zip(cols, row))


def create_scenario(
    project_id: UUID,
    user_id: str,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    sql = f"""
        INSERT INTO public.optimization_scenarios (
            project_id, user_id,
            {", ".join(SCENARIO_CONFIG_FIELDS)},
            status
        )
        VALUES (%s, %s, {", ".join(["%s"] * len(SCENARIO_CONFIG_FIELDS))}, %s)
        RETURNING *;
    """
    values = [str(project_id), user_id]
    values.extend(payload.get(f) for f in SCENARIO_CONFIG_FIELDS)
    values.append(payload.get("status", "draft"))

    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, tuple(values))
            row = cur.fetchone()
            conn.commit()
            return _row_to_dict(cur, row)


def list_scenarios(project_id: UUID, user_id: str) -> List[Dict[str, Any]]:
    sql = """
        SELECT id, name, status, optimization_goal, created_at
        FROM public.optimization_scenarios
        WHERE project_id = %s AND user_id = %s
        ORDER BY created_at DESC;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (str(project_id), user_id))
            rows = cur.fetchall()
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, r)) for r in rows]


def get_scenario(project_id: UUID, scenario_id: UUID, user_id: str) -> Optional[Dict[str, Any]]:
    sql = """
        SELECT * FROM public.optimization_scenarios
        WHERE project_id = %s AND id = %s AND user_id = %s;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (str(project_id), str(scenario_id), user_id))
            row = cur.fetchone()
            if not row:
                return None
            return _row_to_dict(cur, row)


def update_scenario_status(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str,
    status: str,
) -> Optional[Dict[str, Any]]:
    sql = """
        UPDATE public.optimization_scenarios
        SET status = %s, updated_at = now()
        WHERE project_id = %s AND id = %s AND user_id = %s
        RETURNING *;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (status, str(project_id), str(scenario_id), user_id))
            row = cur.fetchone()
            conn.commit()
            if not row:
                return None
            return _row_to_dict(cur, row)


def save_run(
    project_id: UUID,
    scenario_id: UUID,
    user_id: str,
    results: Dict[str, Any],
    strategies: List[Dict[str, Any]],
    cash_flows: List[Dict[str, Any]],
) -> Optional[Dict[str, Any]]:
    """
    Store a completed run in one transaction: the header gets the result
    metrics and status 'optimized', and the child strategy / cash-flow rows
    of any earlier run are replaced.
    """
    set_clause = ", ".join(f"{f} = %s" for f in SCENARIO_RESULT_FIELDS)
    sql_header = f"""
        UPDATE public.optimization_scenarios
        SET {set_clause}, status = 'optimized', updated_at = now()
        WHERE project_id = %s AND id = %s AND user_id = %s
        RETURNING *;
    """
    sql_strategy = f"""
        INSERT INTO public.scenario_strategies (scenario_id, {", ".join(STRATEGY_FIELDS)}, selected)
        VALUES (%s, {", ".join(["%s"] * len(STRATEGY_FIELDS))}, true);
    """
    sql_cash_flow = f"""
        INSERT INTO public.cash_flow_projections (scenario_id, {", ".join(CASH_FLOW_FIELDS)})
        VALUES (%s, {", ".join(["%s"] * len(CASH_FLOW_FIELDS))});
    """

    header_values = [results.get(f) for f in SCENARIO_RESULT_FIELDS]
    header_values.extend([str(project_id), str(scenario_id), user_id])

    with get_db_connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(sql_header, tuple(header_values))
                row = cur.fetchone()
                if not row:
                    conn.rollback()
                    return None
                header = _row_to_dict(cur, row)

                cur.execute("DELETE FROM public.scenario_strategies WHERE scenario_id = %s;", (str(scenario_id),))
                cur.execute("DELETE FROM public.cash_flow_projections WHERE scenario_id = %s;", (str(scenario_id),))

                cur.executemany(
                    sql_strategy,
                    [(str(scenario_id), *[s.get(f) for f in STRATEGY_FIELDS]) for s in strategies],
                )
                cur.executemany(
                    sql_cash_flow,
                    [(str(scenario_id), *[c.get(f) for f in CASH_FLOW_FIELDS]) for c in cash_flows],
                )
            conn.commit()
            return header
        except Exception:
            conn.rollback()
            raise


def get_scenario_strategies(scenario_id: UUID) -> List[Dict[str, Any]]:
    sql = f"""
        SELECT {", ".join(STRATEGY_FIELDS)}
        FROM public.scenario_strategies
        WHERE scenario_id = %s
        ORDER BY priority_score DESC;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (str(scenario_id),))
            rows = cur.fetchall()
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, r)) for r in rows]


def get_cash_flow_projections(scenario_id: UUID) -> List[Dict[str, Any]]:
    sql = f"""
        SELECT {", ".join(CASH_FLOW_FIELDS)}
        FROM public.cash_flow_projections
        WHERE scenario_id = %s
        ORDER BY year ASC;
    """
    with get_db_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (str(scenario_id),))
            rows = cur.fetchall()
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, r)) for r in rows]


def delete_scenario(project_id: UUID, scenario_id: UUID, user_id: str) -> bool:
    """Remove a scenario together with its strategy and cash-flow rows."""
    sql_owned = """
        SELECT 1 FROM public.optimization_scenarios
        WHERE project_id = %s AND id = %s AND user_id = %s;
    """
    with get_db_connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(sql_owned, (str(project_id), str(scenario_id), user_id))
                if not cur.fetchone():
                    return False
                cur.execute("DELETE FROM public.scenario_strategies WHERE scenario_id = %s;", (str(scenario_id),))
                cur.execute("DELETE FROM public.cash_flow_projections WHERE scenario_id = %s;", (str(scenario_id),))
                cur.execute("DELETE FROM public.optimization_scenarios WHERE id = %s;", (str(scenario_id),))
            conn.commit()
            return True
        except Exception:
            conn.rollback()
            raise
