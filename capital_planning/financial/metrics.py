# capital_planning/financial/metrics.py

import logging
from typing import Iterable, Sequence

import numpy as np
from scipy.optimize import brentq

from capital_planning.errors import NumericalError

logger = logging.getLogger(__name__)

# Default payback when benefits never recover the cost
PAYBACK_SENTINEL = 999.0

# IRR search bracket: -99% .. +1000%
IRR_RATE_FLOOR = -0.99
IRR_RATE_CEILING = 10.0


def present_value(amount: float, years: float, rate: float) -> float:
    """Discount a single future amount back `years` years at `rate`."""
    return amount / (1 + rate) ** years


def net_present_value(
    discounted_benefits: Iterable[float],
    discounted_costs: Iterable[float],
) -> float:
    return float(sum(discounted_benefits)) - float(sum(discounted_costs))


def npv_of_cash_flows(cash_flows: Sequence[float], rate: float) -> float:
    """
    NPV of a series where cash_flows[0] happens today (t=0),
    cash_flows[1] one year from now, and so on.
    """
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(flows / np.power(1 + rate, periods)))


def return_on_investment(benefit: float, cost: float) -> float:
    """ROI in percent. Zero cost has no meaningful ROI and reports 0."""
    if cost == 0:
        return 0.0
    return (benefit - cost) / cost * 100


def payback_period(
    cost: float,
    annual_benefit: float,
    sentinel: float = PAYBACK_SENTINEL,
) -> float:
    if annual_benefit <= 0:
        return sentinel
    return cost / annual_benefit


def internal_rate_of_return(
    cash_flows: Sequence[float],
    low: float = IRR_RATE_FLOOR,
    high: float = IRR_RATE_CEILING,
    max_iterations: int = 200,
    tolerance: float = 1e-7,
) -> float:
    """
    Rate (as a fraction, 0.1 == 10%) at which the series' NPV is zero.

    Brent's method inside [low, high]. Raises NumericalError when the bracket
    holds no sign change or the iteration budget runs out.
    """
    if len(cash_flows) < 2:
        raise NumericalError("IRR needs at least two cash flows.")

    def npv_at_rate(rate: float) -> float:
        return npv_of_cash_flows(cash_flows, rate)

    try:
        rate, info = brentq(
            npv_at_rate,
            low,
            high,
            xtol=tolerance,
            maxiter=max_iterations,
            full_output=True,
        )
    except ValueError as e:
        raise NumericalError(
            f"IRR not bracketed between {low:.2%} and {high:.2%}: "
            "cash flows never change the sign of NPV."
        ) from e
    except RuntimeError as e:
        raise NumericalError(f"IRR did not converge within {max_iterations} iterations.") from e

    logger.debug("IRR converged to %.6f after %d iterations", rate, info.iterations)
    return float(rate)
