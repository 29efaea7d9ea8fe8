"""Unit tests for the discounting and return helpers."""

import pytest

from capital_planning.errors import NumericalError
from capital_planning.financial.metrics import (
    PAYBACK_SENTINEL,
    internal_rate_of_return,
    net_present_value,
    npv_of_cash_flows,
    payback_period,
    present_value,
    return_on_investment,
)


class TestDiscounting:
    def test_present_value(self):
        assert present_value(1000, 2, 0.10) == pytest.approx(826.4463, rel=1e-6)

    def test_present_value_today_is_face_value(self):
        assert present_value(1000, 0, 0.05) == 1000

    def test_net_present_value(self):
        assert net_present_value([100, 50], [30, 20]) == 100

    def test_npv_of_cash_flows_starts_at_t0(self):
        assert npv_of_cash_flows([-100, 110], 0.10) == pytest.approx(0.0, abs=1e-9)


class TestReturns:
    def test_roi(self):
        assert return_on_investment(150, 100) == pytest.approx(50.0)

    def test_roi_zero_cost(self):
        assert return_on_investment(150, 0) == 0.0

    def test_payback(self):
        assert payback_period(1000, 250) == 4.0

    def test_payback_without_benefit_uses_sentinel(self):
        assert payback_period(1000, 0) == PAYBACK_SENTINEL
        assert payback_period(1000, -5, sentinel=42) == 42


class TestInternalRateOfReturn:
    def test_single_period(self):
        assert internal_rate_of_return([-100, 110]) == pytest.approx(0.10, abs=1e-5)

    def test_two_periods(self):
        # 60v^2 + 60v - 100 = 0 with v = 1 / (1 + r)
        assert internal_rate_of_return([-100, 60, 60]) == pytest.approx(0.13066, abs=1e-4)

    def test_negative_rate(self):
        assert internal_rate_of_return([-100, 50]) == pytest.approx(-0.5, abs=1e-5)

    def test_no_sign_change_raises(self):
        with pytest.raises(NumericalError):
            internal_rate_of_return([100, 100, 100])

    def test_too_short_raises(self):
        with pytest.raises(NumericalError):
            internal_rate_of_return([-100])

    def test_iteration_budget_exhausted_raises(self):
        with pytest.raises(NumericalError, match="converge"):
            internal_rate_of_return([-100, 60, 60], max_iterations=3, tolerance=1e-12)

    def test_root_zeroes_npv(self):
        flows = [-250_000, 40_000, 55_000, 70_000, 90_000, 110_000]
        rate = internal_rate_of_return(flows, tolerance=1e-10)

        assert npv_of_cash_flows(flows, rate) == pytest.approx(0.0, abs=1e-2)

    def test_solver_errors_are_chained(self):
        with pytest.raises(NumericalError) as bracket:
            internal_rate_of_return([100, 100])
        with pytest.raises(NumericalError) as budget:
            internal_rate_of_return([-100, 60, 60], max_iterations=2, tolerance=1e-14)

        assert isinstance(bracket.value.__cause__, ValueError)
        assert isinstance(budget.value.__cause__, RuntimeError)
