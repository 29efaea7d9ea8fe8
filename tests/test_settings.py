"""Heuristic configuration, bearer-token auth and error mapping."""

import json

import pydantic
import pytest
from fastapi import HTTPException
from jose import jwt

from capital_planning.errors import (
    NotFoundError,
    NumericalError,
    OptimizationInfeasible,
    ValidationError,
)
from capital_planning.optimization import heuristics as heuristics_module
from capital_planning.optimization.heuristics import HeuristicSettings, load_heuristics
from capital_planning.routers.auth import get_current_user_id
from capital_planning.routers.http_errors import to_http_exception


class TestHeuristicSettings:
    def test_defaults(self):
        h = HeuristicSettings()

        assert h.condition_score("Poor") == 30
        assert h.condition_score("unknown") == 50
        assert h.condition_score(None) == 50
        assert h.portfolio_target_ci == 90
        assert h.value_weight_divisor == 1_000_000

    def test_frozen(self):
        with pytest.raises(pydantic.ValidationError):
            HeuristicSettings().deferral_years = 7

    def test_load_overrides_from_file(self, tmp_path):
        path = tmp_path / "heuristics.json"
        path.write_text(json.dumps({"deferral_years": 4, "portfolio_target_ci": 85}))

        h = load_heuristics(path)

        assert h.deferral_years == 4
        assert h.portfolio_target_ci == 85
        assert h.defer_cost_share == 0.1

    def test_unknown_override_rejected(self, tmp_path):
        path = tmp_path / "heuristics.json"
        path.write_text(json.dumps({"not_a_setting": 1}))

        with pytest.raises(pydantic.ValidationError):
            load_heuristics(path)

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = tmp_path / "heuristics.json"
        path.write_text(json.dumps({"sensitivity_steps": 4}))
        monkeypatch.setenv(heuristics_module.HEURISTICS_ENV_VAR, str(path))
        heuristics_module.get_heuristics.cache_clear()

        try:
            assert heuristics_module.get_heuristics().sensitivity_steps == 4
        finally:
            heuristics_module.get_heuristics.cache_clear()


class TestBearerAuth:
    SECRET = "test-secret"

    @pytest.fixture(autouse=True)
    def secret(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_JWT_SECRET", self.SECRET)

    def test_valid_token(self):
        token = jwt.encode({"sub": "user-42"}, self.SECRET, algorithm="HS256")

        assert get_current_user_id(f"Bearer {token}") == "user-42"

    @pytest.mark.parametrize(
        "header",
        [None, "Bearer", "Bearer not-a-jwt", "Token abc def"],
    )
    def test_rejected_headers(self, header):
        with pytest.raises(HTTPException) as exc:
            get_current_user_id(header)
        assert exc.value.status_code == 401

    def test_wrong_scheme(self):
        token = jwt.encode({"sub": "user-42"}, self.SECRET, algorithm="HS256")

        with pytest.raises(HTTPException):
            get_current_user_id(f"Basic {token}")

    def test_missing_subject(self):
        token = jwt.encode({"role": "anon"}, self.SECRET, algorithm="HS256")

        with pytest.raises(HTTPException):
            get_current_user_id(f"Bearer {token}")


@pytest.mark.parametrize(
    "error, status",
    [
        (NotFoundError("missing"), 404),
        (ValidationError("bad"), 422),
        (OptimizationInfeasible(), 409),
        (NumericalError("diverged"), 422),
    ],
)
def test_error_mapping(error, status):
    exc = to_http_exception(error)

    assert exc.status_code == status
    assert exc.detail == str(error)
