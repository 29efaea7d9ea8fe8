# capital_planning/routers/http_errors.py

from fastapi import HTTPException

from capital_planning.errors import (
    CapitalPlanningError,
    NotFoundError,
    NumericalError,
    OptimizationInfeasible,
    ValidationError,
)


def to_http_exception(exc: CapitalPlanningError) -> HTTPException:
    """Map engine errors onto HTTP status codes for the routers."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, OptimizationInfeasible):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, NumericalError):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
