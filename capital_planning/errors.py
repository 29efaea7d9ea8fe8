# capital_planning/errors.py


class CapitalPlanningError(Exception):
    """Base class for every error raised by the planning engines."""


class ValidationError(CapitalPlanningError):
    """Input is missing or unusable (unknown project, nothing assessed)."""


class NotFoundError(ValidationError):
    """A component has no assessment record in the requested project."""


class OptimizationInfeasible(CapitalPlanningError):
    """The project-selection program has no solution under the constraints."""

    def __init__(self, message: str = None):
        super().__init__(
            message
            or "No feasible solution found. Try relaxing constraints or increasing budget."
        )


class NumericalError(CapitalPlanningError):
    """An iterative numeric routine (IRR) failed to converge."""


class DataDefaulted(UserWarning):
    """
    Not an error: a missing input was replaced with a documented default.
    Emitted through the warnings module so callers can observe it.
    """
