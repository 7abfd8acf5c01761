"""Error kinds raised by the planning core and the catalog layer.

Routers translate these into HTTP responses via ``status_code``; the
services themselves never build HTTP errors.
"""


class PlanningError(ValueError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_detail(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(PlanningError):
    """Malformed or missing request fields."""
    status_code = 400


class NotFoundError(PlanningError):
    status_code = 404


class ConflictError(PlanningError):
    status_code = 409


class NoCircuitMatch(PlanningError):
    """No circuit satisfies the combined tag/experience/theme filter."""
    status_code = 404


class NoHomestayAvailable(PlanningError):
    """The selected circuit has no homestays."""
    status_code = 404


class BudgetExceeded(PlanningError):
    """No homestay (plus transport, when requested) fits the budget."""
    status_code = 422
