"""
Domain errors raised by the settlement services.

Routes never catch these; ``main.py`` maps them to JSON responses.
"""


class SettlementError(Exception):
    """Base class for every error surfaced by the settlement engine."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SettlementError):
    """A precondition for the requested operation is not met. Nothing was written."""
    status_code = 422


class NotFoundError(SettlementError):
    """Trip, load, driver or settlement is missing or not owned by the caller."""
    status_code = 404


class ConflictError(SettlementError):
    """The trip is already settled, or a concurrent settle won the race."""
    status_code = 409


class PersistenceError(SettlementError):
    """An underlying write failed. The originating error is chained as ``__cause__``."""
    status_code = 500


class CalculationError(SettlementError):
    """A computed settlement failed its own consistency check. Nothing was written."""
    status_code = 500
