"""Exception hierarchy for consistent error handling.

API errors inherit from RoboAuditError, which carries the status_code and
user-facing message the global exception handler renders.
"""

INTERNAL_ERROR_MESSAGE = (
    "Oops, there was a problem trying to process your request. Please try again later."
)
VALIDATION_ERROR_MESSAGE = "Request data improperly formatted!"


class RoboAuditError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE) -> None:
        self.message = message
        super().__init__(message)

    def to_body(self) -> dict:
        return {"msg": self.message}


class AuditNotFoundError(RoboAuditError):
    """Raised when the referenced audit does not exist."""

    status_code = 404


class AuditPageNotFoundError(RoboAuditError):
    """Raised when a requested page holds no audits."""

    status_code = 404

    def __init__(self, total_audits: int, message: str = "No audits found!") -> None:
        super().__init__(message)
        self.total_audits = total_audits

    def to_body(self) -> dict:
        return {"msg": self.message, "total_audits": self.total_audits}


class ConflictError(RoboAuditError):
    """Raised when a write would break the one-rating-per-audit invariant."""

    status_code = 409


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing or malformed."""
