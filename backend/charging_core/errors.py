"""Domain error taxonomy for the charging core.

Four caller-facing categories (validation, state conflict, resource, not found),
each error with a stable ``code``. DeadlineExceeded is an internal failure and
sits outside the domain categories.
"""


class ChargingError(Exception):
    """Base for every error the charging core raises on purpose."""

    code = "charging_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code.replace("_", " "))

    @property
    def message(self) -> str:
        return str(self)


# Categories ---------------------------------------------------------------


class ValidationFailed(ChargingError):
    """Malformed or missing input, rejected before any state is touched."""

    code = "validation_failed"


class StateConflict(ChargingError):
    """The requested transition is illegal for the current state; safe to retry after re-reading."""

    code = "state_conflict"


class ResourceError(ChargingError):
    """The caller lacks a resource (funds) to complete the request."""

    code = "resource_error"


class NotFound(ChargingError):
    """A referenced entity does not exist."""

    code = "not_found"


# Validation ---------------------------------------------------------------


class InvalidMeasurement(ValidationFailed):
    code = "invalid_measurement"


class InvalidPaymentMethod(ValidationFailed):
    code = "invalid_payment_method"


class InvalidAmount(ValidationFailed):
    code = "invalid_amount"


# State conflicts ----------------------------------------------------------


class ChargerUnavailable(StateConflict):
    code = "charger_unavailable"


class SessionNotActive(StateConflict):
    code = "session_not_active"


class SessionNotClosed(StateConflict):
    code = "session_not_closed"


class AlreadySettled(StateConflict):
    code = "already_settled"


# Resources ----------------------------------------------------------------


class InsufficientFunds(ResourceError):
    code = "insufficient_funds"


# Not found ----------------------------------------------------------------


class ChargerNotFound(NotFound):
    code = "charger_not_found"


class SessionNotFound(NotFound):
    code = "session_not_found"


class AccountNotFound(NotFound):
    code = "account_not_found"


class StationNotFound(NotFound):
    code = "station_not_found"


class PaymentNotFound(NotFound):
    code = "payment_not_found"


# Internal -----------------------------------------------------------------


class DeadlineExceeded(ChargingError):
    """The request ran past its service deadline. Partial work has been compensated."""

    code = "deadline_exceeded"
