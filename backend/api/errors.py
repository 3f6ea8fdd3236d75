"""Map charging-core errors onto HTTP responses."""
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from charging_core.errors import (
    ChargingError,
    DeadlineExceeded,
    InsufficientFunds,
    NotFound,
    StateConflict,
    ValidationFailed,
)

LOG = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "internal_error"


def _status_for(err: ChargingError) -> int:
    if isinstance(err, ValidationFailed):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(err, NotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(err, StateConflict):
        return status.HTTP_409_CONFLICT
    if isinstance(err, InsufficientFunds):
        return status.HTTP_402_PAYMENT_REQUIRED
    if isinstance(err, DeadlineExceeded):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(err: ChargingError) -> HTTPException:
    """HTTPException with detail {"error": code, "message": text}."""
    return HTTPException(
        status_code=_status_for(err),
        detail={"error": err.code, "message": err.message},
    )


def internal_error(exc: Exception, what: str) -> HTTPException:
    """Generic 500 for unexpected failures; the cause is logged, not returned."""
    LOG.exception("%s failed", what)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": INTERNAL_ERROR_CODE, "message": f"{what} failed due to an internal error"},
    )


@contextmanager
def translate_errors(what: str) -> Iterator[None]:
    """Turn core errors into their HTTP status and anything unexpected into a generic 500."""
    try:
        yield
    except ChargingError as e:
        raise to_http_exception(e) from e
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(e, what) from e
