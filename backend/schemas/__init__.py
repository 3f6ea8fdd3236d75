# Schemas package
from .chargers import ChargerSummary
from .health import HealthResponse
from .payments import PaymentResponse, SettleResponse
from .sessions import SessionSummary

__all__ = [
    "ChargerSummary",
    "HealthResponse",
    "PaymentResponse",
    "SessionSummary",
    "SettleResponse",
]
