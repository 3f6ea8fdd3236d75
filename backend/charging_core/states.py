"""Charger, session and payment states, and the legal session transitions."""
from enum import Enum


class ChargerStatus(str, Enum):
    """Charger availability as seen by drivers and staff."""
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    OUT_OF_ORDER = "OUT_OF_ORDER"


class SessionStatus(str, Enum):
    """Charging session lifecycle."""
    INIT = "INIT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    WALLET = "WALLET"
    CASH = "CASH"
    CARD = "CARD"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# Valid session transitions: from_state -> set of allowed to_states.
# INIT is never stored: a session row is written directly as ACTIVE.
_SESSION_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.INIT: {SessionStatus.ACTIVE},
    SessionStatus.ACTIVE: {SessionStatus.COMPLETED, SessionStatus.CANCELLED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.CANCELLED: set(),
}


def can_transition(current: str, new: SessionStatus) -> bool:
    """Check if a session may move from current to new."""
    try:
        allowed = _SESSION_TRANSITIONS[SessionStatus(current)]
    except ValueError:
        return False
    return new in allowed
