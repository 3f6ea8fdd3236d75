# Charging core: charger registry, session ledger, cost, settlement, session service
from charging_core.errors import ChargingError
from charging_core.ledger import SessionLedger
from charging_core.registry import ChargerRegistry, ChargerSnapshot
from charging_core.service import SessionService, build_session_service
from charging_core.settlement import SettlementService
from charging_core.states import ChargerStatus, PaymentMethod, PaymentStatus, SessionStatus

__all__ = [
    "ChargerRegistry",
    "ChargerSnapshot",
    "ChargerStatus",
    "ChargingError",
    "PaymentMethod",
    "PaymentStatus",
    "SessionLedger",
    "SessionService",
    "SessionStatus",
    "SettlementService",
    "build_session_service",
]
