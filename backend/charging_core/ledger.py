"""Session ledger: owns charging sessions and their ACTIVE -> COMPLETED/CANCELLED lifecycle.

Opening reserves the charger first and releases it again if the session row
cannot be written. Closing and cancelling always release the charger they
freed, even when pricing fails, because a charger stuck OCCUPIED is worse
than a session that could not be priced.
"""
import logging
import secrets
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from charging_core.cost import calculate_cost, validate_energy, validate_soc
from charging_core.errors import ChargerUnavailable, SessionNotActive, SessionNotFound, StateConflict
from charging_core.registry import ChargerRegistry
from charging_core.states import ChargerStatus, SessionStatus, can_transition
from charging_core.timing import Deadline, utcnow
from models.charging_session import ChargingSession
from repositories import session_repository

LOG = logging.getLogger(__name__)


def new_token() -> str:
    """Opaque correlation token for QR codes and receipts."""
    return secrets.token_urlsafe(16)


class SessionLedger:
    """Session state machine on top of the charger registry."""

    def __init__(
        self,
        registry: ChargerRegistry,
        *,
        clock: Callable[[], datetime] = utcnow,
        token_factory: Callable[[], str] = new_token,
        cost_calculator: Callable[[float, float], float] = calculate_cost,
    ) -> None:
        self._registry = registry
        self._clock = clock
        self._token_factory = token_factory
        self._calculate_cost = cost_calculator

    def get(self, db: Session, session_id: str) -> ChargingSession:
        """Return the session as currently stored, or raise SessionNotFound."""
        row = session_repository.get_session(db, session_id, fresh=True)
        if row is None:
            raise SessionNotFound(f"session {session_id} not found")
        return row

    def open(
        self,
        db: Session,
        charger_id: str,
        *,
        account_id: str | None = None,
        vehicle_plate: str | None = None,
        start_soc: int | None = None,
        deadline: Deadline | None = None,
    ) -> ChargingSession:
        """Reserve the charger and create an ACTIVE session on it."""
        validate_soc(start_soc)
        self._registry.reserve(db, charger_id)
        try:
            with db.begin_nested():
                if deadline is not None:
                    deadline.check("session open")
                row = session_repository.create_session(
                    db,
                    charger_id=charger_id,
                    account_id=account_id,
                    vehicle_plate=vehicle_plate,
                    start_soc=start_soc,
                    start_time=self._clock(),
                    token=self._token_factory(),
                )
                session_id = row.id
                # A fault may have landed between reserve and insert.
                if self._registry.get(db, charger_id).status is not ChargerStatus.OCCUPIED:
                    raise ChargerUnavailable(f"charger {charger_id} changed state during start")
            db.commit()
        except IntegrityError as e:
            if not db.is_active:
                db.rollback()
            if session_repository.get_active_session_for_charger(db, charger_id) is not None:
                # Another ACTIVE session already holds this charger; it stays OCCUPIED for that one.
                db.commit()
                LOG.warning("Charger %s already has an ACTIVE session", charger_id)
                raise ChargerUnavailable(f"charger {charger_id} already has an active session") from e
            LOG.exception("Session insert on charger %s failed; releasing reservation", charger_id)
            self._registry.release_with_retry(db, charger_id)
            raise
        except Exception:
            LOG.warning("Session creation on charger %s failed; releasing reservation", charger_id)
            self._registry.release_with_retry(db, charger_id)
            raise
        LOG.info("Session %s opened on charger %s (account=%s)", session_id, charger_id, account_id)
        return self.get(db, session_id)

    def close(
        self,
        db: Session,
        session_id: str,
        energy_kwh: float,
        *,
        end_soc: int | None = None,
    ) -> ChargingSession:
        """ACTIVE -> COMPLETED with energy and cost at the charger's current price; releases the charger."""
        energy = validate_energy(energy_kwh)
        validate_soc(end_soc)
        row = self._require_active(db, session_id)
        charger_id = row.charger_id
        try:
            with db.begin_nested():
                charger = self._registry.get(db, charger_id)
                cost = self._calculate_cost(energy, charger.price_per_kwh)
                closed = session_repository.transition_from_active(
                    db,
                    session_id,
                    SessionStatus.COMPLETED.value,
                    end_time=self._clock(),
                    energy_kwh=energy,
                    end_soc=end_soc,
                    total_cost=cost,
                )
                if not closed:
                    raise SessionNotActive(f"session {session_id} is no longer active")
            db.commit()
        except StateConflict:
            raise
        except Exception:
            LOG.exception("Closing session %s failed; cancelling it and releasing charger %s", session_id, charger_id)
            self._abort(db, session_id, "close failed")
            self._registry.release_with_retry(db, charger_id)
            raise
        self._registry.release_with_retry(db, charger_id)
        LOG.info("Session %s completed: %.3f kWh, cost %.2f", session_id, energy, cost)
        return self.get(db, session_id)

    def cancel(self, db: Session, session_id: str, reason: str | None = None) -> ChargingSession:
        """ACTIVE -> CANCELLED without cost; releases the charger."""
        row = self._require_active(db, session_id)
        charger_id = row.charger_id
        with db.begin_nested():
            cancelled = session_repository.transition_from_active(
                db,
                session_id,
                SessionStatus.CANCELLED.value,
                end_time=self._clock(),
                cancel_reason=reason,
            )
            if not cancelled:
                raise SessionNotActive(f"session {session_id} is no longer active")
        db.commit()
        self._registry.release_with_retry(db, charger_id)
        LOG.info("Session %s cancelled: %s", session_id, reason)
        return self.get(db, session_id)

    def _require_active(self, db: Session, session_id: str) -> ChargingSession:
        row = self.get(db, session_id)
        if not can_transition(row.status, SessionStatus.COMPLETED):
            LOG.warning("Session %s is %s, not ACTIVE", session_id, row.status)
            raise SessionNotActive(f"session {session_id} is {row.status}")
        return row

    def _abort(self, db: Session, session_id: str, reason: str) -> None:
        """Best-effort CANCELLED after a failed close, so the released charger has no ACTIVE session."""
        try:
            if not db.is_active:
                db.rollback()
            session_repository.transition_from_active(
                db,
                session_id,
                SessionStatus.CANCELLED.value,
                end_time=self._clock(),
                cancel_reason=reason,
            )
            db.commit()
        except SQLAlchemyError:
            LOG.exception("Could not cancel session %s after failed close", session_id)
            db.rollback()
