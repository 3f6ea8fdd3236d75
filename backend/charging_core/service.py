"""Session service: the entry points used by drivers and staff.

Each call is one short unit of work on the caller's DB session. Charger-level
calls (start, fault) are serialised per charger and session-level calls (stop,
cancel, settle) per session, on top of the conditional updates the registry,
ledger and settlement already do at the storage layer.
"""
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from charging_core.accounts import AccountLedger, SqlAccountLedger
from charging_core.cost import validate_energy, validate_soc
from charging_core.errors import (
    AccountNotFound,
    DeadlineExceeded,
    PaymentNotFound,
    SessionNotActive,
    StationNotFound,
)
from charging_core.events import ChargingEvent, EventSink, LoggingEventSink
from charging_core.ledger import SessionLedger
from charging_core.locks import KeyedLocks
from charging_core.projections import Receipt, SessionProjection, build_receipt, project_session
from charging_core.registry import ChargerRegistry, ChargerSnapshot
from charging_core.settlement import SettlementService, parse_method
from charging_core.states import ChargerStatus, PaymentMethod, PaymentStatus
from charging_core.timing import Deadline, utcnow
from models.charging_session import ChargingSession
from models.payment import Payment
from repositories import account_repository, charger_repository, payment_repository, session_repository
from repositories.station_repository import get_station
from utils.config import SERVICE_DEADLINE_S

LOG = logging.getLogger(__name__)

WALK_IN_PLATE = "WALK_IN"


@dataclass(frozen=True, slots=True)
class SessionView:
    """A session together with its charger and the live projection."""

    session: ChargingSession
    charger: ChargerSnapshot
    projection: SessionProjection


@dataclass(frozen=True, slots=True)
class Settlement:
    payment: Payment
    receipt: Receipt


@dataclass(frozen=True, slots=True)
class Invoice:
    session: ChargingSession
    charger: ChargerSnapshot
    station_name: str | None
    projection: SessionProjection
    payment: Payment | None


@dataclass(frozen=True, slots=True)
class StationBoard:
    """Staff view of a station: every charger with its ACTIVE session, if any."""

    station_id: str
    station_name: str
    chargers: list[tuple[ChargerSnapshot, SessionView | None]]

    def count(self, status: ChargerStatus) -> int:
        return sum(1 for charger, _ in self.chargers if charger.status is status)


class SessionService:
    """Facade over registry, ledger and settlement. Collaborators are injected."""

    def __init__(
        self,
        registry: ChargerRegistry,
        ledger: SessionLedger,
        settlement: SettlementService,
        accounts: AccountLedger,
        *,
        locks: KeyedLocks | None = None,
        events: EventSink | None = None,
        clock: Callable[[], datetime] = utcnow,
        deadline_s: float = SERVICE_DEADLINE_S,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._settlement = settlement
        self._accounts = accounts
        self._locks = locks if locks is not None else KeyedLocks()
        self._events = events if events is not None else LoggingEventSink()
        self._clock = clock
        self._deadline_s = deadline_s

    # Commands ---------------------------------------------------------------

    def start_session(
        self,
        db: Session,
        charger_id: str,
        *,
        account_id: str | None = None,
        vehicle_plate: str | None = None,
        start_soc: int | None = None,
    ) -> ChargingSession:
        """Driver start (account_id given) or walk-in start (account_id None)."""
        validate_soc(start_soc)
        deadline = Deadline(self._deadline_s)
        with self._exclusive(db, f"charger:{charger_id}", deadline):
            if account_id is not None and account_repository.get_account(db, account_id) is None:
                raise AccountNotFound(f"account {account_id} not found")
            session = self._ledger.open(
                db,
                charger_id,
                account_id=account_id,
                vehicle_plate=vehicle_plate,
                start_soc=start_soc,
                deadline=deadline,
            )
        self._publish(ChargingEvent("session_started", charger_id=charger_id, session_id=session.id))
        return session

    def start_walk_in(
        self,
        db: Session,
        charger_id: str,
        *,
        vehicle_plate: str | None = None,
        start_soc: int | None = None,
    ) -> ChargingSession:
        """Staff-initiated start for a customer without an account."""
        return self.start_session(
            db,
            charger_id,
            vehicle_plate=vehicle_plate or WALK_IN_PLATE,
            start_soc=start_soc,
        )

    def stop_session(
        self,
        db: Session,
        session_id: str,
        energy_kwh: float,
        *,
        end_soc: int | None = None,
    ) -> ChargingSession:
        energy = validate_energy(energy_kwh)
        validate_soc(end_soc)
        with self._exclusive(db, f"session:{session_id}", Deadline(self._deadline_s)):
            session = self._ledger.close(db, session_id, energy, end_soc=end_soc)
        self._publish(
            ChargingEvent(
                "session_completed",
                charger_id=session.charger_id,
                session_id=session.id,
                amount=session.total_cost,
            )
        )
        return session

    def cancel_session(self, db: Session, session_id: str, reason: str | None = None) -> ChargingSession:
        with self._exclusive(db, f"session:{session_id}", Deadline(self._deadline_s)):
            session = self._ledger.cancel(db, session_id, reason)
        self._publish(
            ChargingEvent("session_cancelled", charger_id=session.charger_id, session_id=session.id, detail=reason)
        )
        return session

    def settle(
        self,
        db: Session,
        session_id: str,
        method: str | PaymentMethod,
        *,
        amount_received: float | None = None,
    ) -> Settlement:
        method = parse_method(method)
        with self._exclusive(db, f"session:{session_id}", Deadline(self._deadline_s)):
            payment = self._settlement.settle(db, session_id, method)
        self._publish(
            ChargingEvent(
                "payment_settled",
                session_id=session_id,
                payment_id=payment.id,
                amount=payment.amount,
                detail=payment.method,
            )
        )
        received = amount_received if method is PaymentMethod.CASH else None
        return Settlement(payment=payment, receipt=build_receipt(payment.amount, received))

    def report_fault(self, db: Session, charger_id: str, description: str) -> ChargerSnapshot:
        """Mark the charger OUT_OF_ORDER and cancel the session running on it, if any.

        If the cancel cannot get the session within the deadline, DeadlineExceeded reaches the
        caller with the charger already OUT_OF_ORDER; reporting the fault again retries the cancel.
        """
        with self._exclusive(db, f"charger:{charger_id}", Deadline(self._deadline_s)):
            snapshot = self._registry.mark_fault(db, charger_id, description)
            active = session_repository.get_active_session_for_charger(db, charger_id)
            active_id = active.id if active is not None else None
            db.commit()
        self._publish(ChargingEvent("charger_faulted", charger_id=charger_id, detail=description))
        if active_id is not None:
            try:
                self.cancel_session(db, active_id, reason=f"charger fault: {description}")
            except SessionNotActive:
                # Stopped or cancelled concurrently; nothing left to cancel.
                LOG.info("Session %s on faulted charger %s already ended", active_id, charger_id)
            except DeadlineExceeded:
                LOG.warning(
                    "Session %s on faulted charger %s is still ACTIVE; cancel timed out", active_id, charger_id
                )
                raise
        return snapshot

    def top_up(self, db: Session, account_id: str, amount: float) -> float:
        """Add funds to a wallet and return the new balance."""
        self._accounts.credit(db, account_id, amount)
        db.commit()
        return self._accounts.get_balance(db, account_id)

    # Queries ----------------------------------------------------------------

    def wallet_balance(self, db: Session, account_id: str) -> float:
        return self._accounts.get_balance(db, account_id)

    def describe_session(self, db: Session, session_id: str) -> SessionView:
        session = self._ledger.get(db, session_id)
        return self._view(db, session)

    def invoice(self, db: Session, session_id: str) -> Invoice:
        view = self.describe_session(db, session_id)
        station = get_station(db, view.charger.station_id)
        return Invoice(
            session=view.session,
            charger=view.charger,
            station_name=station.name if station is not None else None,
            projection=view.projection,
            payment=payment_repository.get_completed_payment_for_session(db, session_id),
        )

    def get_payment(self, db: Session, payment_id: str) -> Payment:
        payment = payment_repository.get_payment(db, payment_id)
        if payment is None:
            raise PaymentNotFound(f"payment {payment_id} not found")
        return payment

    def payment_history(self, db: Session, account_id: str) -> list[Payment]:
        if account_repository.get_account(db, account_id) is None:
            raise AccountNotFound(f"account {account_id} not found")
        return [
            p
            for p in payment_repository.list_payments_by_account(db, account_id)
            if p.status != PaymentStatus.PENDING.value
        ]

    def station_board(self, db: Session, station_id: str) -> StationBoard:
        station = get_station(db, station_id)
        if station is None:
            raise StationNotFound(f"station {station_id} not found")
        rows = charger_repository.list_chargers_by_station(db, station_id)
        active = {
            s.charger_id: s
            for s in session_repository.list_active_sessions_for_chargers(db, [r.id for r in rows])
        }
        now = self._clock()
        chargers = []
        for row in rows:
            snapshot = ChargerSnapshot.from_row(row)
            session = active.get(row.id)
            view = None
            if session is not None:
                view = SessionView(session, snapshot, self._project(session, snapshot, now))
            chargers.append((snapshot, view))
        return StationBoard(station_id=station.id, station_name=station.name, chargers=chargers)

    # Internals --------------------------------------------------------------

    @contextmanager
    def _exclusive(self, db: Session, key: str, deadline: Deadline) -> Iterator[None]:
        # No DB transaction may be held while waiting for a lock: its holder may need the DB.
        if db.in_transaction():
            db.commit()
        with self._locks.hold(key, deadline.remaining()):
            yield

    def _view(self, db: Session, session: ChargingSession) -> SessionView:
        charger = self._registry.get(db, session.charger_id)
        return SessionView(session, charger, self._project(session, charger, self._clock()))

    def _project(self, session: ChargingSession, charger: ChargerSnapshot, now: datetime) -> SessionProjection:
        return project_session(
            session,
            price_per_kwh=charger.price_per_kwh,
            power_kw=charger.power_kw,
            now=now,
        )

    def _publish(self, event: ChargingEvent) -> None:
        try:
            self._events.publish(event)
        except Exception:
            LOG.exception("Event sink failed for %s", event.kind)


def build_session_service(
    *,
    accounts: AccountLedger | None = None,
    events: EventSink | None = None,
    locks: KeyedLocks | None = None,
    clock: Callable[[], datetime] = utcnow,
    deadline_s: float = SERVICE_DEADLINE_S,
) -> SessionService:
    """Wire the default collaborators together."""
    accounts = accounts or SqlAccountLedger()
    registry = ChargerRegistry(clock=clock)
    ledger = SessionLedger(registry, clock=clock)
    settlement = SettlementService(ledger, accounts, clock=clock)
    return SessionService(
        registry,
        ledger,
        settlement,
        accounts,
        locks=locks,
        events=events,
        clock=clock,
        deadline_s=deadline_s,
    )
