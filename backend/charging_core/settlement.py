"""Settlement: turn a COMPLETED session into exactly one COMPLETED payment.

The charged amount is the cost recorded when the session was closed; it is
never recomputed here. For WALLET payments the debit, the payment row and the
session back-reference are written in one transaction, so a refused debit
leaves no payment behind and a committed payment always has its debit.
"""
import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from charging_core.accounts import AccountLedger
from charging_core.errors import AlreadySettled, InvalidPaymentMethod, SessionNotClosed
from charging_core.ledger import SessionLedger
from charging_core.states import PaymentMethod, PaymentStatus, SessionStatus
from charging_core.timing import utcnow
from models.payment import Payment
from repositories import payment_repository, session_repository

LOG = logging.getLogger(__name__)


def parse_method(method: str | PaymentMethod) -> PaymentMethod:
    """Accept WALLET / CASH / CARD in any case."""
    if isinstance(method, PaymentMethod):
        return method
    try:
        return PaymentMethod(str(method).upper())
    except ValueError as e:
        raise InvalidPaymentMethod(f"unknown payment method {method!r}") from e


class SettlementService:
    """Owns payment records."""

    def __init__(
        self,
        ledger: SessionLedger,
        accounts: AccountLedger,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ledger = ledger
        self._accounts = accounts
        self._clock = clock

    def settle(self, db: Session, session_id: str, method: str | PaymentMethod) -> Payment:
        method = parse_method(method)
        session = self._ledger.get(db, session_id)
        if session.status != SessionStatus.COMPLETED.value:
            LOG.warning("Settle rejected: session %s is %s", session_id, session.status)
            raise SessionNotClosed(f"session {session_id} is {session.status}; stop it before paying")
        if session.payment_id is not None or payment_repository.get_completed_payment_for_session(db, session_id):
            LOG.warning("Settle rejected: session %s is already paid", session_id)
            raise AlreadySettled(f"session {session_id} is already paid")
        if method is PaymentMethod.WALLET and session.account_id is None:
            raise InvalidPaymentMethod("walk-in sessions cannot be paid from a wallet")

        amount = float(session.total_cost or 0.0)
        account_id = session.account_id
        try:
            with db.begin_nested():
                if method is PaymentMethod.WALLET:
                    self._accounts.debit(db, account_id, amount)
                # CASH and CARD are collected outside the system; the record is final on creation.
                payment = payment_repository.create_payment(
                    db,
                    session_id=session_id,
                    account_id=account_id,
                    amount=amount,
                    method=method.value,
                    status=PaymentStatus.COMPLETED.value,
                    created_at=self._clock(),
                )
                payment_id = payment.id
                if not session_repository.set_payment_reference(db, session_id, payment_id):
                    raise AlreadySettled(f"session {session_id} is already paid")
            db.commit()
        except IntegrityError as e:
            LOG.warning("Settle of session %s lost a race with another settlement", session_id)
            raise AlreadySettled(f"session {session_id} is already paid") from e
        LOG.info("Session %s settled by %s: %.2f (payment %s)", session_id, method.value, amount, payment_id)
        return payment_repository.get_payment(db, payment_id)
