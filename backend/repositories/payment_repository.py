"""Payment repository: create, get, and lookups by session and account."""
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.payment import Payment


def create_payment(
    session: Session,
    *,
    session_id: str,
    amount: float,
    method: str,
    status: str,
    created_at: datetime,
    account_id: str | None = None,
) -> Payment:
    """Insert a payment and flush it. Does not commit."""
    payment = Payment(
        session_id=session_id,
        account_id=account_id,
        amount=amount,
        method=method,
        status=status,
        created_at=created_at,
    )
    session.add(payment)
    session.flush()
    return payment


def get_payment(session: Session, payment_id: str) -> Optional[Payment]:
    """Return payment by id or None."""
    return session.get(Payment, payment_id)


def get_completed_payment_for_session(session: Session, session_id: str) -> Optional[Payment]:
    """Return the COMPLETED payment for a session, or None."""
    return session.execute(
        select(Payment).where(Payment.session_id == session_id, Payment.status == "COMPLETED")
    ).scalar_one_or_none()


def list_payments_for_session(session: Session, session_id: str) -> list[Payment]:
    """Return every payment recorded against a session, oldest first."""
    result = session.execute(
        select(Payment).where(Payment.session_id == session_id).order_by(Payment.created_at)
    )
    return list(result.scalars().all())


def list_payments_by_account(session: Session, account_id: str) -> list[Payment]:
    """Return payments made by an account, newest first."""
    result = session.execute(
        select(Payment)
        .where(Payment.account_id == account_id)
        .order_by(Payment.created_at.desc())
    )
    return list(result.scalars().all())
