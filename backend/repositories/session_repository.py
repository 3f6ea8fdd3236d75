"""Charging session repository: create, get, list, guarded status transitions."""
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models.charging_session import ChargingSession


def create_session(
    session: Session,
    *,
    charger_id: str,
    token: str,
    start_time: datetime,
    account_id: str | None = None,
    vehicle_plate: str | None = None,
    start_soc: int | None = None,
) -> ChargingSession:
    """Insert an ACTIVE session and flush it. Does not commit."""
    row = ChargingSession(
        charger_id=charger_id,
        account_id=account_id,
        vehicle_plate=vehicle_plate,
        start_time=start_time,
        start_soc=start_soc,
        status="ACTIVE",
        token=token,
    )
    session.add(row)
    session.flush()
    return row


def get_session(session: Session, session_id: str, *, fresh: bool = False) -> Optional[ChargingSession]:
    """Return session by id or None. fresh=True re-reads the row over any identity-map copy."""
    if fresh:
        return session.get(ChargingSession, session_id, populate_existing=True)
    return session.get(ChargingSession, session_id)


def get_active_session_for_charger(session: Session, charger_id: str) -> Optional[ChargingSession]:
    """Return the ACTIVE session on a charger, or None."""
    return session.execute(
        select(ChargingSession).where(
            ChargingSession.charger_id == charger_id,
            ChargingSession.status == "ACTIVE",
        )
    ).scalar_one_or_none()


def list_active_sessions_for_chargers(session: Session, charger_ids: list[str]) -> list[ChargingSession]:
    """Return ACTIVE sessions on any of the given chargers."""
    if not charger_ids:
        return []
    result = session.execute(
        select(ChargingSession).where(
            ChargingSession.charger_id.in_(charger_ids),
            ChargingSession.status == "ACTIVE",
        )
    )
    return list(result.scalars().all())


def count_active_sessions_for_charger(session: Session, charger_id: str) -> int:
    """Return the number of ACTIVE sessions on a charger (0 or 1 when the invariant holds)."""
    return len(
        session.execute(
            select(ChargingSession.id).where(
                ChargingSession.charger_id == charger_id,
                ChargingSession.status == "ACTIVE",
            )
        ).all()
    )


def transition_from_active(session: Session, session_id: str, new_status: str, **values: Any) -> bool:
    """Move an ACTIVE session to new_status with the given column values (compare-and-swap).

    Returns True if the row was ACTIVE and is now updated. Does not commit.
    """
    result = session.execute(
        update(ChargingSession)
        .where(ChargingSession.id == session_id, ChargingSession.status == "ACTIVE")
        .values(status=new_status, **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def set_payment_reference(session: Session, session_id: str, payment_id: str) -> bool:
    """Record the settlement back-reference on a COMPLETED, unsettled session. Does not commit."""
    result = session.execute(
        update(ChargingSession)
        .where(
            ChargingSession.id == session_id,
            ChargingSession.status == "COMPLETED",
            ChargingSession.payment_id.is_(None),
        )
        .values(payment_id=payment_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
