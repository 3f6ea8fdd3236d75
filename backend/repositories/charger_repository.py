"""Charger repository: create, get, list, and guarded status updates."""
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from models.charger import Charger as ChargerModel


def create_charger(
    session: Session,
    *,
    station_id: str,
    name: str,
    price_per_kwh: float,
    connector_type: str = "CCS2",
    power_kw: float = 22.0,
    charger_id: str | None = None,
) -> ChargerModel:
    """Create an AVAILABLE charger, commit, and return it."""
    charger = ChargerModel(
        station_id=station_id,
        name=name,
        price_per_kwh=price_per_kwh,
        connector_type=connector_type,
        power_kw=power_kw,
        status="AVAILABLE",
    )
    if charger_id is not None:
        charger.id = charger_id
    session.add(charger)
    session.commit()
    session.refresh(charger)
    return charger


def get_charger(session: Session, charger_id: str, *, fresh: bool = False) -> Optional[ChargerModel]:
    """Return charger by id or None. fresh=True re-reads the row over any identity-map copy."""
    if fresh:
        return session.get(ChargerModel, charger_id, populate_existing=True)
    return session.get(ChargerModel, charger_id)


def list_chargers_by_station(session: Session, station_id: str) -> list[ChargerModel]:
    """Return all chargers for a station."""
    result = session.execute(
        select(ChargerModel)
        .where(ChargerModel.station_id == station_id)
        .order_by(ChargerModel.name)
    )
    return list(result.scalars().all())


def count_chargers_by_station(session: Session, station_id: str) -> int:
    """Return the number of chargers at a station."""
    result = session.execute(
        select(func.count()).select_from(ChargerModel).where(ChargerModel.station_id == station_id)
    )
    return result.scalar() or 0


def transition_status(
    session: Session,
    charger_id: str,
    *,
    expected: Iterable[str],
    new_status: str,
    changed_at: datetime,
    fault_reason: str | None = None,
) -> bool:
    """Set status only if the current status is one of expected (compare-and-swap).

    Returns True if the row was updated. Does not commit.
    """
    values = {"status": new_status, "status_changed_at": changed_at}
    if new_status == "OUT_OF_ORDER":
        values["fault_reason"] = fault_reason
    result = session.execute(
        update(ChargerModel)
        .where(ChargerModel.id == charger_id, ChargerModel.status.in_(list(expected)))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
