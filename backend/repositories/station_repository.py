"""Station repository: list, get, create."""
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.station import Station


def list_stations(session: Session) -> list[Station]:
    """Return all stations."""
    result = session.execute(select(Station).order_by(Station.name))
    return list(result.scalars().all())


def get_station(session: Session, station_id: str) -> Optional[Station]:
    """Return a station by id or None."""
    return session.get(Station, station_id)


def create_station(session: Session, name: str, address: str, station_id: str | None = None) -> Station:
    """Create a station, commit, and return it. Id is generated if not provided."""
    station = Station(id=station_id or str(uuid.uuid4()), name=name, address=address)
    session.add(station)
    session.commit()
    session.refresh(station)
    return station
