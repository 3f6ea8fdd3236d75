"""Pydantic schemas for station API."""
from pydantic import BaseModel, Field

from schemas.chargers import ChargerSummary
from schemas.sessions import SessionSummary


class StationCreate(BaseModel):
    """Payload for creating a station."""

    name: str = Field(min_length=1)
    address: str


class StationResponse(BaseModel):
    """Station in API responses."""

    id: str
    name: str
    address: str
    charger_count: int = 0


class StationChargerStatus(BaseModel):
    """One charger on the staff status board, with its running session if any."""

    charger: ChargerSummary
    active_session: SessionSummary | None = None


class StationStatusResponse(BaseModel):
    """Staff status board for a station."""

    station_id: str
    station_name: str
    total_chargers: int
    available: int
    occupied: int
    out_of_order: int
    chargers: list[StationChargerStatus]
