"""Charger API routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_session_service
from api.errors import translate_errors
from api.serializers import charger_summary
from charging_core.registry import ChargerSnapshot
from charging_core.service import SessionService
from db import get_db
from repositories.charger_repository import (
    create_charger as repo_create_charger,
    get_charger as repo_get_charger,
    list_chargers_by_station as repo_list_chargers_by_station,
)
from repositories.station_repository import get_station
from schemas.chargers import ChargerCreate, ChargerSummary, FaultReport
from utils.config import DEFAULT_PRICE_PER_KWH

LOG = logging.getLogger(__name__)

router = APIRouter(tags=["chargers"])


@router.get("/stations/{station_id}/chargers", response_model=list[ChargerSummary])
def list_chargers_by_station(station_id: str, db: Session = Depends(get_db)) -> list[ChargerSummary]:
    """List all chargers at a station."""
    if get_station(db, station_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    return [charger_summary(ChargerSnapshot.from_row(row)) for row in repo_list_chargers_by_station(db, station_id)]


@router.post(
    "/stations/{station_id}/chargers",
    response_model=ChargerSummary,
    status_code=status.HTTP_201_CREATED,
)
def create_charger(
    station_id: str,
    body: ChargerCreate,
    db: Session = Depends(get_db),
) -> ChargerSummary:
    """Create a new AVAILABLE charger at a station."""
    if get_station(db, station_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    price = body.price_per_kwh if body.price_per_kwh is not None else DEFAULT_PRICE_PER_KWH
    row = repo_create_charger(
        db,
        station_id=station_id,
        name=body.name,
        connector_type=body.connector_type,
        power_kw=body.power_kw,
        price_per_kwh=price,
    )
    LOG.info("Charger %s created at station %s (price %.2f)", row.id, station_id, price)
    return charger_summary(ChargerSnapshot.from_row(row))


@router.get("/chargers/{charger_id}", response_model=ChargerSummary)
def get_charger(charger_id: str, db: Session = Depends(get_db)) -> ChargerSummary:
    """Charger detail: status, price and fault reason."""
    row = repo_get_charger(db, charger_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Charger not found")
    return charger_summary(ChargerSnapshot.from_row(row))


@router.post("/chargers/{charger_id}/fault", response_model=ChargerSummary)
def report_fault(
    charger_id: str,
    body: FaultReport,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> ChargerSummary:
    """Report an incident: the charger goes OUT_OF_ORDER and its running session is cancelled."""
    with translate_errors("Report fault"):
        snapshot = service.report_fault(db, charger_id, body.description)
    return charger_summary(snapshot)
