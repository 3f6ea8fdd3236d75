"""Station API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.deps import get_session_service
from api.errors import translate_errors
from api.serializers import station_status
from charging_core.service import SessionService
from db import get_db
from repositories.charger_repository import count_chargers_by_station
from repositories.station_repository import create_station as repo_create_station
from repositories.station_repository import list_stations as repo_list_stations
from schemas.stations import StationCreate, StationResponse, StationStatusResponse

router = APIRouter(prefix="/stations", tags=["stations"])


@router.get("", response_model=list[StationResponse])
def list_stations(db: Session = Depends(get_db)) -> list[StationResponse]:
    """List all stations."""
    stations = repo_list_stations(db)
    return [
        StationResponse(
            id=st.id,
            name=st.name,
            address=st.address,
            charger_count=count_chargers_by_station(db, st.id),
        )
        for st in stations
    ]


@router.post("", response_model=StationResponse, status_code=status.HTTP_201_CREATED)
def create_station(
    body: StationCreate,
    db: Session = Depends(get_db),
) -> StationResponse:
    """Create a new station."""
    st = repo_create_station(db, name=body.name, address=body.address)
    return StationResponse(id=st.id, name=st.name, address=st.address, charger_count=0)


@router.get("/{station_id}/status", response_model=StationStatusResponse)
def get_station_status(
    station_id: str,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> StationStatusResponse:
    """Staff status board: chargers with counts by status and the session running on each."""
    with translate_errors("Station status"):
        board = service.station_board(db, station_id)
    return station_status(board)
