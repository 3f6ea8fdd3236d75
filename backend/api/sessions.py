"""Charging session API routes: start (driver / staff walk-in), get, stop, cancel."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.deps import get_session_service
from api.errors import translate_errors
from api.serializers import session_summary
from charging_core.service import SessionService
from db import get_db
from schemas.sessions import (
    CancelSessionRequest,
    SessionSummary,
    StaffStartSessionRequest,
    StartSessionRequest,
    StopSessionRequest,
)

router = APIRouter(tags=["sessions"])


@router.post("/sessions", response_model=SessionSummary, status_code=status.HTTP_201_CREATED)
def start_session(
    body: StartSessionRequest,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> SessionSummary:
    """Driver starts charging on an AVAILABLE charger."""
    with translate_errors("Start session"):
        session = service.start_session(
            db,
            body.charger_id,
            account_id=body.account_id,
            vehicle_plate=body.vehicle_plate,
            start_soc=body.start_soc,
        )
        view = service.describe_session(db, session.id)
    return session_summary(view)


@router.post("/staff/sessions", response_model=SessionSummary, status_code=status.HTTP_201_CREATED)
def start_walk_in_session(
    body: StaffStartSessionRequest,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> SessionSummary:
    """Staff starts charging for a walk-in customer without an account."""
    with translate_errors("Start walk-in session"):
        session = service.start_walk_in(
            db,
            body.charger_id,
            vehicle_plate=body.vehicle_plate,
            start_soc=body.start_soc,
        )
        view = service.describe_session(db, session.id)
    return session_summary(view)


@router.get("/sessions/{session_id}", response_model=SessionSummary)
def get_session(
    session_id: str,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> SessionSummary:
    """Session detail with elapsed time and cost so far."""
    with translate_errors("Get session"):
        view = service.describe_session(db, session_id)
    return session_summary(view)


@router.post("/sessions/{session_id}/stop", response_model=SessionSummary)
def stop_session(
    session_id: str,
    body: StopSessionRequest,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> SessionSummary:
    """Stop an ACTIVE session; cost is priced and the charger freed."""
    with translate_errors("Stop session"):
        session = service.stop_session(db, session_id, body.energy_kwh, end_soc=body.end_soc)
        view = service.describe_session(db, session.id)
    return session_summary(view)


@router.post("/sessions/{session_id}/cancel", response_model=SessionSummary)
def cancel_session(
    session_id: str,
    body: CancelSessionRequest,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> SessionSummary:
    """Abort an ACTIVE session without charging for it."""
    with translate_errors("Cancel session"):
        session = service.cancel_session(db, session_id, body.reason)
        view = service.describe_session(db, session.id)
    return session_summary(view)
