"""FastAPI dependencies shared by the routers."""
from fastapi import Request

from charging_core.service import SessionService


def get_session_service(request: Request) -> SessionService:
    """The SessionService built at startup and stored on app.state."""
    return request.app.state.session_service
