"""EV charging network: session lifecycle and settlement service, FastAPI backend."""
import logging
import os
import subprocess
import sys

import uvicorn
from fastapi import FastAPI

from utils.config import LOG_LEVEL, PORT

# Session transitions, settlements and charger faults are logged at INFO.
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logging.getLogger("charging_core").setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
from fastapi.middleware.cors import CORSMiddleware

from api.accounts import router as accounts_router
from api.chargers import router as chargers_router
from api.payments import router as payments_router
from api.routes import router
from api.sessions import router as sessions_router
from api.stations import router as stations_router
from charging_core.service import build_session_service

app = FastAPI(
    title="EV Charging Core",
    description="Charging-session lifecycle and payment settlement for an EV charging network",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:8080", "http://127.0.0.1:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Collaborators are built once and injected into routes via api.deps.get_session_service.
app.state.session_service = build_session_service()

app.include_router(router, prefix="/api")
app.include_router(stations_router, prefix="/api")
app.include_router(chargers_router, prefix="/api")
app.include_router(accounts_router, prefix="/api")
app.include_router(sessions_router, prefix="/api")
app.include_router(payments_router, prefix="/api")


@app.on_event("startup")
def startup() -> None:
    """Run DB migrations."""
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=backend_dir,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise RuntimeError(f"Alembic upgrade failed: {result.stderr or result.stdout}")


@app.get("/")
def root() -> dict:
    """Root redirect/info."""
    return {"service": "charging-core", "docs": "/docs", "health": "/api/health"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT, log_level=LOG_LEVEL.lower())
