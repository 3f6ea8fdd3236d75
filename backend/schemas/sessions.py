"""Pydantic schemas for charging session API."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class StartSessionRequest(BaseModel):
    """Driver start: the session is linked to the driver's account."""

    charger_id: str
    account_id: str
    vehicle_plate: str | None = Field(default=None, max_length=32)
    start_soc: int | None = Field(default=None, ge=0, le=100)


class StaffStartSessionRequest(BaseModel):
    """Staff start for a walk-in customer (no account)."""

    charger_id: str
    vehicle_plate: str | None = Field(default=None, max_length=32)
    start_soc: int | None = Field(default=None, ge=0, le=100)


class StopSessionRequest(BaseModel):
    """energy_kwh is required; range checks happen in the core so they map to invalid_measurement."""

    energy_kwh: float | None = None
    end_soc: int | None = None


class CancelSessionRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1024)


class SessionSummary(BaseModel):
    """Session as returned by every session endpoint, with read-only live projections."""

    id: str
    token: str
    charger_id: str
    account_id: str | None = None
    vehicle_plate: str | None = None
    status: Literal["ACTIVE", "COMPLETED", "CANCELLED"]
    start_time: datetime
    end_time: datetime | None = None
    start_soc: int | None = None
    end_soc: int | None = None
    energy_kwh: float | None = None
    total_cost: float | None = None
    payment_id: str | None = None
    elapsed_seconds: int = 0
    estimated_cost: float = 0.0
