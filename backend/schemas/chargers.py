"""Pydantic schemas for charger API."""
from typing import Literal

from pydantic import BaseModel, Field


class ChargerCreate(BaseModel):
    """Payload for creating a charger. Price defaults to DEFAULT_PRICE_PER_KWH."""

    name: str = Field(min_length=1)
    connector_type: str = Field(default="CCS2")
    power_kw: float = Field(default=22.0, gt=0)
    price_per_kwh: float | None = Field(default=None, ge=0)


class ChargerSummary(BaseModel):
    """Charger list item and detail."""

    id: str
    station_id: str
    name: str
    connector_type: str
    power_kw: float
    price_per_kwh: float
    status: Literal["AVAILABLE", "OCCUPIED", "OUT_OF_ORDER"]
    fault_reason: str | None = None


class FaultReport(BaseModel):
    """Payload for reporting an incident on a charger."""

    description: str = Field(min_length=1, max_length=1024)
