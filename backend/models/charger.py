"""Charger model for DB persistence."""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class Charger(Base):
    """Charger table: one charging point at a station, with its status and price per kWh."""

    __tablename__ = "charger"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    station_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("station.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    connector_type: Mapped[str] = mapped_column(String(32), nullable=False, default="CCS2")
    power_kw: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=False, default=22.0)
    price_per_kwh: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=False)
    # AVAILABLE / OCCUPIED / OUT_OF_ORDER. Only written through conditional updates in the registry.
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="AVAILABLE")
    fault_reason: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime(), nullable=True)
