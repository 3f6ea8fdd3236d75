"""ChargingSession model for DB persistence."""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class ChargingSession(Base):
    """charging_session table: one charging event on a charger. account_id is NULL for walk-ins."""

    __tablename__ = "charging_session"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    account_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("account.id", ondelete="SET NULL"),
        nullable=True,
    )
    charger_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("charger.id", ondelete="CASCADE"),
        nullable=False,
    )
    vehicle_plate: Mapped[str | None] = mapped_column(String(32), nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(), nullable=True)
    start_soc: Mapped[int | None] = mapped_column(Integer, nullable=True)
    end_soc: Mapped[int | None] = mapped_column(Integer, nullable=True)
    energy_kwh: Mapped[float | None] = mapped_column(Numeric(12, 3, asdecimal=False), nullable=True)
    total_cost: Mapped[float | None] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    # ACTIVE / COMPLETED / CANCELLED
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")
    # Opaque correlation token shown to the driver (QR code, receipts).
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    cancel_reason: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    # Settlement back-reference; no FK so session and payment tables stay acyclic.
    payment_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        # Storage-level guard: at most one ACTIVE session per charger.
        Index(
            "uq_charging_session_active_charger",
            "charger_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )
