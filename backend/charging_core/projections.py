"""Read-only projections derived from stored records; never written back."""
from dataclasses import dataclass
from datetime import datetime

from charging_core.cost import calculate_cost
from charging_core.states import SessionStatus
from models.charging_session import ChargingSession


@dataclass(frozen=True, slots=True)
class SessionProjection:
    """Presentation data for a session at a given instant."""

    elapsed_seconds: int
    estimated_energy_kwh: float
    estimated_cost: float


@dataclass(frozen=True, slots=True)
class Receipt:
    """Cash-desk view of a payment: what was due, what was handed over, the change."""

    amount: float
    amount_received: float
    change: float


def elapsed_seconds(session: ChargingSession, now: datetime) -> int:
    """Seconds from start to end time, or to now while the session has no end."""
    end = session.end_time or now
    return max(0, int((end - session.start_time).total_seconds()))


def project_session(
    session: ChargingSession,
    *,
    price_per_kwh: float,
    power_kw: float,
    now: datetime,
) -> SessionProjection:
    """Elapsed time and cost so far.

    A COMPLETED session reports its recorded energy and cost. An ACTIVE session has no
    meter reading yet, so energy is estimated from the charger's rated power and elapsed time.
    """
    elapsed = elapsed_seconds(session, now)
    if session.status == SessionStatus.COMPLETED.value:
        return SessionProjection(
            elapsed_seconds=elapsed,
            estimated_energy_kwh=float(session.energy_kwh or 0.0),
            estimated_cost=float(session.total_cost or 0.0),
        )
    if session.status != SessionStatus.ACTIVE.value:
        return SessionProjection(elapsed_seconds=elapsed, estimated_energy_kwh=0.0, estimated_cost=0.0)
    energy = round(power_kw * elapsed / 3600.0, 3)
    return SessionProjection(
        elapsed_seconds=elapsed,
        estimated_energy_kwh=energy,
        estimated_cost=calculate_cost(energy, price_per_kwh),
    )


def format_duration(seconds: int) -> str:
    """'1h 05m' style duration for invoices."""
    hours, rem = divmod(max(0, seconds), 3600)
    return f"{hours}h {rem // 60:02d}m"


def build_receipt(amount: float, amount_received: float | None = None) -> Receipt:
    """Receipt for a payment; amount_received defaults to the exact amount."""
    received = amount if amount_received is None or amount_received <= 0 else float(amount_received)
    return Receipt(amount=amount, amount_received=received, change=round(max(0.0, received - amount), 2))
