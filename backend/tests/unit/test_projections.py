"""Unit tests: session projections, receipts and duration formatting."""
from datetime import datetime, timedelta

import pytest

from charging_core.projections import build_receipt, elapsed_seconds, format_duration, project_session
from models.charging_session import ChargingSession

pytestmark = pytest.mark.unit

START = datetime(2026, 1, 1, 8, 0, 0)


def _session(**kwargs):
    values = {"charger_id": "c1", "token": "t", "start_time": START, "status": "ACTIVE"}
    values.update(kwargs)
    return ChargingSession(**values)


def test_active_projection_estimates_from_power():
    """ACTIVE: energy = power x elapsed hours, cost at the charger price."""
    session = _session()
    proj = project_session(session, price_per_kwh=3000.0, power_kw=60.0, now=START + timedelta(minutes=30))
    assert proj.elapsed_seconds == 1800
    assert proj.estimated_energy_kwh == 30.0
    assert proj.estimated_cost == 90000.0


def test_completed_projection_uses_recorded_values():
    """COMPLETED: recorded energy and cost, elapsed up to end_time."""
    session = _session(
        status="COMPLETED",
        end_time=START + timedelta(hours=1, minutes=5),
        energy_kwh=20.0,
        total_cost=60000.0,
    )
    proj = project_session(session, price_per_kwh=9999.0, power_kw=60.0, now=START + timedelta(days=1))
    assert proj.elapsed_seconds == 3900
    assert proj.estimated_energy_kwh == 20.0
    assert proj.estimated_cost == 60000.0


def test_cancelled_projection_is_free():
    """CANCELLED sessions project no energy and no cost."""
    session = _session(status="CANCELLED", end_time=START + timedelta(minutes=10))
    proj = project_session(session, price_per_kwh=3000.0, power_kw=60.0, now=START + timedelta(hours=2))
    assert proj.elapsed_seconds == 600
    assert proj.estimated_cost == 0.0


def test_elapsed_never_negative():
    """A clock behind the start time yields 0 seconds."""
    assert elapsed_seconds(_session(), START - timedelta(seconds=5)) == 0


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0h 00m"), (59, "0h 00m"), (3900, "1h 05m"), (36000, "10h 00m")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_receipt_with_change():
    """Cash handed over above the amount gives change."""
    receipt = build_receipt(60000.0, 100000.0)
    assert receipt.amount_received == 100000.0
    assert receipt.change == 40000.0


def test_receipt_defaults_to_exact_amount():
    """No amount received means exact payment, zero change."""
    receipt = build_receipt(60000.0)
    assert receipt.amount_received == 60000.0
    assert receipt.change == 0.0


def test_receipt_underpayment_has_no_negative_change():
    """Change is never negative."""
    assert build_receipt(100.0, 50.0).change == 0.0
