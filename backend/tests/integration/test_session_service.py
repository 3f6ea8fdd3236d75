"""Integration tests: session service commands, queries and events."""
import threading
from datetime import datetime, timedelta

import pytest

from charging_core.errors import (
    AccountNotFound,
    ChargerNotFound,
    ChargerUnavailable,
    DeadlineExceeded,
    InsufficientFunds,
    InvalidAmount,
    InvalidMeasurement,
    PaymentNotFound,
    SessionNotActive,
    StationNotFound,
)
from charging_core.locks import KeyedLocks
from charging_core.service import WALK_IN_PLATE, build_session_service
from charging_core.states import ChargerStatus
from repositories.account_repository import create_account
from repositories.charger_repository import create_charger, get_charger

pytestmark = pytest.mark.integration


class RecordingSink:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


class BrokenSink:
    def publish(self, event):
        raise RuntimeError("sink down")


class ManualClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_driver_flow_start_stop_pay(db_session, service, charger, account):
    """Start, stop at 20 kWh (cost 60000), settle from a 100000 wallet: balance 40000."""
    s = service.start_session(db_session, charger.id, account_id=account.id, vehicle_plate="EV-1")
    assert get_charger(db_session, charger.id, fresh=True).status == "OCCUPIED"
    stopped = service.stop_session(db_session, s.id, 20.0)
    assert stopped.total_cost == 60000.0
    assert get_charger(db_session, charger.id, fresh=True).status == "AVAILABLE"
    result = service.settle(db_session, s.id, "WALLET")
    assert result.payment.amount == 60000.0
    assert result.receipt.change == 0.0
    assert service.wallet_balance(db_session, account.id) == 40000.0


def test_insufficient_funds(db_session, service, charger):
    """Balance 10000 against cost 60000 is refused and nothing is paid."""
    poor = create_account(db_session, email="svc-poor@example.com", full_name="Poor", wallet_balance=10000.0)
    s = service.start_session(db_session, charger.id, account_id=poor.id)
    service.stop_session(db_session, s.id, 20.0)
    with pytest.raises(InsufficientFunds):
        service.settle(db_session, s.id, "WALLET")
    assert service.wallet_balance(db_session, poor.id) == 10000.0
    assert service.invoice(db_session, s.id).payment is None


def test_start_unknown_account_leaves_charger_free(db_session, service, charger):
    """The account is checked before the charger is reserved."""
    with pytest.raises(AccountNotFound):
        service.start_session(db_session, charger.id, account_id="acc-none")
    assert get_charger(db_session, charger.id, fresh=True).status == "AVAILABLE"


def test_start_on_occupied_charger(db_session, service, charger, account):
    service.start_session(db_session, charger.id, account_id=account.id)
    with pytest.raises(ChargerUnavailable):
        service.start_walk_in(db_session, charger.id)


def test_start_on_unknown_charger(db_session, service):
    with pytest.raises(ChargerNotFound):
        service.start_walk_in(db_session, "no-such-charger")


def test_start_with_expired_deadline(db_session, charger):
    """A zero service deadline fails the start and leaves the charger AVAILABLE."""
    svc = build_session_service(deadline_s=0)
    with pytest.raises(DeadlineExceeded):
        svc.start_walk_in(db_session, charger.id)
    assert get_charger(db_session, charger.id, fresh=True).status == "AVAILABLE"


def test_walk_in_defaults_plate(db_session, service, charger):
    """Walk-ins have no account and a placeholder plate unless one is given."""
    s = service.start_walk_in(db_session, charger.id)
    assert s.account_id is None
    assert s.vehicle_plate == WALK_IN_PLATE
    service.cancel_session(db_session, s.id)
    s2 = service.start_walk_in(db_session, charger.id, vehicle_plate="XY-999", start_soc=15)
    assert s2.vehicle_plate == "XY-999"
    assert s2.start_soc == 15


def test_stop_twice(db_session, service, charger, account):
    s = service.start_session(db_session, charger.id, account_id=account.id)
    service.stop_session(db_session, s.id, 5.0)
    with pytest.raises(SessionNotActive):
        service.stop_session(db_session, s.id, 5.0)


def test_stop_rejects_bad_energy(db_session, service, charger, account):
    s = service.start_session(db_session, charger.id, account_id=account.id)
    with pytest.raises(InvalidMeasurement):
        service.stop_session(db_session, s.id, None)
    with pytest.raises(InvalidMeasurement):
        service.stop_session(db_session, s.id, 5.0, end_soc=120)


def test_cash_receipt_gives_change(db_session, service, charger):
    """Cash handed over above the amount produces change on the receipt."""
    s = service.start_walk_in(db_session, charger.id)
    service.stop_session(db_session, s.id, 20.0)
    result = service.settle(db_session, s.id, "CASH", amount_received=100000.0)
    assert result.receipt.amount == 60000.0
    assert result.receipt.amount_received == 100000.0
    assert result.receipt.change == 40000.0


def test_card_ignores_amount_received(db_session, service, charger, account):
    s = service.start_session(db_session, charger.id, account_id=account.id)
    service.stop_session(db_session, s.id, 1.0)
    result = service.settle(db_session, s.id, "CARD", amount_received=99999.0)
    assert result.receipt.amount_received == 3000.0
    assert result.receipt.change == 0.0


def test_fault_cancels_active_session(db_session, service, charger, account):
    """A charger fault marks it OUT_OF_ORDER and cancels the session running on it."""
    s = service.start_session(db_session, charger.id, account_id=account.id)
    snap = service.report_fault(db_session, charger.id, "cable torn")
    assert snap.status is ChargerStatus.OUT_OF_ORDER
    view = service.describe_session(db_session, s.id)
    assert view.session.status == "CANCELLED"
    assert "cable torn" in view.session.cancel_reason
    assert view.charger.status is ChargerStatus.OUT_OF_ORDER
    with pytest.raises(ChargerUnavailable):
        service.start_walk_in(db_session, charger.id)


def test_fault_cancel_timeout_is_reported(db_session, charger, account):
    """A fault whose cancel cannot get the session lock fails loudly; reporting it again cancels."""
    locks = KeyedLocks()
    svc = build_session_service(locks=locks, deadline_s=0.05)
    s = svc.start_session(db_session, charger.id, account_id=account.id)
    held = threading.Event()
    done = threading.Event()

    def holder():
        with locks.hold(f"session:{s.id}", 1.0):
            held.set()
            done.wait(2.0)

    t = threading.Thread(target=holder)
    t.start()
    try:
        assert held.wait(2.0)
        with pytest.raises(DeadlineExceeded):
            svc.report_fault(db_session, charger.id, "arc flash")
    finally:
        done.set()
        t.join()
    assert svc.describe_session(db_session, s.id).session.status == "ACTIVE"
    assert get_charger(db_session, charger.id, fresh=True).status == "OUT_OF_ORDER"
    svc.report_fault(db_session, charger.id, "arc flash")
    view = svc.describe_session(db_session, s.id)
    assert view.session.status == "CANCELLED"
    assert view.charger.status is ChargerStatus.OUT_OF_ORDER


def test_fault_after_session_stopped_elsewhere(db_session, service, charger, account):
    """A session that ended before the fault is left as it is."""
    s = service.start_session(db_session, charger.id, account_id=account.id)
    service.stop_session(db_session, s.id, 3.0)
    snap = service.report_fault(db_session, charger.id, "hinge broken")
    assert snap.status is ChargerStatus.OUT_OF_ORDER
    assert service.describe_session(db_session, s.id).session.status == "COMPLETED"


def test_fault_without_session(db_session, service, charger):
    snap = service.report_fault(db_session, charger.id, "display dead")
    assert snap.fault_reason == "display dead"


def test_fault_unknown_charger(db_session, service):
    with pytest.raises(ChargerNotFound):
        service.report_fault(db_session, "no-such-charger", "x")


def test_events_published(db_session, charger, account):
    """Start, stop, settle and fault each publish one event."""
    sink = RecordingSink()
    svc = build_session_service(events=sink)
    s = svc.start_session(db_session, charger.id, account_id=account.id)
    svc.stop_session(db_session, s.id, 2.0)
    payment = svc.settle(db_session, s.id, "WALLET").payment
    svc.report_fault(db_session, charger.id, "door jammed")
    kinds = [e.kind for e in sink.events]
    assert kinds == ["session_started", "session_completed", "payment_settled", "charger_faulted"]
    assert sink.events[1].amount == 6000.0
    assert sink.events[2].payment_id == payment.id


def test_broken_sink_does_not_fail_commands(db_session, charger):
    """A failing event sink is logged and otherwise ignored."""
    svc = build_session_service(events=BrokenSink())
    s = svc.start_walk_in(db_session, charger.id)
    assert svc.stop_session(db_session, s.id, 1.0).status == "COMPLETED"


def test_top_up(db_session, service, account):
    assert service.top_up(db_session, account.id, 2500.0) == 102500.0
    with pytest.raises(InvalidAmount):
        service.top_up(db_session, account.id, -5.0)
    with pytest.raises(AccountNotFound):
        service.top_up(db_session, "acc-none", 5.0)


def test_describe_active_session_projection(db_session, charger, account):
    """Thirty minutes on a 60 kW charger at 3000 per kWh: 30 kWh, 90000 estimated."""
    clock = ManualClock(datetime(2026, 6, 1, 12, 0, 0))
    svc = build_session_service(clock=clock)
    s = svc.start_session(db_session, charger.id, account_id=account.id)
    clock.now += timedelta(minutes=30)
    view = svc.describe_session(db_session, s.id)
    assert view.projection.elapsed_seconds == 1800
    assert view.projection.estimated_energy_kwh == 30.0
    assert view.projection.estimated_cost == 90000.0
    assert view.charger.id == charger.id


def test_invoice_and_payment_lookup(db_session, service, charger, station, account):
    s = service.start_session(db_session, charger.id, account_id=account.id)
    service.stop_session(db_session, s.id, 20.0)
    before = service.invoice(db_session, s.id)
    assert before.payment is None
    assert before.station_name == station.name
    payment = service.settle(db_session, s.id, "CARD").payment
    after = service.invoice(db_session, s.id)
    assert after.payment.id == payment.id
    assert after.projection.estimated_cost == 60000.0
    assert service.get_payment(db_session, payment.id).id == payment.id
    with pytest.raises(PaymentNotFound):
        service.get_payment(db_session, "pay-none")


def test_payment_history(db_session, service, charger, account):
    s = service.start_session(db_session, charger.id, account_id=account.id)
    service.stop_session(db_session, s.id, 1.0)
    payment = service.settle(db_session, s.id, "WALLET").payment
    assert [p.id for p in service.payment_history(db_session, account.id)] == [payment.id]
    with pytest.raises(AccountNotFound):
        service.payment_history(db_session, "acc-none")


def test_station_board(db_session, service, station, charger, account):
    """The board lists every charger with its ACTIVE session and counts by status."""
    spare = create_charger(db_session, station_id=station.id, name="Bay 2", price_per_kwh=2000.0)
    broken = create_charger(db_session, station_id=station.id, name="Bay 3", price_per_kwh=2000.0)
    s = service.start_session(db_session, charger.id, account_id=account.id)
    service.report_fault(db_session, broken.id, "no power")
    board = service.station_board(db_session, station.id)
    assert board.station_name == station.name
    assert board.count(ChargerStatus.OCCUPIED) == 1
    assert board.count(ChargerStatus.AVAILABLE) == 1
    assert board.count(ChargerStatus.OUT_OF_ORDER) == 1
    views = {snap.id: view for snap, view in board.chargers}
    assert views[charger.id].session.id == s.id
    assert views[spare.id] is None
    with pytest.raises(StationNotFound):
        service.station_board(db_session, "st-none")
