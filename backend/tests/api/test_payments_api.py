"""API tests: settlement, invoice and payment endpoints."""
import pytest

from repositories.account_repository import create_account

pytestmark = pytest.mark.api


def _completed_session(client, charger_id, account_id=None, energy=20):
    if account_id is None:
        s = client.post("/api/staff/sessions", json={"charger_id": charger_id}).json()
    else:
        s = client.post("/api/sessions", json={"charger_id": charger_id, "account_id": account_id}).json()
    client.post(f"/api/sessions/{s['id']}/stop", json={"energy_kwh": energy})
    return s["id"]


def test_settle_wallet(client, charger, account):
    """Wallet 100000, cost 60000: 200 with the payment and the new balance 40000."""
    sid = _completed_session(client, charger.id, account.id)
    r = client.post(f"/api/sessions/{sid}/settle", json={"method": "WALLET"})
    assert r.status_code == 200
    data = r.json()
    assert data["payment"]["amount"] == 60000.0
    assert data["payment"]["status"] == "COMPLETED"
    assert data["new_wallet_balance"] == 40000.0
    assert client.get(f"/api/sessions/{sid}").json()["payment_id"] == data["payment"]["id"]


def test_settle_insufficient_funds_402(client, charger, db_session):
    poor = create_account(db_session, email="api-poor@example.com", full_name="Poor", wallet_balance=10000.0)
    sid = _completed_session(client, charger.id, poor.id)
    r = client.post(f"/api/sessions/{sid}/settle", json={"method": "WALLET"})
    assert r.status_code == 402
    assert r.json()["detail"]["error"] == "insufficient_funds"
    assert client.get(f"/api/accounts/{poor.id}/wallet").json()["balance"] == 10000.0
    assert client.get(f"/api/sessions/{sid}/invoice").json()["payment"] is None


def test_settle_twice_409(client, charger, account):
    sid = _completed_session(client, charger.id, account.id)
    client.post(f"/api/sessions/{sid}/settle", json={"method": "CARD"})
    r = client.post(f"/api/sessions/{sid}/settle", json={"method": "CARD"})
    assert r.status_code == 409
    assert r.json()["detail"]["error"] == "already_settled"


def test_settle_active_session_409(client, charger, account):
    s = client.post("/api/sessions", json={"charger_id": charger.id, "account_id": account.id}).json()
    r = client.post(f"/api/sessions/{s['id']}/settle", json={"method": "CASH"})
    assert r.status_code == 409
    assert r.json()["detail"]["error"] == "session_not_closed"


def test_settle_unknown_method_422(client, charger, account):
    sid = _completed_session(client, charger.id, account.id)
    r = client.post(f"/api/sessions/{sid}/settle", json={"method": "BARTER"})
    assert r.status_code == 422
    assert r.json()["detail"]["error"] == "invalid_payment_method"


def test_settle_unknown_session_404(client):
    r = client.post("/api/sessions/no-such-session/settle", json={"method": "CASH"})
    assert r.status_code == 404


def test_walk_in_cash_receipt(client, charger):
    """Cash for a walk-in: change on the receipt, no wallet balance."""
    sid = _completed_session(client, charger.id)
    r = client.post(f"/api/sessions/{sid}/settle", json={"method": "cash", "amount_received": 70000})
    assert r.status_code == 200
    data = r.json()
    assert data["receipt"]["change"] == 10000.0
    assert data["new_wallet_balance"] is None
    assert data["payment"]["method"] == "CASH"


def test_walk_in_wallet_422(client, charger):
    sid = _completed_session(client, charger.id)
    r = client.post(f"/api/sessions/{sid}/settle", json={"method": "WALLET"})
    assert r.status_code == 422


def test_invoice(client, charger, station, account):
    sid = _completed_session(client, charger.id, account.id)
    paid = client.post(f"/api/sessions/{sid}/settle", json={"method": "CARD"}).json()
    r = client.get(f"/api/sessions/{sid}/invoice")
    assert r.status_code == 200
    inv = r.json()
    assert inv["station_name"] == station.name
    assert inv["charger_name"] == charger.name
    assert inv["total_cost"] == 60000.0
    assert inv["payment"]["id"] == paid["payment"]["id"]
    assert inv["duration"].endswith("m")


def test_get_payment(client, charger, account):
    sid = _completed_session(client, charger.id, account.id)
    paid = client.post(f"/api/sessions/{sid}/settle", json={"method": "CARD"}).json()
    r = client.get(f"/api/payments/{paid['payment']['id']}")
    assert r.status_code == 200
    assert r.json()["session_id"] == sid
    r = client.get("/api/payments/pay-none")
    assert r.status_code == 404
    assert r.json()["detail"]["error"] == "payment_not_found"
