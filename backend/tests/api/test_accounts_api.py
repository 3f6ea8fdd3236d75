"""API tests: accounts and wallet endpoints."""
import pytest

pytestmark = pytest.mark.api


def test_create_account(client):
    r = client.post(
        "/api/accounts",
        json={"email": "new@example.com", "full_name": "New Driver", "initial_balance": 500},
    )
    assert r.status_code == 201
    assert r.json()["wallet_balance"] == 500.0


def test_create_account_duplicate_email(client, account):
    r = client.post("/api/accounts", json={"email": account.email, "full_name": "Again"})
    assert r.status_code == 409


def test_create_account_negative_balance(client):
    r = client.post(
        "/api/accounts",
        json={"email": "neg@example.com", "full_name": "Neg", "initial_balance": -1},
    )
    assert r.status_code == 422


def test_wallet_and_top_up(client, account):
    r = client.get(f"/api/accounts/{account.id}/wallet")
    assert r.status_code == 200
    assert r.json()["balance"] == 100000.0
    r = client.post(f"/api/accounts/{account.id}/wallet/topup", json={"amount": 2500})
    assert r.status_code == 200
    assert r.json()["balance"] == 102500.0


def test_top_up_rejects_non_positive(client, account):
    r = client.post(f"/api/accounts/{account.id}/wallet/topup", json={"amount": 0})
    assert r.status_code == 422
    assert r.json()["detail"]["error"] == "invalid_amount"


def test_wallet_unknown_account(client):
    r = client.get("/api/accounts/acc-none/wallet")
    assert r.status_code == 404
    assert r.json()["detail"]["error"] == "account_not_found"


def test_payment_history(client, charger, account):
    s = client.post("/api/sessions", json={"charger_id": charger.id, "account_id": account.id}).json()
    client.post(f"/api/sessions/{s['id']}/stop", json={"energy_kwh": 2})
    paid = client.post(f"/api/sessions/{s['id']}/settle", json={"method": "WALLET"}).json()
    r = client.get(f"/api/accounts/{account.id}/payments")
    assert r.status_code == 200
    assert [p["id"] for p in r.json()] == [paid["payment"]["id"]]
    assert client.get("/api/accounts/acc-none/payments").status_code == 404
