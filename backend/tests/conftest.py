# Set test environment before any application or db imports.
import os

os.environ["TESTING"] = "true"
os.environ["TESTING_DATABASE_URL"] = "sqlite:///:memory:"

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from charging_core.service import build_session_service
from db import SessionLocal, get_db
from main import app
from models import Base
from models.account import Account  # noqa: F401 - register with Base
from models.charger import Charger  # noqa: F401
from models.charging_session import ChargingSession  # noqa: F401
from models.payment import Payment  # noqa: F401
from models.station import Station  # noqa: F401
from repositories.account_repository import create_account
from repositories.charger_repository import create_charger
from repositories.station_repository import create_station


def _get_engine():
    """Engine used by the app (in-memory when TESTING=true)."""
    return SessionLocal.kw["bind"]


@pytest.fixture(scope="session")
def engine():
    """One in-memory engine per test run; create tables once."""
    eng = _get_engine()
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def db_session(engine):
    """Function-scoped session; each test runs in a transaction that is rolled back."""
    connection = engine.connect()
    trans = connection.begin()
    session = Session(bind=connection)
    session.begin_nested()
    try:
        yield session
    finally:
        session.close()
        if trans.is_active:
            trans.rollback()
        connection.close()


def _override_get_db(session):
    """Return a generator that yields the given session (for dependency override)."""
    def override():
        yield session
    return override


@pytest.fixture
def client(db_session):
    """API test client; overrides get_db to use the test db_session, cleared on teardown."""
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def service():
    """A session service with its own lock table."""
    return build_session_service()


@pytest.fixture
def station(db_session):
    """Create a station (unique id per test)."""
    return create_station(db_session, "Test Station", "1 Test St", f"st-{uuid.uuid4().hex[:8]}")


@pytest.fixture
def charger(db_session, station):
    """AVAILABLE charger at 3000 per kWh, 60 kW."""
    return create_charger(
        db_session,
        station_id=station.id,
        name="Bay 1",
        price_per_kwh=3000.0,
        power_kw=60.0,
    )


@pytest.fixture
def account(db_session):
    """Driver account with a wallet of 100000."""
    return create_account(
        db_session,
        email=f"driver-{uuid.uuid4().hex[:8]}@example.com",
        full_name="Test Driver",
        wallet_balance=100000.0,
    )


def pytest_sessionfinish(session, exitstatus):
    """Remove any temporary test DB files created during the run (e.g. under /tmp)."""
    import glob
    for pattern in ["/tmp/test_*.db", "test_*.db"]:
        for path in glob.glob(pattern):
            try:
                os.remove(path)
            except OSError:
                pass
