"""
Shared fixtures: in-memory SQLite database, API client and logged-in accounts.
"""
import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import fleetledger.models  # noqa: F401
from fleetledger.db.base import Base
from fleetledger.db.session import get_db
from fleetledger.main import app
from fleetledger.models import Admin, Driver, SystemUser, Vehicle
from fleetledger.services.auth_service import set_password

PASSWORD = "secret123"


@pytest.fixture
def db():
    """Fresh database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    account = Admin(name="FELIPE")
    set_password(account, PASSWORD)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def driver(db):
    account = Driver(name="PAULO", cnh="12345678900", phone="11999990000")
    set_password(account, PASSWORD)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def vehicle(db):
    truck = Vehicle(plate="ABC1D23", model="Volvo FH 540", chassi="9BVXXX")
    db.add(truck)
    db.commit()
    db.refresh(truck)
    return truck


@pytest.fixture
def finance_user(db):
    user = SystemUser(name="maria")
    set_password(user, PASSWORD)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _login(client, path: str, username: str) -> dict:
    response = client.post(path, json={"username": username, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, admin):
    return _login(client, "/api/auth/login", admin.name)


@pytest.fixture
def driver_headers(client, driver):
    return _login(client, "/api/auth/login", driver.name)


@pytest.fixture
def finance_headers(client, finance_user):
    return _login(client, "/api/auth/finance/login", finance_user.name)


@pytest.fixture
def trip_payload(driver, vehicle):
    return {
        "driver_id": driver.id,
        "vehicle_id": vehicle.id,
        "origin": "Campinas",
        "destination": "Curitiba",
        "start_date": date.today().isoformat(),
        "start_km": "1000",
        "driver_commission_rate": "10",
    }


def as_decimal(value) -> Decimal:
    """JSON decimals arrive as strings or numbers."""
    return Decimal(str(value))
