"""
Shared fixtures
- In-memory SQLite (StaticPool so every session sees the same database)
- get_db and the realtime/push/mail providers overridden with fakes
"""

import copy
import re

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shipday.api.deps import get_mailer, get_push_client, get_realtime
from shipday.api.websocket import ConnectionManager
from shipday.database import Base, get_db
from shipday.main import app
from shipday.models import Driver
from shipday.models.driver import DriverStatus, VehicleType
from shipday.services.auth import hash_password

DRIVER_PASSWORD = "Str0ng!pass"


class FakeRealtime:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    async def emit(self, event: str, payload: dict):
        self.events.append((event, payload))


class FakePushClient:
    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False
        self.enabled = True

    async def send(self, token, title, body, data=None):
        if self.fail:
            raise RuntimeError("push gateway unavailable")
        self.sent.append({"token": token, "title": title, "body": body, "data": data})
        return {}


class FakeMailer:
    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, to, subject, body):
        if self.fail:
            raise RuntimeError("mail gateway unavailable")
        self.sent.append({"to": to, "subject": subject, "body": body})
        return True

    def last_code(self, to: str) -> str:
        body = next(m["body"] for m in reversed(self.sent) if m["to"] == to)
        return re.search(r"code is: (\w+)", body).group(1)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def realtime():
    return FakeRealtime()


@pytest.fixture
def push_client():
    return FakePushClient()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(session_factory, realtime, push_client, mailer):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_realtime] = lambda: realtime
    app.dependency_overrides[get_push_client] = lambda: push_client
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.state.ws_manager = ConnectionManager()

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def driver_password():
    return DRIVER_PASSWORD


@pytest.fixture
def make_driver(db):
    """Insert a driver directly; returns the ORM row."""
    counter = {"n": 0}

    def _make(status=DriverStatus.APPROVED, fcm_token=None, vehicle_type=VehicleType.VAN):
        counter["n"] += 1
        n = counter["n"]
        driver = Driver(
            driver_id=f"DRV{n:03d}",
            username=f"Driver {n}",
            email=f"driver{n}@shipday.test",
            phone=f"08200000{n:02d}",
            password=hash_password(DRIVER_PASSWORD),
            vehicle_type=vehicle_type,
            vehicle_number=f"CA {n:03d}-000",
            id_proof="uploads/id.pdf",
            status=status,
            fcm_token=fcm_token,
        )
        db.add(driver)
        db.commit()
        db.refresh(driver)
        return driver

    return _make


DETAILED_PAYLOAD = {
    "senderDetails": {
        "fullName": "Thandi van der Merwe",
        "email": "thandi@example.com",
        "mobile": "0831112222",
        "address": {"street": "12 Long St", "suburb": "City Bowl", "city": "Cape Town",
                    "province": "Western Cape", "postalCode": "8001"},
    },
    "collectionDetails": {
        "dispatcherName": "Thandi van der Merwe",
        "mobile": "0831112222",
        "address": {"street": "12 Long St", "suburb": "City Bowl", "city": "Cape Town",
                    "province": "Western Cape", "postalCode": "8001"},
        "numberOfItems": 2,
    },
    "deliveryDetails": {
        "receiverName": "Lerato Mokoena",
        "mobile": "0833334444",
        "address": {"street": "4 Main Rd", "suburb": "Braamfontein", "city": "Johannesburg",
                    "province": "Gauteng", "postalCode": "2001"},
    },
    "parcelDetails": {
        "serviceType": "express",
        "parcelType": "box",
        "dimensions": {"length": 30, "width": 20, "height": 15, "weight": 2.5},
        "specialInstructions": "Fragile",
    },
    "payment": {"method": "gateway", "amount": 150},
}

LEGACY_PAYLOAD = {
    "senderName": "Lerato Mokoena",
    "senderPhone": "0833334444",
    "receiverName": "Sipho Ndlovu",
    "receiverPhone": "0821234501",
    "start": "Johannesburg",
    "end": "Durban",
    "parcelWeight": 7,
    "packageType": "parcel",
    "cost": 250,
}


@pytest.fixture
def detailed_payload():
    return copy.deepcopy(DETAILED_PAYLOAD)


@pytest.fixture
def legacy_payload():
    return dict(LEGACY_PAYLOAD)


@pytest.fixture
def create_shipment(client):
    def _create(payload=None):
        response = client.post("/api/shipments", json=payload or dict(LEGACY_PAYLOAD))
        assert response.status_code == 201, response.text
        return response.json()["shipment"]

    return _create
