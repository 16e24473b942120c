"""
Pytest configuration and shared fixtures.
"""

import asyncio
import os
import tempfile
from datetime import date, timedelta

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["NOTIFICATION_TIMEOUT_SECONDS"] = "0.5"
os.environ["BREVO_API_KEY"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["TWILIO_AUTH_TOKEN"] = ""
os.environ["UPLOAD_BASE_DIR"] = tempfile.mkdtemp(prefix="axteam-uploads-")
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.exceptions import NotificationError
from app.db.session import get_db
from app.dependencies.auth import get_notifier
from app.main import app
from app.models import Base, Service, User, UserRole
from app.services.notifications.base import NotificationChannel, SupportContact, EMAIL, SMS, WHATSAPP
from app.services.notifications.dispatcher import NotificationDispatcher, StaffContacts
from app.utils.auth import get_password_hash, create_user_token

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"


class FakeChannel(NotificationChannel):
    """Records every send; can be told to fail, raise or hang"""

    def __init__(self, name, configured=True, fail=False, explode=False, hang=False):
        self.name = name
        self.configured = configured
        self.fail = fail
        self.explode = explode
        self.hang = hang
        self.sent = []

    @property
    def is_configured(self):
        return self.configured

    async def _send(self, recipient, message):
        self.sent.append((recipient, message))
        if self.hang:
            await asyncio.sleep(3600)
        if self.explode:
            raise RuntimeError("unexpected provider crash")
        if self.fail:
            raise NotificationError(self.name, "simulated provider error")
        return f"{self.name}-{len(self.sent)}"


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def channels():
    return {
        EMAIL: FakeChannel(EMAIL),
        SMS: FakeChannel(SMS),
        WHATSAPP: FakeChannel(WHATSAPP),
    }


@pytest.fixture
def notifier(channels):
    return NotificationDispatcher(
        channels=channels,
        staff=StaffContacts(email="ops@axteam.com", phone="+919800000001", whatsapp="+919800000002"),
        support=SupportContact(phone="+91-9876543210", email="support@axteam.com", whatsapp="+91-9876543210"),
    )


@pytest.fixture
def client(db_session, notifier):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, email, phone, role=UserRole.USER, name="Test User", is_active=True):
    user = User(
        name=name,
        email=email,
        phone=phone,
        password_hash=get_password_hash(PASSWORD),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def customer(db_session):
    return make_user(db_session, "ravi@example.com", "+919812345678", name="Ravi Kumar")


@pytest.fixture
def other_customer(db_session):
    return make_user(db_session, "priya@example.com", "+919812345679", name="Priya Shah")


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin@axteam.com", "+919876543210", role=UserRole.ADMIN, name="Admin")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def ac_repair(db_session):
    service = Service(
        name="AC Repair",
        category="AC Services",
        description="Diagnosis and repair of air conditioners.",
        price_min=499,
        price_max=2499,
        features=["Gas leak check", "Cooling diagnosis"],
    )
    db_session.add(service)
    db_session.commit()
    db_session.refresh(service)
    return service


def booking_payload(**overrides):
    data = {
        "name": "Ravi Kumar",
        "email": "Ravi@Example.com",
        "phone": "+919812345678",
        "address": {
            "street": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
        },
        "services": [{"serviceName": "AC Repair", "category": "AC Services"}],
        "date": (date.today() + timedelta(days=3)).isoformat(),
        "time": "10:00",
        "workDescription": "AC not cooling",
    }
    data.update(overrides)
    return data


@pytest.fixture
def create_booking(client, customer_headers):
    """POST a booking and return the booking dict from the response"""
    def _create(**overrides):
        response = client.post("/api/v1/bookings", json=booking_payload(**overrides), headers=customer_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["booking"]
    return _create
