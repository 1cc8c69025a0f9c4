"""
Shared fixtures: an app per test on a fresh in-memory database, tokens minted
with the JWT provider, and a small booking/transaction seeding helper.
"""

import os

# The module-level app in tripdesk.main is built at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_PROVIDER", "jwt")
os.environ.setdefault("JWT_SECRET", "tripdesk-test-secret")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tripdesk.config import Settings
from tripdesk.database import create_tables
from tripdesk.main import create_app
from tripdesk.models import Booking, Destination, Profile, Transaction
from tripdesk.utils.security import create_access_token

TEST_SECRET = "tripdesk-test-secret"


def make_token(user_id: str, **claims) -> str:
    return create_access_token({"sub": user_id, **claims}, TEST_SECRET)


def auth_headers(user_id: str, **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, **claims)}"}


@pytest.fixture
def settings_overrides():
    """Override per test module to change how the app is configured."""
    return {}


@pytest.fixture
def settings(settings_overrides):
    values = dict(
        database_url="sqlite://",
        auth_provider="jwt",
        jwt_secret=TEST_SECRET,
        rate_limit_enabled=False,
        log_json=False,
        log_level="WARNING",
    )
    values.update(settings_overrides)
    return Settings(**values)


@pytest.fixture
def app(settings):
    app = create_app(settings)
    create_tables(app.state.engine)
    yield app
    app.state.engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def admin_profile(db):
    profile = Profile(id="admin-1", full_name="Ada Admin", email="admin@example.com", role="admin")
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def user_profile(db):
    profile = Profile(id="user-1", full_name="Tom Traveler", email="tom@example.com", role="user")
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def admin_headers(admin_profile):
    return auth_headers(admin_profile.id)


@pytest.fixture
def user_headers(user_profile):
    return auth_headers(user_profile.id)


@pytest.fixture
def destination(db):
    dest = Destination(
        id="dest-1",
        name="Santorini",
        country="Greece",
        description="Whitewashed cliffs",
        image_url="https://example.com/santorini.jpg",
        price_per_person=Decimal("500.00"),
    )
    db.add(dest)
    db.commit()
    return dest


@pytest.fixture
def make_booking(db, destination):
    def _make(user_id: str, travelers: int = 2, booking_id: str = None, **fields) -> Booking:
        booking = Booking(
            id=booking_id or f"booking-{user_id}-{travelers}",
            user_id=user_id,
            trip_id=destination.id,
            start_date=date.today() + timedelta(days=30),
            end_date=date.today() + timedelta(days=37),
            travelers_count=travelers,
            total_amount=Booking.quote_total(destination, travelers),
            **fields
        )
        db.add(booking)
        db.commit()
        return booking
    return _make


@pytest.fixture
def make_transaction(db):
    def _make(transaction_id: str, user_id=None, booking_id=None, amount=1000,
              payment_method="Credit Card", status="pending", refund_status="none",
              created_at: datetime = None) -> Transaction:
        tx = Transaction(
            id=transaction_id,
            user_id=user_id,
            booking_id=booking_id,
            amount=Decimal(str(amount)),
            payment_method=payment_method,
            status=status,
            refund_status=refund_status,
            created_at=created_at or datetime.utcnow(),
        )
        db.add(tx)
        db.commit()
        return tx
    return _make


@pytest.fixture
def headers_for():
    """Build Authorization headers for any user id / extra claims."""
    return auth_headers
