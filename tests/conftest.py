"""
Shared pytest fixtures for the Hotel Facilities Platform test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - hotel / manager / technician / staff: pre-created rows
    - make_*: ORM factory helpers
    - token_for / auth_headers: sign session tokens like the identity provider
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from facilities import create_app
from facilities.models import db as _db
from facilities.models.asset import Asset
from facilities.models.hotel import Hotel, Location, User
from facilities.models.ppm import PPMSchedule, PPMTask
from facilities.models.work_order import WorkOrder, WorkOrderSLA

TEST_SESSION_SECRET = "test-session-secret-with-enough-bytes"


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Factories ────────────────────────────────────────────────────────────


_counter = {"n": 0}


def _next():
    _counter["n"] += 1
    return _counter["n"]


def make_hotel(name="Grand Harbour Hotel"):
    hotel = Hotel(name=name, address="1 Quay Street")
    _db.session.add(hotel)
    _db.session.commit()
    return hotel


def make_user(hotel=None, role="STAFF", name=None, employee_id=None, is_active=True):
    n = _next()
    user = User(
        hotel_id=hotel.id if hotel else None,
        name=name or f"{role.title()} {n}",
        email=f"user{n}@example.com",
        role=role,
        employee_id=employee_id,
        is_active=is_active,
    )
    _db.session.add(user)
    _db.session.commit()
    return user


def make_location(hotel, name="Boiler Room", type="PLANT", parent=None, is_active=True):
    location = Location(
        hotel_id=hotel.id, name=name, type=type,
        parent_id=parent.id if parent else None, is_active=is_active,
    )
    _db.session.add(location)
    _db.session.commit()
    return location


def make_asset(location, name="Boiler #1", category="HVAC", purchase_date=None):
    asset = Asset(
        hotel_id=location.hotel_id,
        location_id=location.id,
        name=name,
        category=category,
        qr_code=f"ASSET-TEST-{_next()}",
        purchase_date=purchase_date or datetime.now(timezone.utc),
    )
    _db.session.add(asset)
    _db.session.commit()
    return asset


def make_schedule(hotel, name="Boiler service", frequency="MONTHLY", description="Annual boiler check"):
    schedule = PPMSchedule(
        hotel_id=hotel.id,
        name=name,
        description=description,
        frequency=frequency,
        start_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    _db.session.add(schedule)
    _db.session.commit()
    return schedule


def make_task(schedule, due_date, status="SCHEDULED", title="PPM Task"):
    task = PPMTask(schedule_id=schedule.id, title=title, due_date=due_date, status=status)
    _db.session.add(task)
    _db.session.commit()
    return task


def make_work_order(hotel, creator, title="Leaking tap", status="LOGGED", priority="MEDIUM",
                    category="Plumbing", location=None, asset=None, is_active=True,
                    created_at=None):
    work_order = WorkOrder(
        hotel_id=hotel.id,
        title=title,
        description=f"{title} reported by guest",
        status=status,
        priority=priority,
        category=category,
        created_by_id=creator.id,
        location_id=location.id if location else None,
        asset_id=asset.id if asset else None,
        is_active=is_active,
    )
    if created_at is not None:
        work_order.created_at = created_at
    _db.session.add(work_order)
    _db.session.commit()
    return work_order


def make_sla(work_order, created_at, assigned_at=None, resolved_at=None, is_overdue=False,
             response=240, resolution=1440):
    sla = WorkOrderSLA(
        work_order_id=work_order.id,
        category=work_order.category,
        priority=work_order.priority,
        expected_response_time=response,
        expected_resolution_time=resolution,
        assigned_at=assigned_at,
        resolved_at=resolved_at,
        is_overdue=is_overdue,
        created_at=created_at,
    )
    _db.session.add(sla)
    _db.session.commit()
    return sla


# ── Session tokens ───────────────────────────────────────────────────────


def token_for(user, expires_in=timedelta(hours=1), secret=TEST_SESSION_SECRET, **overrides):
    """Sign an HS256 session token carrying the user's id, role and hotel."""
    claims = {
        "sub": str(user.id),
        "role": user.role,
        "hotel_id": user.hotel_id,
        "name": user.name,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    claims.update(overrides)
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user, **kwargs):
    return {"Authorization": f"Bearer {token_for(user, **kwargs)}"}


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def hotel():
    return make_hotel()


@pytest.fixture()
def manager(hotel):
    return make_user(hotel, role="MANAGER", name="Maria Manager")


@pytest.fixture()
def technician(hotel):
    return make_user(hotel, role="TECHNICIAN", name="Tom Technician")


@pytest.fixture()
def staff(hotel):
    return make_user(hotel, role="STAFF", name="Sam Staff")


@pytest.fixture()
def location(hotel):
    return make_location(hotel)


@pytest.fixture()
def asset(location):
    return make_asset(location)
