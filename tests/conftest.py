from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from config import settings
from database import Database, seed_plans
from main import create_app
from users.models import User
from vehicles.models import Vehicle
from payment.models import PaymentMethod
from subscription.models import Subscription


@pytest.fixture
def database(tmp_path):
    """A file-backed SQLite database with tables created and plans seeded."""
    database = Database(f"sqlite:///{tmp_path / 'csr.db'}")
    database.create_all()
    db = database.session()
    try:
        seed_plans(db, settings.SUBSCRIPTION_PLANS)
    finally:
        db.close()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def client(database):
    with TestClient(create_app(database)) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(**overrides):
        counter["n"] += 1
        values = {
            "name": f"Customer {counter['n']}",
            "email": f"customer{counter['n']}@example.com",
            "phone": "5550001111",
            "address": "1 Main St",
            "account_status": "active",
        }
        values.update(overrides)
        user = User(**values)
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_vehicle(db):
    def _make_vehicle(user, **overrides):
        values = {
            "user_id": user.id,
            "make": "Toyota",
            "model": "Corolla",
            "year": 2020,
            "color": "blue",
            "license_plate": f"ABC{user.id:04d}{len(user.vehicles)}",
        }
        values.update(overrides)
        vehicle = Vehicle(**values)
        db.add(vehicle)
        db.commit()
        db.refresh(user)
        return vehicle

    return _make_vehicle


@pytest.fixture
def make_payment_method(db):
    def _make_payment_method(user, is_default=True, **overrides):
        values = {
            "user_id": user.id,
            "card_last4": 4242,
            "card_exp_month": 12,
            "card_exp_year": datetime.utcnow().year + 2,
            "is_default": is_default,
        }
        values.update(overrides)
        method = PaymentMethod(**values)
        db.add(method)
        db.commit()
        return method

    return _make_payment_method


@pytest.fixture
def make_subscription(db):
    def _make_subscription(user, vehicle, plan_id=2, status="active", due_in_days=30, **overrides):
        now = datetime.utcnow()
        values = {
            "user_id": user.id,
            "vehicle_id": vehicle.id,
            "plan_id": plan_id,
            "remaining_washes": 5,
            "status": status,
            "billing_period_start": now - timedelta(days=30 - due_in_days),
            "payment_due_date": now + timedelta(days=due_in_days),
            "last_payment_date": now,
            "last_payment_status": "paid",
        }
        values.update(overrides)
        subscription = Subscription(**values)
        db.add(subscription)
        db.commit()
        return subscription

    return _make_subscription


@pytest.fixture
def customer(make_user, make_vehicle, make_payment_method):
    """A user with two vehicles and a default card."""
    user = make_user()
    first = make_vehicle(user, license_plate="FIRST001")
    second = make_vehicle(user, license_plate="SECOND02")
    method = make_payment_method(user)
    return {"user": user, "vehicles": [first, second], "payment_method": method}
