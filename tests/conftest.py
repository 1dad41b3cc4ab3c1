"""
Pytest fixtures: in-memory SQLite shared across threads, a fake payment
client, and helpers to mint bearer tokens for seeded users.
"""

import json
import os
from datetime import datetime, timedelta, timezone

# Set test environment before importing the app
os.environ.update(
    {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": "test_jwt_secret_for_testing_only",
        "STRIPE_SECRET_KEY": "sk_test_dummy",
        "STRIPE_WEBHOOK_SECRET": "whsec_test_dummy",
        "LOG_LEVEL": "WARNING",
    }
)

import pytest
import stripe
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mechanic_backend.core.payments import CreatedIntent, get_payment_client
from mechanic_backend.core.security import create_access_token
from mechanic_backend.db.session import Base, get_db
from mechanic_backend.main import app
from mechanic_backend.models import Notification, ServiceRequest, Shop, User


class FakePaymentClient:
    def __init__(self):
        self.created = []
        self.status = "requires_payment_method"

    def create_payment_intent(self, *, amount_minor, metadata):
        intent_id = f"pi_test_{len(self.created) + 1}"
        self.created.append({"id": intent_id, "amount": amount_minor, "metadata": metadata})
        return CreatedIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_abc",
            status=self.status,
            amount=amount_minor,
        )

    def construct_event(self, payload, signature):
        if signature != "valid":
            raise stripe.SignatureVerificationError("bad signature", signature)
        return json.loads(payload)


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
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def payments():
    return FakePaymentClient()


@pytest.fixture
def client(session_factory, payments):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_payment_client] = lambda: payments
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(role="customer", **kwargs):
        counter["n"] += 1
        user = User(
            email=kwargs.pop("email", f"{role}{counter['n']}@example.com"),
            full_name=kwargs.pop("full_name", f"{role.title()} {counter['n']}"),
            role=role,
            **kwargs,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_request(db_session, make_user):
    def _make(customer=None, **kwargs):
        customer = customer or make_user("customer")
        kwargs.setdefault("service_type", "Oil change")
        kwargs.setdefault("description", "Regular maintenance")
        kwargs.setdefault("pickup_address", "12 Main Street")
        sr = ServiceRequest(customer_id=customer.id, **kwargs)
        db_session.add(sr)
        db_session.commit()
        return sr

    return _make


@pytest.fixture
def make_shop(db_session):
    def _make(name="Downtown Garage", owner=None):
        shop = Shop(name=name, owner_id=owner.id if owner else None)
        db_session.add(shop)
        db_session.commit()
        return shop

    return _make


@pytest.fixture
def make_notification(db_session):
    def _make(user, message="Your vehicle is ready", is_read=False, created_at=None):
        n = Notification(
            user_id=user.id,
            message=message,
            is_read=is_read,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db_session.add(n)
        db_session.commit()
        return n

    return _make


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(sub=user.id, role=user.role)}"}


def fresh(db, model, pk):
    db.expire_all()
    return db.get(model, pk)


def days_from_now(days):
    return datetime.now(timezone.utc) + timedelta(days=days)
