"""
Shared fixtures: a fresh SQLite file database per test, a LedgerStore on
it, a FastAPI TestClient wired to the same database, and small factories
for customers and businesses.
"""

import os

# Settings are read once at import time, so these must be set first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEBUG"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, get_db
from app.models import business, qr_code, rating, transaction, user  # noqa: F401
from app.services.accounts import AccountService
from app.services.businesses import BusinessService
from app.services.ledger_store import LedgerStore

PASSWORD = "password123"


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'baartal-test.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return LedgerStore(db)


@pytest.fixture
def client(session_factory):
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_customer(store):
    counter = {"n": 0}

    def factory(pincode="400001", name="Raj Sharma"):
        counter["n"] += 1
        customer, _ = AccountService(store).register(
            email=f"customer{counter['n']}@example.com",
            password=PASSWORD,
            name=name,
            user_type="customer",
            pincode=pincode,
        )
        return customer

    return factory


@pytest.fixture
def make_business(store):
    """Registers a merchant user and its business; returns (business, first QR)."""
    counter = {"n": 0}

    def factory(category="kirana", pincode="400001", rate="5.00", name=None):
        counter["n"] += 1
        owner, _ = AccountService(store).register(
            email=f"merchant{counter['n']}@example.com",
            password=PASSWORD,
            name=f"Merchant {counter['n']}",
            user_type="business",
            pincode=pincode,
        )
        return BusinessService(store).create(
            owner.id,
            business_name=name or f"Shop {counter['n']}",
            category=category,
            pincode=pincode,
            b_coin_rate=Decimal(rate),
        )

    return factory
