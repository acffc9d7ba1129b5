"""Shared pytest fixtures: in-memory database, API client and account helpers."""
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmacare import models  # noqa: F401 - register models
from pharmacare.api.deps import get_db
from pharmacare.core.permissions import resolve_permissions
from pharmacare.core.security import create_access_token, get_password_hash
from pharmacare.db.base import Base
from pharmacare.db.session import build_engine
from pharmacare.main import app
from pharmacare.models import Customer, Medicine, Supplier, User

TEST_PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed store, one connection each, like separate terminals."""
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
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
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="admin", permissions=None, status="active"):
        counter["n"] += 1
        user = User(
            email=f"{role}{counter['n']}@pharmacare.com",
            name=f"{role.title()} {counter['n']}",
            role=role,
            status=status,
            permissions=resolve_permissions(role, permissions),
            hashed_password=get_password_hash(TEST_PASSWORD),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def make_medicine(db):
    counter = {"n": 0}

    def _make(name=None, price="9.99", stock=150, expiry_date=date(2030, 1, 1),
              category="Pain Relief", manufacturer="PharmaCorp", barcode=None):
        counter["n"] += 1
        medicine = Medicine(
            name=name or f"Medicine {counter['n']}",
            manufacturer=manufacturer,
            price=Decimal(price),
            stock=stock,
            expiry_date=expiry_date,
            category=category,
            barcode=barcode or f"2401010000{counter['n']:03d}",
        )
        db.add(medicine)
        db.commit()
        db.refresh(medicine)
        return medicine

    return _make


@pytest.fixture
def supplier(db):
    supplier = Supplier(name="PharmaCorp Supplies", email="orders@pharmacorp.com", products=["Pain Relief"])
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


@pytest.fixture
def customer(db):
    customer = Customer(name="John Smith", email="john.smith@email.com")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def stock_of(db, medicine_id):
    """Current stock straight from the store, bypassing the identity map."""
    return db.query(Medicine.stock).filter(Medicine.id == medicine_id).scalar()


def insert(session_factory, obj):
    """Commit one row through its own session and return its id."""
    session = session_factory()
    try:
        session.add(obj)
        session.commit()
        return obj.id
    finally:
        session.close()
