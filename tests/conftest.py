# tests/conftest.py
"""Shared fixtures: an in-memory SQLite database and small record factories."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import itertools

import pytest

from app.database import Base, SessionLocal, engine
import app.models  # noqa
from app.models import LeoniPersonnel, Supplier, User, Vehicle, Worker
from app.models.enums import PersonType, Role
from app.utils.security import hash_password

PASSWORD = "secret123"
_seq = itertools.count(1)
_password_hash = None


def _hash():
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(PASSWORD)
    return _password_hash


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    def _make(role=Role.SOS, is_approved=True, is_active=True, **overrides):
        n = next(_seq)
        values = dict(
            cin=f"U{n:07d}",
            first_name="Test",
            last_name=f"User{n}",
            email=f"user{n}@example.com",
            password_hash=_hash(),
            role=Role(role).value,
            is_approved=is_approved,
            is_active=is_active,
        )
        values.update(overrides)
        user = User(**values)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role=Role.ADMIN)


@pytest.fixture
def make_worker(db):
    def _make(**overrides):
        n = next(_seq)
        values = dict(
            cin=f"W{n:07d}",
            worker_name=f"Worker {n}",
            com_num=f"C-{n}",
            email=f"worker{n}@example.com",
            worker_address="1 Rue de l'Usine",
            state="Sousse",
            postal_code="4000",
        )
        values.update(overrides)
        worker = Worker(**values)
        db.add(worker)
        db.commit()
        db.refresh(worker)
        return worker
    return _make


@pytest.fixture
def make_supplier(db):
    def _make(**overrides):
        n = next(_seq)
        values = dict(
            id_sup=f"SUP{n:09d}",
            num_vst=f"VST{n:06d}",
            name=f"Supplier {n}",
            email=f"supplier{n}@example.com",
            phone_number="+21600000000",
            cin=f"S{n:07d}",
            comp_affil="Acme Logistics",
        )
        values.update(overrides)
        supplier = Supplier(**values)
        db.add(supplier)
        db.commit()
        db.refresh(supplier)
        return supplier
    return _make


@pytest.fixture
def make_personnel(db):
    def _make(**overrides):
        n = next(_seq)
        values = dict(
            matricule=f"M{n:05d}",
            name=f"Staff {n}",
            cin=f"{n:08d}",
            email=f"staff{n}@example.com",
            address="Leoni Sousse",
            state="Sousse",
            postal_code="4000",
        )
        values.update(overrides)
        personnel = LeoniPersonnel(**values)
        db.add(personnel)
        db.commit()
        db.refresh(personnel)
        return personnel
    return _make


@pytest.fixture
def make_vehicle(db):
    def _make(owner, **overrides):
        n = next(_seq)
        values = dict(
            lic_plate_string=f"{n:03d} TU {n:04d}",
            mark="Renault",
            model="Clio",
            v_year=2020,
            color="White",
            owner_id=owner.id,
            owner_type=PersonType(owner.person_type).value,
        )
        values.update(overrides)
        vehicle = Vehicle(**values)
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle
    return _make


