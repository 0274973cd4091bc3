from __future__ import annotations

import os
from datetime import date, datetime

# prima di importare backend: DB globale in memoria, niente seed all'avvio
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "0"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.db import Base
from backend.identity import Actor
from backend.models import Appointment, Patient, Role, User


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True, expire_on_commit=False)


@pytest.fixture
def s(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_patient(s):
    def _make(patient_id: int | None = None, name: str = "Mario Rossi", birth_date: date = date(1980, 5, 17)) -> Patient:
        p = Patient(id=patient_id, name=name, birth_date=birth_date)
        s.add(p)
        s.flush()
        return p
    return _make


@pytest.fixture
def make_user(s):
    def _make(username: str, role: Role = Role.USER, patient_id: int | None = None, user_id: int | None = None) -> User:
        u = User(id=user_id, username=username, password_hash="not-a-real-hash", role=role, patient_id=patient_id)
        s.add(u)
        s.flush()
        return u
    return _make


@pytest.fixture
def make_appointment(s):
    def _make(patient_id: int, when: datetime = datetime(2025, 4, 1, 15, 0), appointment_id: int | None = None) -> Appointment:
        a = Appointment(id=appointment_id, date_time=when, patient_id=patient_id)
        s.add(a)
        s.flush()
        return a
    return _make


@pytest.fixture
def admin() -> Actor:
    return Actor(id=1, role=Role.ADMIN)


@pytest.fixture
def user_actor() -> Actor:
    return Actor(id=3, role=Role.USER, linked_patient_id=7)
