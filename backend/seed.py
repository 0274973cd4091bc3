from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Session

from .auth_service import create_admin, register_user
from .db import db_session
from .models import Appointment
from .repositories import AppointmentRepository, UserRepository

# (username, password, nome paziente, data di nascita, appuntamenti)
DEMO_USERS = [
    ("user1", "user111", "Max Mustermann", date(1990, 1, 1),
     [datetime(2025, 4, 1, 15, 0), datetime(2025, 4, 2, 16, 0)]),
    ("user2", "user222", "Erika Mustermann", date(1992, 2, 2),
     [datetime(2025, 4, 3, 10, 0)]),
]


def seed_into(s: Session) -> None:
    users = UserRepository(s)

    if not users.exists_by_username("admin"):
        create_admin(s, "admin", "admin123")

    for username, password, name, birth_date, slots in DEMO_USERS:
        if users.exists_by_username(username):
            continue
        u = register_user(s, username, password, name, birth_date)
        for when in slots:
            AppointmentRepository(s).save(Appointment(date_time=when, patient_id=u.patient_id))


def seed_base() -> None:
    """
    Popola dati minimi (idempotente, controllo per username):
    - amministratore senza paziente
    - due utenti con paziente e appuntamenti
    """
    with db_session() as s:
        seed_into(s)
