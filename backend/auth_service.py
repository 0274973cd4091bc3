from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from backend.auth_security import canonical_username, hash_password, verify_password
from backend.errors import UsernameTaken, ValidationError
from backend.models import Patient, Role, User
from backend.repositories import PatientRepository, UserRepository

logger = logging.getLogger(__name__)


def register_user(s: Session, username: str, password: str, name: str, birth_date: date | None) -> User:
    """
    Registrazione: crea prima il paziente, poi l'utente (ruolo USER) collegato.
    """
    username = canonical_username(username or "")
    name = (name or "").strip()
    if not username or not password:
        raise ValidationError("Username e password sono obbligatori.")
    if not name or birth_date is None:
        raise ValidationError("Nome e data di nascita del paziente sono obbligatori.")

    users = UserRepository(s)
    if users.exists_by_username(username):
        raise UsernameTaken(f"Username '{username}' già registrato.")

    patient = PatientRepository(s).save(Patient(name=name, birth_date=birth_date))
    u = users.save(
        User(username=username, password_hash=hash_password(password), role=Role.USER, patient_id=patient.id)
    )
    logger.info("Registrato utente %s (paziente %s)", u.username, patient.id)
    return u


def create_admin(s: Session, username: str, password: str) -> User:
    username = canonical_username(username or "")
    if not username or not password:
        raise ValidationError("Username e password sono obbligatori.")

    users = UserRepository(s)
    if users.exists_by_username(username):
        raise UsernameTaken(f"Username '{username}' già registrato.")

    u = users.save(User(username=username, password_hash=hash_password(password), role=Role.ADMIN))
    logger.info("Creato amministratore %s", u.username)
    return u


def authenticate(s: Session, username: str, password: str) -> User | None:
    u = UserRepository(s).find_by_username(canonical_username(username or ""))
    if not u:
        return None
    if not verify_password(password, u.password_hash):
        return None
    return u
