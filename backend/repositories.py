"""
Accesso ai dati per entità: lookup per id, scansione completa, salvataggio,
cancellazione. I repository lavorano sulla sessione passata dal chiamante,
quindi commit/rollback restano all'unità di lavoro (db_session).
"""
from __future__ import annotations

from typing import Generic, Iterable, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Appointment, Patient, User

T = TypeVar("T", Patient, Appointment, User)


class _Repository(Generic[T]):
    model: type[T]

    def __init__(self, session: Session) -> None:
        self.s = session

    def find_by_id(self, entity_id: int) -> T | None:
        return self.s.get(self.model, entity_id)

    def find_all(self) -> list[T]:
        return list(self.s.scalars(select(self.model).order_by(self.model.id)))

    def save(self, entity: T) -> T:
        self.s.add(entity)
        self.s.flush()
        return entity

    def delete(self, entity: T) -> None:
        # flush subito: l'ordine delle cancellazioni deve arrivare al DB così com'è
        self.s.delete(entity)
        self.s.flush()

    def delete_by_id(self, entity_id: int) -> bool:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.delete(entity)
        return True


class PatientRepository(_Repository[Patient]):
    model = Patient


class AppointmentRepository(_Repository[Appointment]):
    model = Appointment

    def delete_all(self, items: Iterable[Appointment]) -> int:
        n = 0
        for a in items:
            self.s.delete(a)
            n += 1
        self.s.flush()
        return n


class UserRepository(_Repository[User]):
    model = User

    def find_by_username(self, username: str) -> User | None:
        return self.s.execute(select(User).where(User.username == username)).scalar_one_or_none()

    def exists_by_username(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def find_owning_user_id(self, patient_id: int) -> int | None:
        return self.s.execute(select(User.id).where(User.patient_id == patient_id)).scalar_one_or_none()
