from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from .auth_security import canonical_username
from .errors import UnknownPrincipal
from .models import Role, User
from .repositories import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Chi sta facendo la richiesta: ricavato ad ogni richiesta, mai salvato."""
    id: int
    role: Role
    linked_patient_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=user.role, linked_patient_id=user.patient_id)


def resolve_actor(s: Session, principal_name: str) -> Actor:
    """
    Mappa il nome del principal autenticato sull'Actor canonico.
    Se non esiste l'utente il confine di fiducia è rotto: UnknownPrincipal (fatale).
    """
    username = canonical_username(principal_name)
    user = UserRepository(s).find_by_username(username)
    if user is None:
        logger.error("Principal autenticato senza utente: %r", username)
        raise UnknownPrincipal(f"Nessun utente per il principal autenticato '{username}'.")
    return Actor.from_user(user)
