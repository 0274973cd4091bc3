"""
Cancellazione a cascata Utente -> Paziente -> Appuntamenti.

Due ingressi (per id utente o per id paziente), stesso risultato: nessun
paziente o appuntamento orfano. I passi sono cancellazioni separate, eseguite
nell'ordine stabilito e flushate una per una; la transazione della sessione
(db_session) le rende un'unica unità. Ripetere una chiamata già riuscita
dà NotFound, mai un successo silenzioso.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .errors import Forbidden, NotFound
from .models import Role
from .repositories import AppointmentRepository, PatientRepository, UserRepository

logger = logging.getLogger(__name__)


def _require_admin(actor_role: Role) -> None:
    # prima di qualsiasi lookup: non rivelare l'esistenza dei record
    if actor_role is not Role.ADMIN:
        raise Forbidden("Solo un amministratore può cancellare pazienti e utenti.")


def _delete_appointments_of(s: Session, patient_id: int) -> int:
    repo = AppointmentRepository(s)
    n = repo.delete_all(a for a in repo.find_all() if a.patient_id == patient_id)
    logger.info("Cascata: %d appuntamenti rimossi per paziente %s", n, patient_id)
    return n


def _delete_patient(s: Session, patient_id: int) -> None:
    if not PatientRepository(s).delete_by_id(patient_id):
        logger.warning("Cascata: paziente %s non trovato", patient_id)
        raise NotFound(f"Paziente {patient_id} non trovato durante la cancellazione.")
    logger.info("Cascata: paziente %s rimosso", patient_id)


def delete_by_user_id(s: Session, actor_role: Role, user_id: int) -> None:
    """
    Appuntamenti -> Paziente -> Utente.
    Utenti senza paziente collegato (tipicamente admin): solo l'utente.
    """
    _require_admin(actor_role)

    users = UserRepository(s)
    user = users.find_by_id(user_id)
    if user is None:
        logger.warning("Cascata: utente %s non trovato", user_id)
        raise NotFound(f"Utente {user_id} non trovato.")

    patient_id = user.patient_id
    if patient_id is not None:
        _delete_appointments_of(s, patient_id)
        _delete_patient(s, patient_id)

    users.delete(user)
    logger.info("Cascata: utente %s rimosso", user_id)


def delete_by_patient_id(s: Session, actor_role: Role, patient_id: int) -> None:
    """Utente (trovato tramite il paziente) -> Appuntamenti -> Paziente."""
    _require_admin(actor_role)

    users = UserRepository(s)
    user_id = users.find_owning_user_id(patient_id)
    if user_id is None:
        logger.warning("Cascata: nessun utente collegato al paziente %s", patient_id)
        raise NotFound(f"Nessun utente collegato al paziente {patient_id}.")

    user = users.find_by_id(user_id)
    if user is None:
        # stato incoerente: il reverse lookup ha trovato un id che non esiste più
        logger.warning("Cascata: utente %s collegato al paziente %s non trovato", user_id, patient_id)
        raise NotFound(f"Utente {user_id} non trovato.")

    users.delete(user)
    logger.info("Cascata: utente %s rimosso", user_id)

    _delete_appointments_of(s, patient_id)
    _delete_patient(s, patient_id)
