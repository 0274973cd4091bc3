from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from .errors import Forbidden, NotFound, PatientNotFound, ValidationError
from .identity import Actor
from .models import Appointment, Patient
from .ownership import owns
from .repositories import AppointmentRepository, PatientRepository

logger = logging.getLogger(__name__)


# =========================
# Appuntamenti
# =========================
def list_appointments(s: Session, actor: Actor) -> list[Appointment]:
    """
    Admin: tutti gli appuntamenti.
    Utente: solo quelli del paziente collegato (lista vuota se non collegato).
    """
    items = AppointmentRepository(s).find_all()
    if actor.is_admin:
        return items
    if actor.linked_patient_id is None:
        return []
    return [a for a in items if a.patient_id == actor.linked_patient_id]


def create_appointment(s: Session, actor: Actor, date_time: datetime | None, patient_id: int | None) -> Appointment:
    """
    Use case: prenotare un appuntamento per un paziente esistente.
    - il paziente deve esistere (altrimenti PatientNotFound, per qualsiasi ruolo)
    - l'actor deve possedere il paziente caricato dal DB
    """
    if patient_id is None:
        raise ValidationError("Il paziente (patient_id) è obbligatorio.")
    if date_time is None:
        raise ValidationError("Data e ora (date_time) sono obbligatorie.")

    patient = PatientRepository(s).find_by_id(patient_id)
    if patient is None:
        raise PatientNotFound(f"Paziente {patient_id} non trovato.")

    if not owns(actor, patient.id):
        logger.warning("Actor %s: prenotazione negata per paziente %s", actor.id, patient.id)
        raise Forbidden("Non puoi creare appuntamenti per un altro paziente.")

    app = AppointmentRepository(s).save(Appointment(date_time=date_time, patient_id=patient.id))
    logger.info("Appuntamento %s creato per paziente %s", app.id, patient.id)
    return app


def delete_appointment(s: Session, actor: Actor, appointment_id: int) -> None:
    repo = AppointmentRepository(s)
    app = repo.find_by_id(appointment_id)
    if app is None:
        logger.warning("Actor %s: appuntamento %s non trovato", actor.id, appointment_id)
        raise NotFound(f"Appuntamento {appointment_id} non trovato.")

    if not owns(actor, app.patient_id):
        logger.warning("Actor %s: cancellazione negata per appuntamento %s", actor.id, appointment_id)
        raise Forbidden("Non puoi cancellare questo appuntamento.")

    repo.delete(app)
    logger.info("Appuntamento %s cancellato", appointment_id)


# =========================
# Pazienti
# =========================
def list_patients(s: Session, actor: Actor) -> list[Patient]:
    repo = PatientRepository(s)
    if actor.is_admin:
        return repo.find_all()
    if actor.linked_patient_id is None:
        return []
    p = repo.find_by_id(actor.linked_patient_id)
    return [p] if p is not None else []


def get_patient(s: Session, actor: Actor, patient_id: int) -> Patient:
    p = PatientRepository(s).find_by_id(patient_id)
    if p is None:
        raise NotFound(f"Paziente {patient_id} non trovato.")
    if not owns(actor, patient_id):
        logger.warning("Actor %s: accesso negato al paziente %s", actor.id, patient_id)
        raise Forbidden("Non puoi accedere a questo paziente.")
    return p


# =========================
# Versioni 'flat' (dict serializzabili per API/CLI)
# =========================
def appointment_flat(a: Appointment) -> dict:
    return {"id": a.id, "date_time": a.date_time.isoformat(), "patient_id": a.patient_id}


def patient_flat(p: Patient) -> dict:
    return {"id": p.id, "name": p.name, "birth_date": p.birth_date.isoformat()}
