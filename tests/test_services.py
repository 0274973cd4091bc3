from __future__ import annotations

import logging
from datetime import datetime

import pytest

from backend.errors import Forbidden, NotFound, PatientNotFound, ValidationError
from backend.identity import Actor
from backend.models import Appointment, Role
from backend.services import (
    appointment_flat,
    create_appointment,
    delete_appointment,
    get_patient,
    list_appointments,
    list_patients,
    patient_flat,
)

WHEN = datetime(2025, 4, 1, 15, 0)


@pytest.fixture
def two_patients(make_patient, make_appointment):
    make_patient(patient_id=7, name="Max Mustermann")
    make_patient(patient_id=9, name="Erika Mustermann")
    make_appointment(7, appointment_id=1)
    make_appointment(9, appointment_id=2)


# =========================
# list_appointments
# =========================
def test_user_sees_only_own_appointments(s, two_patients, user_actor):
    items = list_appointments(s, user_actor)
    assert [a.id for a in items] == [1]


def test_admin_sees_every_appointment(s, two_patients, admin):
    assert [a.id for a in list_appointments(s, admin)] == [1, 2]


def test_user_without_patient_gets_empty_list(s, two_patients):
    assert list_appointments(s, Actor(id=4, role=Role.USER)) == []


# =========================
# create_appointment
# =========================
def test_create_for_own_patient(s, two_patients, user_actor):
    app = create_appointment(s, user_actor, WHEN, 7)

    stored = s.get(Appointment, app.id)
    assert stored.patient_id == 7
    assert stored.date_time == WHEN


def test_admin_creates_for_any_patient(s, two_patients, admin):
    app = create_appointment(s, admin, WHEN, 9)
    assert app.patient_id == 9


@pytest.mark.parametrize("role", [Role.ADMIN, Role.USER])
def test_create_for_missing_patient_fails_for_any_role(s, two_patients, role):
    actor = Actor(id=1, role=role, linked_patient_id=7)
    with pytest.raises(PatientNotFound) as exc:
        create_appointment(s, actor, WHEN, 999)
    assert exc.value.status_code == 400


def test_create_without_patient_id_is_validation_error(s, user_actor):
    with pytest.raises(ValidationError):
        create_appointment(s, user_actor, WHEN, None)


def test_create_without_date_is_validation_error(s, two_patients, user_actor):
    with pytest.raises(ValidationError):
        create_appointment(s, user_actor, None, 7)


def test_create_for_someone_else_is_forbidden(s, two_patients, user_actor):
    with pytest.raises(Forbidden):
        create_appointment(s, user_actor, WHEN, 9)
    assert len(list_appointments(s, Actor(id=1, role=Role.ADMIN))) == 2


# =========================
# delete_appointment
# =========================
def test_user_deletes_own_appointment(s, two_patients, user_actor):
    delete_appointment(s, user_actor, 1)
    assert s.get(Appointment, 1) is None


def test_user_cannot_delete_foreign_appointment(s, two_patients, user_actor):
    with pytest.raises(Forbidden):
        delete_appointment(s, user_actor, 2)
    assert s.get(Appointment, 2) is not None


def test_delete_missing_appointment_is_not_found(s, two_patients, admin):
    with pytest.raises(NotFound):
        delete_appointment(s, admin, 42)


def test_admin_deletes_any_appointment(s, two_patients, admin):
    delete_appointment(s, admin, 2)
    assert [a.id for a in list_appointments(s, admin)] == [1]


# =========================
# Pazienti
# =========================
def test_list_patients_admin_and_user(s, two_patients, admin, user_actor):
    assert [p.id for p in list_patients(s, admin)] == [7, 9]
    assert [p.id for p in list_patients(s, user_actor)] == [7]
    assert list_patients(s, Actor(id=4, role=Role.USER)) == []


def test_get_patient(s, two_patients, admin, user_actor):
    assert get_patient(s, user_actor, 7).name == "Max Mustermann"
    assert get_patient(s, admin, 9).name == "Erika Mustermann"


def test_get_foreign_patient_is_forbidden(s, two_patients, user_actor):
    with pytest.raises(Forbidden):
        get_patient(s, user_actor, 9)


def test_get_missing_patient_is_not_found_before_ownership(s, user_actor):
    with pytest.raises(NotFound):
        get_patient(s, user_actor, 999)


def test_flat_views(s, two_patients):
    a = s.get(Appointment, 1)
    assert appointment_flat(a) == {"id": 1, "date_time": "2025-04-01T15:00:00", "patient_id": 7}
    p = list_patients(s, Actor(id=1, role=Role.ADMIN))[0]
    assert patient_flat(p) == {"id": 7, "name": "Max Mustermann", "birth_date": "1980-05-17"}


def test_delete_missing_appointment_is_logged(s, admin, caplog):
    with caplog.at_level(logging.WARNING, logger="backend.services"):
        with pytest.raises(NotFound):
            delete_appointment(s, admin, 42)
    assert "appuntamento 42 non trovato" in caplog.text
