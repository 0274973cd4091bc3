from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.auth_security import create_access_token, principal_name_from_token
from backend.auth_service import authenticate, register_user
from backend.cascade import delete_by_patient_id, delete_by_user_id
from backend.db import get_session, init_db
from backend.errors import ClinicError
from backend.identity import Actor, resolve_actor
from backend.log import configure_logging
from backend.repositories import UserRepository
from backend.seed import seed_base
from backend.services import (
    appointment_flat,
    create_appointment,
    delete_appointment,
    get_patient,
    list_appointments,
    list_patients,
    patient_flat,
)

logger = logging.getLogger(__name__)

SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "1") == "1"

# OAuth2 Bearer (Authorization: Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

app = FastAPI(title="Clinic Scheduling API", version="1.0.0")



# Startup

@app.on_event("startup")
def startup() -> None:
    configure_logging()
    init_db()
    if SEED_DEMO_DATA:
        seed_base()
    logger.info("API pronta (seed demo: %s)", "sì" if SEED_DEMO_DATA else "no")



# Errori di dominio -> HTTP

@app.exception_handler(ClinicError)
def clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})



# Schemi

class RegisterIn(BaseModel):
    username: str
    password: str
    name: str
    birth_date: date | None = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeOut(BaseModel):
    id: int
    username: str
    role: str
    linked_patient_id: int | None


class AppointmentCreateIn(BaseModel):
    # opzionali nello schema: la mancanza è un 400 di dominio, non un 422
    date_time: datetime | None = None
    patient_id: int | None = None



# Dipendenze auth

def get_principal_name(token: str = Depends(oauth2_scheme)) -> str:
    # protezione extra: elimina spazi / virgolette accidentali
    token = token.strip().strip('"').strip("'")

    name = principal_name_from_token(token)
    if not name:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token non valido")
    return name


def get_actor(name: str = Depends(get_principal_name), s: Session = Depends(get_session)) -> Actor:
    return resolve_actor(s, name)



# AUTH endpoints

@app.post("/api/auth/register")
def register(payload: RegisterIn, s: Session = Depends(get_session)) -> dict[str, Any]:
    u = register_user(s, payload.username, payload.password, payload.name, payload.birth_date)
    return {"ok": True, "user_id": u.id, "patient_id": u.patient_id}


@app.post("/api/auth/login", response_model=TokenOut)
def login(form: OAuth2PasswordRequestForm = Depends(), s: Session = Depends(get_session)) -> TokenOut:
    u = authenticate(s, form.username, form.password)
    if not u:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenziali non valide")

    token = create_access_token(subject=u.username, extra={"role": u.role.value})
    return TokenOut(access_token=token)


@app.get("/api/me", response_model=MeOut)
def me(actor: Actor = Depends(get_actor), s: Session = Depends(get_session)) -> MeOut:
    user = UserRepository(s).find_by_id(actor.id)
    return MeOut(id=actor.id, username=user.username, role=actor.role.value, linked_patient_id=actor.linked_patient_id)



# Appuntamenti

@app.get("/api/appointments")
def api_appointments(actor: Actor = Depends(get_actor), s: Session = Depends(get_session)) -> list[dict]:
    return [appointment_flat(a) for a in list_appointments(s, actor)]


@app.post("/api/appointments")
def api_create_appointment(
    payload: AppointmentCreateIn,
    actor: Actor = Depends(get_actor),
    s: Session = Depends(get_session),
) -> dict[str, Any]:
    app_ = create_appointment(s, actor, payload.date_time, payload.patient_id)
    return {"ok": True, "appointment_id": app_.id}


@app.delete("/api/appointments/{appointment_id}")
def api_delete_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_actor),
    s: Session = Depends(get_session),
) -> dict[str, Any]:
    delete_appointment(s, actor, appointment_id)
    return {"ok": True}



# Pazienti

@app.get("/api/patients")
def api_patients(actor: Actor = Depends(get_actor), s: Session = Depends(get_session)) -> list[dict]:
    return [patient_flat(p) for p in list_patients(s, actor)]


@app.get("/api/patients/{patient_id}")
def api_patient(patient_id: int, actor: Actor = Depends(get_actor), s: Session = Depends(get_session)) -> dict:
    return patient_flat(get_patient(s, actor, patient_id))


@app.delete("/api/patients/{patient_id}")
def api_delete_patient(
    patient_id: int,
    actor: Actor = Depends(get_actor),
    s: Session = Depends(get_session),
) -> dict[str, Any]:
    delete_by_patient_id(s, actor.role, patient_id)
    return {"ok": True}



# Utenti

@app.delete("/api/users/{user_id}")
def api_delete_user(user_id: int, actor: Actor = Depends(get_actor), s: Session = Depends(get_session)) -> dict[str, Any]:
    delete_by_user_id(s, actor.role, user_id)
    return {"ok": True}
