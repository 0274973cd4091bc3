from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Role(enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


# Nessuna relationship(): i collegamenti si risolvono con lookup espliciti
# tramite i repository, mai con caricamento implicito del grafo.


class Patient(Base):
    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)

    def __repr__(self) -> str:
        return f"Patient({self.id}, {self.name})"


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"Appointment({self.id}, patient={self.patient_id}, {self.date_time.isoformat()})"


class User(Base):
    """
    Utente applicativo.
    - username univoco (canonico: minuscolo)
    - password_hash con bcrypt (passlib)
    - patient_id: paziente collegato (uno-a-uno), assente per gli admin
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role), default=Role.USER, nullable=False)

    patient_id: Mapped[int | None] = mapped_column(
        ForeignKey("patients.id", ondelete="SET NULL"), nullable=True, unique=True
    )

    def __repr__(self) -> str:
        return f"User({self.id}, {self.username}, {self.role.value})"
