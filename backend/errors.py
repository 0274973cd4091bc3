"""
Errori di dominio.

Ogni errore porta lo status HTTP equivalente: il livello API li traduce
in risposta con un unico exception handler.
"""
from __future__ import annotations


class ClinicError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ClinicError):
    """Input malformato o riferimento obbligatorio mancante."""
    status_code = 400


class PatientNotFound(ValidationError):
    """Il paziente indicato per un appuntamento non esiste."""


class NotFound(ClinicError):
    status_code = 404


class Forbidden(ClinicError):
    status_code = 403


class UsernameTaken(ClinicError):
    status_code = 409


class UnknownPrincipal(ClinicError):
    """
    Identità autenticata senza record utente corrispondente.
    Errore fatale (incoerenza tra autenticazione e persistenza), non un 4xx.
    """
    status_code = 500
