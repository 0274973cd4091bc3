from __future__ import annotations

from .identity import Actor


def owns(actor: Actor, patient_id: int | None) -> bool:
    """
    True se l'actor è admin, oppure se il paziente è quello collegato all'actor.
    Confronto solo per id, mai tra oggetti interi.
    """
    if actor.is_admin:
        return True
    return actor.linked_patient_id is not None and actor.linked_patient_id == patient_id
