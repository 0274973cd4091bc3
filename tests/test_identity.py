from __future__ import annotations

import pytest

from backend.errors import UnknownPrincipal
from backend.identity import Actor, resolve_actor
from backend.models import Role


def test_resolve_user_with_linked_patient(s, make_patient, make_user):
    p = make_patient()
    u = make_user("anna", patient_id=p.id)

    actor = resolve_actor(s, "anna")

    assert actor == Actor(id=u.id, role=Role.USER, linked_patient_id=p.id)
    assert not actor.is_admin


def test_resolve_admin_without_patient(s, make_user):
    u = make_user("admin", role=Role.ADMIN)

    actor = resolve_actor(s, "admin")

    assert actor.id == u.id
    assert actor.is_admin
    assert actor.linked_patient_id is None


def test_principal_name_is_canonicalized(s, make_user):
    make_user("anna")
    assert resolve_actor(s, "  Anna ").role is Role.USER


def test_unknown_principal_is_fatal(s):
    with pytest.raises(UnknownPrincipal) as exc:
        resolve_actor(s, "ghost")
    assert exc.value.status_code == 500
