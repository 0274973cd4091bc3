from __future__ import annotations

import pytest

from backend.identity import Actor
from backend.models import Role
from backend.ownership import owns


@pytest.mark.parametrize("patient_id", [1, 7, 9, 12345])
def test_admin_owns_every_patient(patient_id):
    assert owns(Actor(id=1, role=Role.ADMIN), patient_id) is True


def test_admin_with_linked_patient_still_owns_others():
    actor = Actor(id=1, role=Role.ADMIN, linked_patient_id=7)
    assert owns(actor, 9) is True


def test_user_owns_only_linked_patient(user_actor):
    assert owns(user_actor, 7) is True
    for other in (1, 8, 9, 70):
        assert owns(user_actor, other) is False


def test_user_without_linked_patient_owns_nothing():
    actor = Actor(id=4, role=Role.USER)
    assert owns(actor, 7) is False
    assert owns(actor, None) is False
