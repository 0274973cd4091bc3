from __future__ import annotations

import pytest

from backend.cli import main


def test_cli_flow(capsys):
    # DB globale in memoria (DATABASE_URL impostato in conftest)
    assert main(["init"]) == 0

    assert main(["--as", "user1", "list", "appointments"]) == 0
    out = capsys.readouterr().out
    assert "2025-04-01T15:00:00" in out
    assert "2025-04-03T10:00:00" not in out

    # user1 è l'utente 2, collegato al paziente 1
    assert main(["--as", "user1", "delete-user", "--user-id", "2"]) == 1
    assert main(["--as", "user1", "book", "--patient-id", "2", "--start", "2026-01-14T10:30"]) == 1
    assert main(["--as", "user1", "book", "--patient-id", "1", "--start", "2026-01-14T10:30"]) == 0

    assert main(["delete-user", "--user-id", "2"]) == 0
    assert main(["delete-user", "--user-id", "2"]) == 1

    capsys.readouterr()
    assert main(["list", "patients"]) == 0
    out = capsys.readouterr().out
    assert "Max Mustermann" not in out
    assert "Erika Mustermann" in out

    assert main(["--as", "ghost", "list", "patients"]) == 2


@pytest.mark.parametrize(
    "argv",
    [
        ["book", "--patient-id", "1", "--start", "domani alle dieci"],
        ["register", "--username", "x", "--password", "pw", "--name", "X", "--birth-date", "31/01/1990"],
    ],
)
def test_cli_rejects_malformed_dates(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    assert exc.value.code == 2
    assert "invalid fromisoformat value" in capsys.readouterr().err
