from __future__ import annotations

import argparse
import sys
from datetime import date, datetime

from backend.auth_service import create_admin, register_user
from backend.cascade import delete_by_patient_id, delete_by_user_id
from backend.db import db_session, init_db
from backend.errors import ClinicError, UnknownPrincipal
from backend.identity import resolve_actor
from backend.log import configure_logging
from backend.seed import seed_base
from backend.services import create_appointment, delete_appointment, list_appointments, list_patients


def cmd_init(args: argparse.Namespace) -> None:
    seed_base()
    print("DB inizializzato e seed completato.")


def cmd_list(args: argparse.Namespace) -> None:
    with db_session() as s:
        actor = resolve_actor(s, args.as_user)
        if args.entity == "patients":
            for p in list_patients(s, actor):
                print(f"{p.id} | {p.name} | {p.birth_date.isoformat()}")
        elif args.entity == "appointments":
            for a in list_appointments(s, actor):
                print(f"{a.id} | {a.date_time.isoformat()} | paziente {a.patient_id}")


def cmd_register(args: argparse.Namespace) -> None:
    with db_session() as s:
        u = register_user(s, args.username, args.password, args.name, args.birth_date)
        print(f"Utente creato: {u.id} (paziente {u.patient_id})")


def cmd_create_admin(args: argparse.Namespace) -> None:
    with db_session() as s:
        u = create_admin(s, args.username, args.password)
        print(f"Amministratore creato: {u.id}")


def cmd_book(args: argparse.Namespace) -> None:
    with db_session() as s:
        actor = resolve_actor(s, args.as_user)
        app = create_appointment(s, actor, args.start, args.patient_id)
        print(f"Appuntamento ID: {app.id}")


def cmd_cancel(args: argparse.Namespace) -> None:
    with db_session() as s:
        actor = resolve_actor(s, args.as_user)
        delete_appointment(s, actor, args.appointment_id)
    print("Appuntamento cancellato.")


def cmd_delete_user(args: argparse.Namespace) -> None:
    with db_session() as s:
        actor = resolve_actor(s, args.as_user)
        delete_by_user_id(s, actor.role, args.user_id)
    print("Utente, paziente e appuntamenti cancellati.")


def cmd_delete_patient(args: argparse.Namespace) -> None:
    with db_session() as s:
        actor = resolve_actor(s, args.as_user)
        delete_by_patient_id(s, actor.role, args.patient_id)
    print("Paziente, utente e appuntamenti cancellati.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="clinic_cli", description="CLI amministrativa dell'ambulatorio")
    p.add_argument("--as", dest="as_user", default="admin", help="Username con cui agire (default: admin)")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Crea DB e carica seed")
    p_init.set_defaults(func=cmd_init)

    p_list = sub.add_parser("list", help="Lista entità visibili all'utente")
    p_list.add_argument("entity", choices=["patients", "appointments"])
    p_list.set_defaults(func=cmd_list)

    p_reg = sub.add_parser("register", help="Registra utente + paziente")
    p_reg.add_argument("--username", required=True)
    p_reg.add_argument("--password", required=True)
    p_reg.add_argument("--name", required=True)
    p_reg.add_argument("--birth-date", type=date.fromisoformat, required=True, help="ISO date es: 1990-01-31")
    p_reg.set_defaults(func=cmd_register)

    p_adm = sub.add_parser("create-admin", help="Crea amministratore (senza paziente)")
    p_adm.add_argument("--username", required=True)
    p_adm.add_argument("--password", required=True)
    p_adm.set_defaults(func=cmd_create_admin)

    p_book = sub.add_parser("book", help="Prenota appuntamento")
    p_book.add_argument("--patient-id", type=int, required=True)
    p_book.add_argument("--start", type=datetime.fromisoformat, required=True, help="ISO datetime es: 2026-01-14T10:30")
    p_book.set_defaults(func=cmd_book)

    p_cancel = sub.add_parser("cancel", help="Cancella appuntamento")
    p_cancel.add_argument("--appointment-id", type=int, required=True)
    p_cancel.set_defaults(func=cmd_cancel)

    p_du = sub.add_parser("delete-user", help="Cancella utente con paziente e appuntamenti")
    p_du.add_argument("--user-id", type=int, required=True)
    p_du.set_defaults(func=cmd_delete_user)

    p_dp = sub.add_parser("delete-patient", help="Cancella paziente con utente e appuntamenti")
    p_dp.add_argument("--patient-id", type=int, required=True)
    p_dp.set_defaults(func=cmd_delete_patient)

    return p


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    init_db()  # garantisce tabelle
    try:
        args.func(args)
    except UnknownPrincipal as e:
        print(f"Errore fatale: {e.message}", file=sys.stderr)
        return 2
    except ClinicError as e:
        print(f"Errore: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
