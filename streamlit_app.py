from __future__ import annotations

import base64
import json
import os
from datetime import date, datetime, timezone

import requests
import streamlit as st

st.set_page_config(page_title="Ambulatorio", layout="wide")

API_BASE = os.getenv("API_BASE", "http://127.0.0.1:8000")



# JWT helpers (solo per UI, senza verifica firma)

def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def jwt_payload(token: str) -> dict:
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    try:
        payload = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def jwt_is_expired(token: str) -> bool:
    exp = jwt_payload(token).get("exp")
    if not isinstance(exp, int):
        return False
    now = int(datetime.now(tz=timezone.utc).timestamp())
    return now >= (exp - 5)



# HTTP client (con JWT)

class ApiError(Exception):
    pass


def _call(method: str, path: str, token: str | None = None, **kwargs) -> dict | list:
    headers = {}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    r = requests.request(method, f"{API_BASE}{path}", headers=headers, timeout=10, **kwargs)

    if r.status_code == 401:
        raise PermissionError("401 Unauthorized (token non valido/scaduto oppure backend riavviato).")
    if r.status_code >= 400:
        try:
            detail = r.json().get("detail")
        except ValueError:
            detail = r.text
        raise ApiError(f"{r.status_code}: {detail}")
    return r.json()


def api_login(username: str, password: str) -> str:
    # OAuth2PasswordRequestForm => x-www-form-urlencoded
    r = requests.post(
        f"{API_BASE}/api/auth/login",
        data={"username": username, "password": password},
        timeout=10,
    )
    r.raise_for_status()
    return r.json()["access_token"]


def require_auth() -> str | None:
    token = st.session_state.get("token")
    if not token:
        st.warning("Sezione riservata. Effettua il login dalla sidebar.")
        return None

    if jwt_is_expired(token):
        st.error("Sessione scaduta. Effettua Logout dalla sidebar e rifai login.")
        return None

    return token



# Sidebar login / registrazione

with st.sidebar:
    st.header("Accesso")

    token = st.session_state.get("token")

    if not token:
        u = st.text_input("Username", key="login_user")
        p = st.text_input("Password", type="password", key="login_pass")

        if st.button("Login", key="login_btn"):
            try:
                st.session_state["token"] = api_login(u.strip().lower(), p)
                st.rerun()
            except requests.HTTPError:
                st.error("Credenziali non valide.")

        with st.expander("Registrati"):
            r_user = st.text_input("Username", key="reg_user")
            r_pass = st.text_input("Password", type="password", key="reg_pass")
            r_name = st.text_input("Nome e cognome", key="reg_name")
            r_birth = st.date_input("Data di nascita", value=date(1990, 1, 1), key="reg_birth")
            if st.button("Crea account", key="reg_btn"):
                try:
                    _call("POST", "/api/auth/register", json={
                        "username": r_user, "password": r_pass, "name": r_name, "birth_date": r_birth.isoformat(),
                    })
                    st.success("Registrazione completata, ora puoi fare login.")
                except ApiError as e:
                    st.error(str(e))
    else:
        claims = jwt_payload(token)
        st.write(f"Utente: **{claims.get('sub', 'utente')}** ({claims.get('role', '-')})")
        if st.button("Logout", key="logout_btn"):
            st.session_state.pop("token", None)
            st.rerun()

    st.divider()
    st.caption(f"API: {API_BASE}")



# UI

st.title("Ambulatorio (API REST + JWT + Streamlit)")

tab1, tab2, tab3 = st.tabs(["Appuntamenti", "Pazienti", "Amministrazione"])



# TAB 1 - Appuntamenti

with tab1:
    token = require_auth()
    if token:
        try:
            pazienti = _call("GET", "/api/patients", token=token)
            appuntamenti = _call("GET", "/api/appointments", token=token)
        except (PermissionError, ApiError) as e:
            st.error(str(e))
            pazienti, appuntamenti = [], []

        st.subheader("Prenota appuntamento")
        c1, c2, c3 = st.columns(3)
        paziente = c1.selectbox("Paziente", options=pazienti, format_func=lambda p: f"{p['name']} ({p['id']})")
        giorno = c2.date_input("Data", value=date.today(), key="app_data")
        ora = c3.time_input("Ora", value=datetime.now().time().replace(second=0, microsecond=0), key="app_ora")

        if st.button("Conferma prenotazione", disabled=not pazienti):
            try:
                res = _call("POST", "/api/appointments", token=token, json={
                    "patient_id": paziente["id"],
                    "date_time": datetime.combine(giorno, ora).isoformat(),
                })
                st.success(f"Appuntamento creato (ID: {res['appointment_id']})")
            except (PermissionError, ApiError) as e:
                st.error(str(e))

        st.divider()
        if not appuntamenti:
            st.info("Nessun appuntamento.")
        for a in appuntamenti:
            col_a, col_b = st.columns([4, 1])
            col_a.write(f"- **{a['date_time']}** | Paziente: {a['patient_id']} | ID {a['id']}")
            if col_b.button("Cancella", key=f"del_app_{a['id']}"):
                try:
                    _call("DELETE", f"/api/appointments/{a['id']}", token=token)
                    st.rerun()
                except (PermissionError, ApiError) as e:
                    st.error(str(e))



# TAB 2 - Pazienti

with tab2:
    token = require_auth()
    if token:
        try:
            pazienti = _call("GET", "/api/patients", token=token)
            if not pazienti:
                st.info("Nessun paziente collegato.")
            for p in pazienti:
                st.write(f"- {p['name']} | nato il {p['birth_date']} | ID {p['id']}")
        except (PermissionError, ApiError) as e:
            st.error(str(e))

        st.divider()
        st.write("Dettaglio paziente:")
        det_id = st.number_input("ID paziente", min_value=1, step=1, key="paz_det_id")
        if st.button("Cerca", key="paz_det_btn"):
            try:
                p = _call("GET", f"/api/patients/{int(det_id)}", token=token)
                st.success(f"{p['name']} | nato il {p['birth_date']} | ID {p['id']}")
            except (PermissionError, ApiError) as e:
                # 403 per pazienti altrui, 404 se non esiste
                st.error(str(e))



# TAB 3 - Amministrazione (solo admin: le API rispondono 403 agli altri)

with tab3:
    token = require_auth()
    if token:
        st.subheader("Cancellazione a cascata")
        st.caption("Rimuove utente, paziente collegato e tutti i suoi appuntamenti.")

        c1, c2 = st.columns(2)
        user_id = c1.number_input("ID utente", min_value=1, step=1, key="adm_user")
        if c1.button("Cancella utente"):
            try:
                _call("DELETE", f"/api/users/{int(user_id)}", token=token)
                st.success("Utente cancellato.")
            except (PermissionError, ApiError) as e:
                st.error(str(e))

        patient_id = c2.number_input("ID paziente", min_value=1, step=1, key="adm_patient")
        if c2.button("Cancella paziente"):
            try:
                _call("DELETE", f"/api/patients/{int(patient_id)}", token=token)
                st.success("Paziente cancellato.")
            except (PermissionError, ApiError) as e:
                st.error(str(e))
