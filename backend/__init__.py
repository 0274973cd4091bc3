"""
Backend applicativo Ambulatorio (pazienti, appuntamenti, utenti).

Struttura:
- db.py           : engine, sessioni SQLAlchemy e unità di lavoro
- models.py       : modelli ORM (Patient, Appointment, User) e ruoli
- repositories.py : accesso ai dati per entità
- identity.py     : risoluzione del principal autenticato in Actor
- ownership.py    : regola di possesso (admin o paziente collegato)
- services.py     : appuntamenti e pazienti con controllo accessi
- cascade.py      : cancellazione a cascata utente/paziente/appuntamenti
- auth_*.py       : password, token JWT, registrazione e login
- api_main.py     : API REST (FastAPI)
- seed.py         : dati demo
- cli.py          : CLI amministrativa
"""
