# pages/2_Athlete_Check_In.py
import streamlit as st

from roster_core.access import login, login_choices
from roster_core.constants import LIFT_FIELDS, BENCHMARK_FIELDS
from roster_core.progress import trend
from session_state import get_adapter, get_config, get_controller, local_mode_banner, run

st.title("Athlete Check-In")
local_mode_banner()

ss = st.session_state
ss.setdefault("current_athlete", None)

if ss["current_athlete"] is None:
    choices = run(login_choices(get_adapter(), get_config().athletes_table))
    if not choices:
        st.info("No hay atletas registrados.")
        st.stop()
    with st.form("athlete_login"):
        picked = st.selectbox("Atleta", choices, format_func=lambda c: c["name"])
        code = st.text_input("Código", type="password")
        submitted = st.form_submit_button("Entrar")
    if submitted:
        athlete = run(login(get_adapter(), picked["id"], code, get_config().athletes_table))
        if athlete is None:
            st.error("Código Incorrecto")
        else:
            ss["current_athlete"] = athlete
            st.rerun()
    st.stop()

athlete = ss["current_athlete"]
ctrl = get_controller()

head, out = st.columns([4, 1])
with head:
    st.header(athlete.name)
with out:
    if st.button("Salir"):
        ss["current_athlete"] = None
        st.rerun()

# ---------- PRs ----------
st.subheader("Mis RMs")
ARROWS = {"up": "▲", "down": "▼", "flat": None}
cols = st.columns(5)
for i, field in enumerate(LIFT_FIELDS + BENCHMARK_FIELDS):
    direction = trend(run(ctrl.progress_for(athlete.id, field)))
    with cols[i % 5]:
        st.metric(field.replace("_", " ").title(), getattr(athlete, field) or "—",
                  delta=ARROWS[direction], delta_color="off")

# ---------- Daily check-in ----------
st.subheader("Check-in de hoy")
with st.form("check_in"):
    energy = st.slider("Energía", 1, 5, 3)
    rpe = st.slider("RPE", 1, 10, 5)
    notes = st.text_area("Notas")
    sent = st.form_submit_button("Registrar WOD")
if sent:
    res = run(ctrl.record_check_in(athlete.id, energy=energy, rpe=rpe, notes=notes))
    if res.ok:
        st.success("WOD Registrado con Éxito!")
    else:
        st.warning(f"No se pudo registrar: {res.error.message}")
