# app.py
import streamlit as st

from roster_core.constants import PAYMENT_STATUSES
from roster_core.ui_helpers import ROSTER_COLUMNS, changed_fields, roster_to_dataframe
from session_state import get_controller, local_mode_banner, run

# ---------- Page ----------
st.set_page_config(page_title="Coach Dashboard", layout="wide")

def _init_state():
    ss = st.session_state
    ss.setdefault("only_trained", False)
    ss.setdefault("last_error", None)

_init_state()
ctrl = get_controller()
local_mode_banner()

st.title("Coach Dashboard")

# ---------- Header stats / filters ----------
todays = run(ctrl.todays_logs())
col_p, col_t, col_f, col_n, col_r = st.columns([1, 1, 2, 1, 1])
with col_p:
    st.metric("Pagos pendientes", ctrl.pending_count())
with col_t:
    st.metric("Entrenaron hoy", len({log.get("athlete_id") for log in todays}))
with col_f:
    st.session_state["only_trained"] = st.toggle("Filtrar: Entrenaron Hoy", value=st.session_state["only_trained"])
with col_n:
    if st.button("New Athlete", use_container_width=True):
        receipt = run(ctrl.add_athlete())
        if not receipt.confirmed:
            st.session_state["last_error"] = receipt.error
        st.rerun()
with col_r:
    if st.button("Refresh", use_container_width=True):
        run(ctrl.refresh())
        st.rerun()

search = st.text_input("Search athlete", placeholder="SEARCH ATHLETE...").strip().lower()

# ---------- Roster table (derived view; base roster untouched) ----------
athletes = ctrl.trained_today_view(todays, only_trained=st.session_state["only_trained"])
if search:
    athletes = [a for a in athletes if search in a.name.lower()]

before = roster_to_dataframe(athletes)
edited = st.data_editor(
    before,
    key="roster_editor",
    hide_index=True,
    use_container_width=True,
    disabled=["id"],
    column_order=ROSTER_COLUMNS[1:],
    column_config={
        "payment_status": st.column_config.SelectboxColumn("Pago", options=PAYMENT_STATUSES, required=True),
        "name": st.column_config.TextColumn("Nombre", required=True),
        "cut_day": st.column_config.TextColumn("Corte"),
    },
)

# each edited field is committed on its own; failures revert silently
edits = changed_fields(before, edited)
if edits:
    for aid, fields in edits.items():
        run(ctrl.update_athlete(aid, fields))
    # drop the editor's pending edits so a reverted write is not replayed
    del st.session_state["roster_editor"]
    st.rerun()

# ---------- Per-athlete actions ----------
st.subheader("Acciones")
for a in athletes:
    c1, c2, c3 = st.columns([3, 1, 1])
    with c1:
        st.write(f"**{a.name}** · corte {a.cut_day or '—'} · código `{a.access_code or '—'}`")
    with c2:
        label = "Marcar pendiente" if a.payment_status == "active" else "Marcar pagado"
        if st.button(label, key=f"pay_{a.id}", use_container_width=True):
            run(ctrl.toggle_payment_status(a.id))
            st.rerun()
    with c3:
        if st.button("Eliminar", key=f"del_{a.id}", use_container_width=True):
            run(ctrl.delete_athlete(a.id))
            st.rerun()

if st.session_state["last_error"]:
    st.caption(f"Última operación revertida: {st.session_state['last_error']}")
    st.session_state["last_error"] = None
