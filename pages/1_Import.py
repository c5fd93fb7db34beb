# pages/1_Import.py
import streamlit as st

from roster_core.constants import IMPORT_FIELDS
from roster_core.importer import ImportDecodeError, load_import
from session_state import get_controller, local_mode_banner, run

st.title("Importar Excel")
st.write("Sube un archivo .xlsx con los datos de tus atletas. La primera fila debe tener los encabezados.")
local_mode_banner()

ctrl = get_controller()
ss = st.session_state
ss.setdefault("import_session", None)
ss.setdefault("import_file_id", None)

uploaded = st.file_uploader("Archivo", type=["xlsx", "csv"])
if uploaded is not None and uploaded.file_id != ss["import_file_id"]:
    try:
        ss["import_session"] = load_import(uploaded.getvalue(), filename=uploaded.name)
        ss["import_file_id"] = uploaded.file_id
    except ImportDecodeError as exc:
        ss["import_session"] = None
        st.error(str(exc))
        st.stop()

session = ss["import_session"]
if session is None:
    st.stop()

# ---------- Column mapping ----------
st.subheader("Mapeo de Columnas")
options = list(IMPORT_FIELDS.keys())
cols = st.columns(3)
for i, header in enumerate(session.headers):
    with cols[i % 3]:
        current = session.mapping.get(header) or ""
        choice = st.selectbox(
            f"Excel: {header or '(sin encabezado)'}",
            options,
            index=options.index(current),
            format_func=lambda f: IMPORT_FIELDS[f],
            key=f"map_{i}_{header}",
        )
        session.remap(header, choice or None)

# ---------- Preview ----------
records = session.records
st.subheader(f"Preview ({len(records)} atletas)")
if session.dropped_count:
    st.caption(f"{session.dropped_count} fila(s) sin nombre serán omitidas.")
st.dataframe(session.preview(8), use_container_width=True)
if len(records) > 8:
    st.caption(f"... y {len(records) - 8} más")

c_back, c_go = st.columns(2)
with c_back:
    if st.button("Subir otro archivo"):
        ss["import_session"] = None
        ss["import_file_id"] = None
        st.rerun()
with c_go:
    if st.button(f"Importar {len(records)} Atletas", type="primary", disabled=not records):
        report = run(ctrl.import_athletes(records))
        if report.error:
            st.error(f"La importación falló: {report.error}")
        else:
            st.success(f"{report.inserted} atletas importados.")
            ss["import_session"] = None
            ss["import_file_id"] = None
