# app.py
import streamlit as st
import pandas as pd

from distribuidor.config import load_config
from distribuidor.data_loader import decode_workbook, encode_tables
from distribuidor.export import to_tables
from distribuidor.extraction import extract_students
from distribuidor.mixing import make_rng
from distribuidor.model import Room
from distribuidor.pipeline import capacity_summary, distribute

# --- CONFIGURACIÓN DE PÁGINA ---
st.set_page_config(page_title="Gestión de Salas", layout="centered")

# --- ESTILOS CSS ---
st.markdown("""
    <style>
    .stButton>button {
        width: 100%;
        font-weight: bold;
        height: 48px;
    }
    .step-label {
        font-family: Arial, sans-serif;
        font-weight: bold;
        margin-top: 20px;
        margin-bottom: 10px;
        border-bottom: 2px solid #ff4b4b;
        padding-bottom: 5px;
    }
    </style>
""", unsafe_allow_html=True)


# --- FUNCIONES HELPERS ---
def step_label(step, label):
    st.markdown(f"<div class='step-label'>{step}. {label}</div>", unsafe_allow_html=True)


def reset_workbook(sheets, file_name):
    st.session_state.sheets = sheets
    st.session_state.file_name = file_name
    st.session_state.selected = []
    st.session_state.result = None
    for key in [k for k in st.session_state.keys() if str(k).startswith("sheet_")]:
        del st.session_state[key]


def toggle_sheet(name):
    # La selección conserva el orden en que se marcaron las hojas
    selected = st.session_state.selected
    if name in selected:
        selected.remove(name)
    else:
        selected.append(name)
    st.session_state.result = None


def read_rooms(count):
    rooms, errors = [], []
    for i in range(count):
        name = st.session_state.get(f"room_name_{i}", "")
        seats = st.session_state.get(f"room_seats_{i}", 0)
        try:
            rooms.append(Room.from_values(name, seats))
        except ValueError as e:
            errors.append(str(e))
    return rooms, errors


def render_result(result, cfg):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Alumnos", result.total_students)
    c2.metric("Asignados", result.allocated_count)
    c3.metric("Salas", len(result.assignments))
    c4.metric("Lugares", result.total_capacity)

    if result.unallocated_count > 0:
        st.warning(f"⚠️ {result.unallocated_count} alumno(s) no fueron asignados por falta de lugares.")

    name_col, group_col = cfg.export_columns
    for a in result.assignments:
        with st.expander(f"Sala {a.room.name}: {len(a.occupants)}/{a.room.capacity} lugares", expanded=False):
            if not a.occupants:
                st.caption("Ningún alumno en esta sala.")
                continue
            df = pd.DataFrame(
                [{name_col: s.name, group_col: s.group} for s in a.occupants],
                index=range(1, len(a.occupants) + 1),
            )
            st.dataframe(df, use_container_width=True)

    st.download_button(
        "📥 Exportar Excel con la Distribución",
        data=encode_tables(to_tables(result, cfg), cfg.export_columns),
        file_name=cfg.output_file,
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


# --- MAIN APP ---
def main():
    if 'cfg' not in st.session_state:
        st.session_state.cfg = load_config("config.yaml")
    cfg = st.session_state.cfg

    # INICIALIZACIÓN DE ESTADO
    if 'sheets' not in st.session_state: st.session_state.sheets = None
    if 'file_name' not in st.session_state: st.session_state.file_name = ""
    if 'selected' not in st.session_state: st.session_state.selected = []
    if 'result' not in st.session_state: st.session_state.result = None

    result = st.session_state.result
    st.title("Distribución de Alumnos" if result else "Importar Planilla")
    st.caption(
        "Verifique la asignación de los alumnos en las salas" if result
        else "Envíe su archivo Excel y configure las salas para la distribución"
    )

    if result:
        if st.session_state.get('flash'):
            st.success(st.session_state.pop('flash'))
        render_result(result, cfg)
        if st.button("🔄 Nueva Distribución"):
            st.session_state.result = None
            st.rerun()
        return

    # 1. ARCHIVO
    step_label(1, "Envíe el archivo Excel")
    upload = st.file_uploader("Planilla de alumnos", type=["xlsx", "xls", "csv"])
    if upload is not None and upload.name != st.session_state.file_name:
        try:
            reset_workbook(decode_workbook(upload.getvalue(), upload.name), upload.name)
            st.success(f"Archivo {upload.name} cargado.")
        except ValueError as e:
            st.error(str(e))

    sheets = st.session_state.sheets
    if not sheets:
        return

    # 2. HOJAS
    step_label(2, "Seleccione las hojas")
    cols = st.columns(3)
    for i, name in enumerate(sheets):
        cols[i % 3].checkbox(
            name,
            value=name in st.session_state.selected,
            key=f"sheet_{name}",
            on_change=toggle_sheet,
            args=(name,),
        )
    total_students = len(extract_students(sheets, st.session_state.selected, cfg))

    # 3. SALAS
    step_label(3, "Configure las salas")
    defaults = cfg.default_rooms()
    count = int(st.number_input("Cantidad de salas", min_value=1, step=1, value=max(1, len(defaults))))
    for i in range(count):
        default = defaults[i] if i < len(defaults) else Room("", 0)
        c1, c2 = st.columns([2, 1])
        c1.text_input(f"Sala {i + 1}", value=default.name,
                      placeholder=f"Ej: Sala {i + 1}A", key=f"room_name_{i}")
        c2.number_input("Asientos", min_value=0, step=1, value=default.capacity,
                        key=f"room_seats_{i}")
    rooms, errors = read_rooms(count)
    for err in errors:
        st.error(err)

    if total_students > 0:
        summary = capacity_summary(total_students, rooms)
        m1, m2, m3 = st.columns(3)
        m1.metric("Alumnos", summary["total_students"])
        m2.metric("Asientos", summary["total_seats"])
        if summary["missing_seats"] > 0:
            m3.metric("Faltan", summary["missing_seats"])
        else:
            m3.metric("Asientos suficientes", 0)

    if st.session_state.selected and any(r.name for r in rooms) and not errors:
        if st.button("✅ Distribuir Alumnos"):
            outcome = distribute(sheets, st.session_state.selected, rooms, rng=make_rng(cfg.seed), cfg=cfg)
            if not outcome.ok:
                st.error(outcome.message)
            else:
                st.session_state.result = outcome.result
                st.session_state['flash'] = outcome.message
                st.rerun()


if __name__ == "__main__":
    main()
