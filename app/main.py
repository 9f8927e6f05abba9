"""Streamlit UI for tracking property sales."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import streamlit as st
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)

from app.backend_client import ApiError, BackendClient
from app.components.cards import render_property_card, status_badge
from app.components.charts import render_collection_chart, render_status_chart
from app.components.tables import milestones_frame, render_buyer_table, render_units_table
from app.files import decode_file, encode_upload
from app.payloads import (
    PROPERTY_TYPES,
    STATUS_LABELS,
    milestone_payload,
    milestone_toggle,
    property_payload,
    unit_payload,
)
from app.state import STEP_PHASES, STEP_PROPERTIES, STEP_UNITS, ViewState, uses_phases

st.set_page_config(page_title="Property Sales Tracker", layout="wide", page_icon="🏗️")


@st.cache_resource(show_spinner=False)
def get_backend_client() -> BackendClient:
    return BackendClient()


def load_styles() -> None:
    css_path = Path(__file__).resolve().parent / "assets" / "styles.css"
    if css_path.exists():
        st.markdown(f"<style>{css_path.read_text()}</style>", unsafe_allow_html=True)


def get_view() -> ViewState:
    if "view" not in st.session_state:
        st.session_state["view"] = ViewState()
    return st.session_state["view"]


def refresh(property_id: Optional[str] = None) -> List[Dict]:
    """Re-fetch the whole property list and re-resolve the selection."""
    view = get_view()
    try:
        properties = get_backend_client().list_properties()
        st.session_state.pop("load_error", None)
    except ApiError as exc:
        st.session_state["load_error"] = exc.message
        properties = st.session_state.get("properties", [])
    st.session_state["properties"] = properties
    view.reconcile(properties, property_id)
    return properties


def submit(form: str, action: Callable[[], object], property_id: Optional[str] = None) -> Optional[object]:
    """Run one API call for ``form``; errors are kept for display beside it."""
    view = get_view()
    view.clear_error(form)
    try:
        result = action()
    except ApiError as exc:
        view.set_error(form, exc.message)
        return None
    refresh(property_id or view.property_id)
    return result


def show_error(form: str) -> None:
    message = get_view().error_for(form)
    if message:
        st.error(message)


# ----------------------------------------------------------------------
# Step tabs
def render_steps(properties: List[Dict]) -> None:
    view = get_view()
    tabs = view.steps(properties)
    columns = st.columns(len(tabs))
    for column, tab in zip(columns, tabs):
        with column:
            label = f"**{tab.title}**" if tab.key == view.step else tab.title
            st.button(
                tab.title,
                key=f"step-{tab.key}",
                disabled=not tab.enabled or tab.key == view.step,
                on_click=view.go_to,
                args=(tab.key,),
                width="stretch",
            )
            st.caption(f"{label} · {tab.description}")


# ----------------------------------------------------------------------
# Properties
def _open_property(prop: Dict) -> None:
    view = get_view()
    view.select_property(prop["id"])
    view.reconcile(st.session_state.get("properties", []))
    view.go_to(STEP_PHASES if uses_phases(prop) else STEP_UNITS)


def _delete_property(property_id: str) -> None:
    st.session_state["confirm_delete_property"] = property_id


def render_property_form() -> None:
    view = get_view()
    st.button("New property", on_click=view.toggle_form, args=("property",))
    if view.open_form != "property":
        return
    with st.form("property-form", clear_on_submit=False):
        name = st.text_input("Name")
        location = st.text_input("Location")
        property_type = st.selectbox(
            "Type", options=list(PROPERTY_TYPES), format_func=lambda value: PROPERTY_TYPES[value]
        )
        phased = st.checkbox("Track sales by phase", value=True, help="Villas are always tracked without phases.")
        submitted = st.form_submit_button("Create property")
    show_error("property")
    if submitted:
        payload = property_payload({"name": name, "location": location, "type": property_type, "usesPhases": phased})
        created = submit("property", lambda: get_backend_client().create_property(payload))
        if created:
            view.open_form = None
            refresh(created["id"])
        st.rerun()


def render_delete_confirmation(properties: List[Dict]) -> None:
    property_id = st.session_state.get("confirm_delete_property")
    prop = next((p for p in properties if p["id"] == property_id), None)
    if prop is None:
        return
    st.warning(f"Delete {prop['name']} and all of its phases and units?")
    yes_col, no_col = st.columns(2)
    if yes_col.button("Yes, delete", key="confirm-delete-property"):
        submit("delete-property", lambda: get_backend_client().delete_property(property_id))
        st.session_state.pop("confirm_delete_property", None)
        st.rerun()
    if no_col.button("Cancel", key="cancel-delete-property"):
        st.session_state.pop("confirm_delete_property", None)
        st.rerun()


def render_properties_step(properties: List[Dict]) -> None:
    view = get_view()
    render_property_form()
    render_delete_confirmation(properties)
    show_error("delete-property")
    if not properties:
        st.info("No properties yet. Create one to start tracking units.")
        return
    columns = st.columns(3)
    for idx, prop in enumerate(properties):
        with columns[idx % 3]:
            render_property_card(
                prop,
                selected=prop["id"] == view.property_id,
                on_select=lambda p=prop: _open_property(p),
                on_delete=lambda pid=prop["id"]: _delete_property(pid),
            )


# ----------------------------------------------------------------------
# Phases
def _open_phase(phase_id: str) -> None:
    view = get_view()
    view.select_phase(phase_id)
    view.go_to(STEP_UNITS)


def render_phases_step(prop: Dict) -> None:
    view = get_view()
    st.subheader(f"{prop['name']} · phases")
    st.button("New phase", on_click=view.toggle_form, args=("phase",))
    if view.open_form == "phase":
        with st.form("phase-form"):
            name = st.text_input("Phase name")
            submitted = st.form_submit_button("Add phase")
        show_error("phase")
        if submitted and name.strip():
            phase = submit("phase", lambda: get_backend_client().create_phase(prop["id"], name.strip()))
            if phase:
                view.select_phase(phase["id"])
                view.go_to(STEP_UNITS)
            st.rerun()

    phases = prop.get("phases") or []
    if not phases:
        st.info("No phases yet. Add one to start listing units.")
        return
    for phase in phases:
        units = phase.get("units") or []
        sold = sum(1 for unit in units if unit.get("status") == "sold")
        name_col, count_col, open_col = st.columns([3, 2, 1])
        name_col.markdown(f"**{phase['name']}**")
        count_col.caption(f"{len(units)} units · {sold} sold")
        open_col.button("Open", key=f"phase-{phase['id']}", on_click=_open_phase, args=(phase["id"],))


# ----------------------------------------------------------------------
# Units
def unit_form_fields(prefix: str, unit: Optional[Dict] = None) -> Dict:
    unit = unit or {}
    buyer = unit.get("buyer") or {}
    contract = unit.get("contract") or {}
    statuses = list(STATUS_LABELS)

    def _num(value) -> str:
        return "" if value is None else f"{value:g}"

    values: Dict = {}
    left, right = st.columns(2)
    with left:
        values["unitNumber"] = st.text_input("Unit number", value=unit.get("unitNumber", ""), key=f"{prefix}-number")
        values["status"] = st.selectbox(
            "Status",
            options=statuses,
            index=statuses.index(unit["status"]) if unit.get("status") in statuses else 0,
            format_func=lambda value: STATUS_LABELS[value],
            key=f"{prefix}-status",
        )
        values["listPrice"] = st.text_input("List price", value=_num(unit.get("listPrice")), key=f"{prefix}-list")
        values["salePrice"] = st.text_input("Sale price", value=_num(unit.get("salePrice")), key=f"{prefix}-sale")
        values["totalReceived"] = st.text_input(
            "Total received", value=_num(unit.get("totalReceived")), key=f"{prefix}-received"
        )
    with right:
        values["buyer"] = {
            "name": st.text_input("Buyer name", value=buyer.get("name", ""), key=f"{prefix}-buyer"),
            "passportNumber": st.text_input(
                "Passport number", value=buyer.get("passportNumber", ""), key=f"{prefix}-passport"
            ),
            "purchaseDate": st.text_input(
                "Purchase date (YYYY-MM-DD)", value=buyer.get("purchaseDate", ""), key=f"{prefix}-date"
            ),
            "phone": st.text_input("Buyer phone", value=buyer.get("phone", ""), key=f"{prefix}-phone"),
            "initialPayment": st.text_input(
                "Initial payment", value=_num(buyer.get("initialPayment")), key=f"{prefix}-initial"
            ),
            "firstPayment": st.text_input(
                "First payment", value=_num(buyer.get("firstPayment")), key=f"{prefix}-first"
            ),
            "secondPayment": st.text_input(
                "Second payment", value=_num(buyer.get("secondPayment")), key=f"{prefix}-second"
            ),
        }
        values["contract"] = {
            "reference": st.text_input(
                "Contract reference", value=contract.get("reference", ""), key=f"{prefix}-reference"
            ),
            "telephone": st.text_input(
                "Contract telephone", value=contract.get("telephone", ""), key=f"{prefix}-telephone"
            ),
        }

    passport = st.file_uploader("Passport scan", key=f"{prefix}-passport-file")
    document = st.file_uploader("Contract document", key=f"{prefix}-document-file")
    clear_passport = clear_document = False
    if unit:
        clear_passport = st.checkbox("Remove stored passport scan", key=f"{prefix}-clear-passport")
        clear_document = st.checkbox("Remove stored contract document", key=f"{prefix}-clear-document")
    if passport is not None:
        values["buyer"]["passportFile"] = encode_upload(passport)
    elif clear_passport:
        values["buyer"]["passportFile"] = None
    if document is not None:
        values["contract"]["documentFile"] = encode_upload(document)
    elif clear_document:
        values["contract"]["documentFile"] = None
    return values


def render_unit_form(prop: Dict, phase: Optional[Dict]) -> None:
    view = get_view()
    st.button("Add unit", on_click=view.toggle_form, args=("unit",))
    if view.open_form != "unit":
        return
    with st.form("unit-form"):
        values = unit_form_fields("new-unit")
        submitted = st.form_submit_button("Save unit")
    show_error("unit")
    if not submitted:
        return
    if uses_phases(prop) and phase is None:
        view.set_error("unit", "Select a phase first.")
        st.rerun()
    phase_name = phase["name"] if uses_phases(prop) and phase else None
    payload = unit_payload(values, phase_name=phase_name)
    result = submit("unit", lambda: get_backend_client().add_unit(prop["id"], payload))
    if result:
        view.select_phase(result["phase"]["id"])
        view.select_unit(result["unit"]["id"])
    st.rerun()


def render_file_download(label: str, file: Optional[Dict], key: str) -> None:
    content = decode_file(file)
    if content is None:
        return
    st.download_button(
        label,
        data=content,
        file_name=file.get("name") or "document",
        mime=file.get("type") or "application/octet-stream",
        key=key,
    )


def render_milestones(prop: Dict, unit: Dict) -> None:
    view = get_view()
    st.markdown("#### Payment milestones")
    milestones = unit.get("milestones") or []
    if milestones:
        st.dataframe(milestones_frame(milestones), hide_index=True, width="stretch")
        for idx, milestone in enumerate(milestones):
            action = "Mark incomplete" if milestone.get("completed") else "Mark complete"
            if st.button(f"{action}: {milestone['label']}", key=f"milestone-{unit['id']}-{idx}"):
                payload = milestone_toggle(milestone)
                submit("milestone", lambda: get_backend_client().update_milestone(prop["id"], unit["id"], payload))
                st.rerun()
    else:
        st.caption("No milestones yet.")

    st.button("Add milestone", on_click=view.toggle_form, args=("milestone",))
    if view.open_form == "milestone":
        with st.form("milestone-form"):
            label = st.text_input("Label")
            amount = st.text_input("Amount")
            submitted = st.form_submit_button("Add milestone")
        if submitted:
            payload = milestone_payload(label, amount)
            if not payload["label"]:
                view.set_error("milestone", "Milestone label is required.")
            elif submit("milestone", lambda: get_backend_client().add_milestone(prop["id"], unit["id"], payload)):
                view.open_form = None
            st.rerun()
    show_error("milestone")


def render_unit_detail(prop: Dict, unit: Dict) -> None:
    view = get_view()
    st.markdown(f"### {unit['unitNumber']} {status_badge(unit.get('status'))}", unsafe_allow_html=True)
    buyer = unit.get("buyer") or {}
    contract = unit.get("contract") or {}
    render_buyer_table(buyer, contract)
    render_file_download("Download passport scan", buyer.get("passportFile"), key=f"passport-{unit['id']}")
    render_file_download("Download contract document", contract.get("documentFile"), key=f"contract-{unit['id']}")

    edit_col, delete_col = st.columns(2)
    edit_col.button("Edit unit", on_click=view.toggle_form, args=("edit-unit",))
    if delete_col.button("Delete unit", key=f"delete-unit-{unit['id']}"):
        if submit("edit-unit", lambda: get_backend_client().delete_unit(prop["id"], unit["id"])):
            view.select_unit(None)
        st.rerun()

    if view.open_form == "edit-unit":
        with st.form("edit-unit-form"):
            values = unit_form_fields(f"edit-{unit['id']}", unit)
            submitted = st.form_submit_button("Save changes")
        if submitted:
            payload = unit_payload(values)
            if submit("edit-unit", lambda: get_backend_client().update_unit(prop["id"], unit["id"], payload)):
                view.open_form = None
            st.rerun()
    show_error("edit-unit")

    render_milestones(prop, unit)


def render_units_step(prop: Dict, phase: Optional[Dict]) -> None:
    view = get_view()
    if uses_phases(prop):
        title = f"{prop['name']} · {phase['name']}" if phase else prop["name"]
        units = (phase or {}).get("units") or []
    else:
        title = f"{prop['name']} · units"
        units = [unit for p in prop.get("phases") or [] for unit in p.get("units") or []]
    st.subheader(title)

    render_unit_form(prop, phase)
    if units:
        chart_col1, chart_col2 = st.columns(2)
        with chart_col1:
            st.plotly_chart(render_status_chart(units), width="stretch")
        with chart_col2:
            st.plotly_chart(render_collection_chart(units), width="stretch")
    render_units_table(units)
    if not units:
        return

    options = [unit["id"] for unit in units]
    labels = {unit["id"]: unit["unitNumber"] for unit in units}
    current = view.unit_id if view.unit_id in options else None
    chosen = st.selectbox(
        "Unit",
        options=[None] + options,
        index=(options.index(current) + 1) if current else 0,
        format_func=lambda value: "Select a unit" if value is None else labels[value],
    )
    if chosen != view.unit_id:
        view.select_unit(chosen)
        st.rerun()

    unit = next((u for u in units if u["id"] == view.unit_id), None)
    if unit is not None:
        render_unit_detail(prop, unit)


# ----------------------------------------------------------------------
def render_page() -> None:
    st.title("Property Sales Tracker")
    properties = refresh()
    load_error = st.session_state.get("load_error")
    if load_error:
        st.error(load_error)

    view = get_view()
    render_steps(properties)
    prop = view.selected_property(properties)
    phase = view.selected_phase(properties)

    if view.step == STEP_PROPERTIES or prop is None:
        render_properties_step(properties)
    elif view.step == STEP_PHASES:
        render_phases_step(prop)
    elif view.step == STEP_UNITS:
        render_units_step(prop, phase)


load_styles()
render_page()
