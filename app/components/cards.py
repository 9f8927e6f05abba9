"""Streamlit components for property cards and status badges."""

from __future__ import annotations

from html import escape
from typing import Callable, Dict, Optional

import streamlit as st

from app.payloads import PROPERTY_TYPES, STATUS_LABELS

STATUS_TONES = {
    "available": "neutral",
    "deposit": "info",
    "under_contract": "warning",
    "signed_contract": "accent",
    "sold": "success",
}


def status_badge(status: Optional[str]) -> str:
    tone = STATUS_TONES.get(status or "", "neutral")
    label = STATUS_LABELS.get(status or "", status or "-")
    return f"<span class='status-badge status-{tone}'>{escape(label)}</span>"


def type_badge(property_type: Optional[str]) -> str:
    if not property_type:
        return ""
    label = PROPERTY_TYPES.get(property_type, property_type)
    return f"<span class='type-badge'>{escape(label)}</span>"


def render_property_card(
    property_data: Dict,
    selected: bool,
    on_select: Callable[[], None],
    on_delete: Callable[[], None],
) -> None:
    phases = property_data.get("phases") or []
    units = sum(len(phase.get("units") or []) for phase in phases)
    sold = sum(
        1 for phase in phases for unit in phase.get("units") or [] if unit.get("status") == "sold"
    )
    layout = f"{len(phases)} phases" if property_data.get("usesPhases") else "No phases"
    card_class = "property-card property-card--selected" if selected else "property-card"

    card_html = f"""
        <div class="{card_class}">
            <div class="property-card__header">{type_badge(property_data.get('type'))}</div>
            <h3>{escape(property_data.get('name') or '')}</h3>
            <p class="property-card__meta">{escape(property_data.get('location') or '')} · {layout}</p>
            <p class="property-card__value">{units} units · {sold} sold</p>
        </div>
    """
    key = property_data.get("id")
    with st.container():
        st.markdown(card_html, unsafe_allow_html=True)
        open_col, delete_col = st.columns(2)
        open_col.button("Open", key=f"open-{key}", on_click=on_select, disabled=selected)
        delete_col.button("Delete", key=f"delete-{key}", on_click=on_delete)
