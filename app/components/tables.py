"""Tabular components for units, buyers and milestones."""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
import streamlit as st

from app.files import format_file_size
from app.payloads import STATUS_LABELS


def _fmt_currency(value: Optional[float]) -> str:
    if value is None:
        return "—"
    return f"{value:,.0f}"


def _fmt_text(value: Optional[str]) -> str:
    return value or "—"


def units_frame(units: List[dict]) -> pd.DataFrame:
    rows = [
        {
            "Unit": unit.get("unitNumber"),
            "Status": STATUS_LABELS.get(unit.get("status"), unit.get("status")),
            "List Price": _fmt_currency(unit.get("listPrice")),
            "Sale Price": _fmt_currency(unit.get("salePrice")),
            "Received": _fmt_currency(unit.get("totalReceived")),
            "Buyer": _fmt_text((unit.get("buyer") or {}).get("name")),
            "Milestones": f"{sum(1 for m in unit.get('milestones') or [] if m.get('completed'))}"
            f"/{len(unit.get('milestones') or [])}",
        }
        for unit in units
    ]
    return pd.DataFrame(rows, columns=["Unit", "Status", "List Price", "Sale Price", "Received", "Buyer", "Milestones"])


def render_units_table(units: List[dict]) -> None:
    if not units:
        st.info("No units recorded yet.")
        return
    st.dataframe(units_frame(units), hide_index=True, width="stretch")


def render_buyer_table(buyer: dict, contract: dict) -> None:
    passport = buyer.get("passportFile") or {}
    document = contract.get("documentFile") or {}
    data = [
        {"Field": "Buyer", "Value": _fmt_text(buyer.get("name"))},
        {"Field": "Passport Number", "Value": _fmt_text(buyer.get("passportNumber"))},
        {"Field": "Purchase Date", "Value": _fmt_text(buyer.get("purchaseDate"))},
        {"Field": "Phone", "Value": _fmt_text(buyer.get("phone"))},
        {"Field": "Initial Payment", "Value": _fmt_currency(buyer.get("initialPayment"))},
        {"Field": "First Payment", "Value": _fmt_currency(buyer.get("firstPayment"))},
        {"Field": "Second Payment", "Value": _fmt_currency(buyer.get("secondPayment"))},
        {"Field": "Passport File", "Value": _file_label(passport)},
        {"Field": "Contract Reference", "Value": _fmt_text(contract.get("reference"))},
        {"Field": "Contract Telephone", "Value": _fmt_text(contract.get("telephone"))},
        {"Field": "Contract Document", "Value": _file_label(document)},
    ]
    st.dataframe(pd.DataFrame(data), hide_index=True, width="stretch")


def _file_label(file: dict) -> str:
    if not file.get("name"):
        return "—"
    size = format_file_size(file.get("size"))
    return f"{file['name']} ({size})" if size else file["name"]


def milestones_frame(milestones: List[dict]) -> pd.DataFrame:
    df = pd.DataFrame(milestones, columns=["label", "amount", "completed"])
    df = df.rename(columns={"label": "Milestone", "amount": "Amount", "completed": "Completed"})
    df["Amount"] = df["Amount"].apply(lambda x: _fmt_currency(None if pd.isna(x) else x))
    df["Completed"] = df["Completed"].apply(lambda done: "Yes" if done else "No")
    return df
