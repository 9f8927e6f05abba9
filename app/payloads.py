"""Turn Streamlit form values into request bodies for the API."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

PROPERTY_TYPES = {
    "semi_detached": "Semi-detached",
    "villa": "Villa",
    "apartment": "Apartment",
}

STATUS_LABELS = {
    "available": "Available",
    "deposit": "Deposit Received",
    "under_contract": "Under Contract",
    "signed_contract": "Signed Contract",
    "sold": "Sold",
}

_MISSING = object()


def type_supports_phases(property_type: str) -> bool:
    return property_type != "villa"


def numeric_or_none(value: Any) -> Optional[float]:
    """Form inputs arrive as text; blanks and junk become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def property_payload(values: Mapping[str, Any]) -> Dict[str, Any]:
    property_type = values.get("type") or next(iter(PROPERTY_TYPES))
    return {
        "name": (values.get("name") or "").strip(),
        "location": (values.get("location") or "").strip(),
        "type": property_type,
        "usesPhases": bool(values.get("usesPhases")) if type_supports_phases(property_type) else False,
    }


def _buyer(values: Mapping[str, Any]) -> Dict[str, Any]:
    body = {
        "name": values.get("name", ""),
        "passportNumber": values.get("passportNumber", ""),
        "purchaseDate": values.get("purchaseDate", ""),
        "initialPayment": numeric_or_none(values.get("initialPayment")),
        "firstPayment": numeric_or_none(values.get("firstPayment")),
        "secondPayment": numeric_or_none(values.get("secondPayment")),
        "phone": values.get("phone", ""),
    }
    passport_file = values.get("passportFile", _MISSING)
    if passport_file is not _MISSING:
        body["passportFile"] = passport_file
    return body


def _contract(values: Mapping[str, Any]) -> Dict[str, Any]:
    body = {
        "reference": values.get("reference", ""),
        "telephone": values.get("telephone", ""),
    }
    document_file = values.get("documentFile", _MISSING)
    if document_file is not _MISSING:
        body["documentFile"] = document_file
    return body


def unit_payload(values: Mapping[str, Any], phase_name: Optional[str] = None) -> Dict[str, Any]:
    """Body for creating or editing a unit.

    File keys are only sent when the form supplied them, so an edit that
    leaves the uploader untouched keeps the stored file.
    """
    body: Dict[str, Any] = {
        "unitNumber": values.get("unitNumber", ""),
        "status": values.get("status") or next(iter(STATUS_LABELS)),
        "listPrice": numeric_or_none(values.get("listPrice")),
        "salePrice": numeric_or_none(values.get("salePrice")),
        "totalReceived": numeric_or_none(values.get("totalReceived")),
        "buyer": _buyer(values.get("buyer") or {}),
        "contract": _contract(values.get("contract") or {}),
    }
    if phase_name:
        body["phaseName"] = phase_name
    return body


def milestone_payload(label: str, amount: Any = None) -> Dict[str, Any]:
    return {"label": (label or "").strip(), "amount": numeric_or_none(amount)}


def milestone_toggle(milestone: Mapping[str, Any]) -> Dict[str, Any]:
    return {"label": milestone.get("label", ""), "completed": not milestone.get("completed", False)}
