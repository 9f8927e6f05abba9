"""Request bodies accepted by the API and the store.

Bodies are parsed leniently: text is trimmed, numbers that cannot be parsed
become ``None`` and files are kept raw so the store decides how to merge
them. Fields a caller omitted are absent from ``model_fields_set``, which is
how partial updates tell "not sent" apart from "sent as null".
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import BeforeValidator

from ..utils.coerce import to_bool, to_float, to_str
from .property import CamelModel

Text = Annotated[str, BeforeValidator(to_str)]
Number = Annotated[Optional[float], BeforeValidator(to_float)]
Flag = Annotated[bool, BeforeValidator(to_bool)]


def provided(model: Optional[CamelModel], field: str) -> bool:
    return model is not None and field in model.model_fields_set


class PropertyCreate(CamelModel):
    name: Text = ""
    location: Text = ""
    type: Text = ""
    uses_phases: Flag = False


class PhaseCreate(CamelModel):
    name: Text = ""


class BuyerInput(CamelModel):
    name: Text = ""
    passport_number: Text = ""
    purchase_date: Text = ""
    initial_payment: Number = None
    first_payment: Number = None
    second_payment: Number = None
    phone: Text = ""
    passport_file: Any = None


class ContractInput(CamelModel):
    reference: Text = ""
    telephone: Text = ""
    document_file: Any = None


class UnitCreate(CamelModel):
    unit_number: Text = ""
    status: Text = ""
    phase_name: Text = ""
    list_price: Number = None
    sale_price: Number = None
    total_received: Number = None
    buyer: Optional[BuyerInput] = None
    contract: Optional[ContractInput] = None


class UnitUpdate(CamelModel):
    unit_number: Text = ""
    # older clients send the unit number as ``label``
    label: Text = ""
    status: Text = ""
    list_price: Number = None
    sale_price: Number = None
    total_received: Number = None
    buyer: Optional[BuyerInput] = None
    contract: Optional[ContractInput] = None


class MilestoneCreate(CamelModel):
    label: Text = ""
    amount: Number = None


class MilestoneUpdate(CamelModel):
    label: Text = ""
    completed: Flag = False
    amount: Number = None
