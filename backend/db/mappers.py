from typing import Any, Mapping, Optional

from ..models.payloads import BuyerInput, ContractInput, provided
from ..models.property import Buyer, Contract, FileAttachment
from ..utils.coerce import to_float, to_str

_BUYER_FIELDS = (
    "name",
    "passport_number",
    "purchase_date",
    "initial_payment",
    "first_payment",
    "second_payment",
    "phone",
)
_CONTRACT_FIELDS = ("reference", "telephone")


def _strip_data_url(data: str) -> str:
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def map_file(value: Any, existing: Optional[FileAttachment] = None) -> Optional[FileAttachment]:
    """Normalize an uploaded file payload.

    ``None`` clears the file. Anything that is not an object, or an object with
    neither a name nor data, leaves ``existing`` in place.
    """
    if value is None:
        return None
    if isinstance(value, FileAttachment):
        value = value.model_dump()
    if not isinstance(value, Mapping):
        return existing
    name = to_str(value.get("name"))
    data = _strip_data_url(to_str(value.get("data")))
    if not name and not data:
        return existing
    return FileAttachment(
        name=name,
        type=to_str(value.get("type")),
        size=to_float(value.get("size")),
        data=data or None,
    )


def map_buyer(payload: Optional[BuyerInput], existing: Optional[Buyer] = None) -> Buyer:
    base = existing or Buyer()
    values = {
        field: getattr(payload, field) if provided(payload, field) else getattr(base, field)
        for field in _BUYER_FIELDS
    }
    if provided(payload, "passport_file"):
        values["passport_file"] = map_file(payload.passport_file, base.passport_file)
    else:
        values["passport_file"] = base.passport_file
    return Buyer(**values)


def map_contract(payload: Optional[ContractInput], existing: Optional[Contract] = None) -> Contract:
    base = existing or Contract()
    values = {
        field: getattr(payload, field) if provided(payload, field) else getattr(base, field)
        for field in _CONTRACT_FIELDS
    }
    if provided(payload, "document_file"):
        values["document_file"] = map_file(payload.document_file, base.document_file)
    else:
        values["document_file"] = base.document_file
    return Contract(**values)
