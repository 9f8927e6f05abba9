"""Pydantic models representing the property / phase / unit tree."""

from __future__ import annotations

from typing import Iterator, List, Literal, Optional, Tuple, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PropertyType = Literal["semi_detached", "villa", "apartment"]
UnitStatus = Literal["available", "deposit", "under_contract", "signed_contract", "sold"]

PROPERTY_TYPES = get_args(PropertyType)
UNIT_STATUS_VALUES = get_args(UnitStatus)


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileAttachment(CamelModel):
    name: str = ""
    type: str = ""
    size: Optional[float] = None
    data: Optional[str] = None


class Buyer(CamelModel):
    name: str = ""
    passport_number: str = ""
    purchase_date: str = ""
    initial_payment: Optional[float] = None
    first_payment: Optional[float] = None
    second_payment: Optional[float] = None
    phone: str = ""
    passport_file: Optional[FileAttachment] = None


class Contract(CamelModel):
    reference: str = ""
    telephone: str = ""
    document_file: Optional[FileAttachment] = None


class Milestone(CamelModel):
    label: str
    completed: bool = False
    amount: Optional[float] = None


class Unit(CamelModel):
    id: str
    unit_number: str
    status: UnitStatus
    list_price: Optional[float] = None
    sale_price: Optional[float] = None
    total_received: Optional[float] = None
    buyer: Buyer = Field(default_factory=Buyer)
    contract: Contract = Field(default_factory=Contract)
    milestones: List[Milestone] = Field(default_factory=list)


class Phase(CamelModel):
    id: str
    name: str
    units: List[Unit] = Field(default_factory=list)


class Property(CamelModel):
    id: str
    name: str
    location: str
    type: PropertyType
    uses_phases: bool = True
    phases: List[Phase] = Field(default_factory=list)

    def iter_units(self) -> Iterator[Tuple[Phase, Unit]]:
        for phase in self.phases:
            for unit in phase.units:
                yield phase, unit

    @property
    def unit_count(self) -> int:
        return sum(len(phase.units) for phase in self.phases)
