"""In-memory property store: the single source of truth for the API."""

from __future__ import annotations

import os
import threading
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import NotFoundError, ValidationError, describe_invalid_body
from ..models.payloads import (
    MilestoneCreate,
    MilestoneUpdate,
    PropertyCreate,
    UnitCreate,
    UnitUpdate,
    provided,
)
from ..models.property import (
    PROPERTY_TYPES,
    UNIT_STATUS_VALUES,
    Milestone,
    Phase,
    Property,
    Unit,
)
from ..utils.coerce import to_str
from ..utils.logging import get_logger
from ..utils.normalize import lookup_name
from .mappers import map_buyer, map_contract

LOGGER = get_logger("db.store")

DEFAULT_PHASE_NAME = os.getenv("DEFAULT_PHASE_NAME", "General Inventory")

UnitRef = Tuple[Phase, Unit]


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _coerce(model_cls, payload):
    if payload is None:
        return model_cls()
    if isinstance(payload, model_cls):
        return payload
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(describe_invalid_body(exc.errors())) from exc


class PropertyStore:
    """Owns the Property -> Phase -> Unit tree.

    Every mutation validates before touching the tree, so a rejected call
    leaves the store unchanged. Operations are serialized with a re-entrant
    lock because FastAPI runs sync endpoints on a thread pool.
    """

    def __init__(self, properties: Optional[Iterable[Property]] = None) -> None:
        self._properties: List[Property] = list(properties or [])
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Properties
    def list_properties(self) -> List[Property]:
        with self._lock:
            return list(self._properties)

    def find_property(self, property_id: str) -> Optional[Property]:
        with self._lock:
            for prop in self._properties:
                if prop.id == property_id:
                    return prop
            return None

    def get_property(self, property_id: str) -> Property:
        prop = self.find_property(property_id)
        if prop is None:
            LOGGER.debug("property_missing id=%s", property_id)
            raise NotFoundError("Property not found.")
        return prop

    def create_property(
        self,
        name: Any = None,
        location: Any = None,
        type: Any = None,
        uses_phases: Any = False,
    ) -> Property:
        payload = PropertyCreate(name=name, location=location, type=type, uses_phases=uses_phases)
        return self.add_property(payload)

    def add_property(self, payload: Union[PropertyCreate, Dict[str, Any]]) -> Property:
        payload = _coerce(PropertyCreate, payload)
        if not payload.name or not payload.location or not payload.type:
            raise ValidationError("Name, location, and type are required.")
        if payload.type not in PROPERTY_TYPES:
            raise ValidationError(f"Invalid property type. Valid options: {', '.join(PROPERTY_TYPES)}")

        uses_phases = payload.uses_phases and payload.type != "villa"
        prop = Property(
            id=new_id("prop"),
            name=payload.name,
            location=payload.location,
            type=payload.type,
            uses_phases=uses_phases,
            phases=[] if uses_phases else [Phase(id=new_id("phase"), name=DEFAULT_PHASE_NAME)],
        )
        with self._lock:
            self._properties.append(prop)
        LOGGER.info("property_created id=%s type=%s uses_phases=%s", prop.id, prop.type, prop.uses_phases)
        return prop

    def delete_property(self, property_id: str) -> Property:
        with self._lock:
            prop = self.get_property(property_id)
            self._properties.remove(prop)
        LOGGER.info("property_deleted id=%s phases=%d units=%d", prop.id, len(prop.phases), prop.unit_count)
        return prop

    # ------------------------------------------------------------------
    # Phases
    def create_phase(self, property_id: str, name: Any) -> Phase:
        with self._lock:
            prop = self.get_property(property_id)
            if not prop.uses_phases:
                raise ValidationError("This property does not use phases.")
            phase_name = to_str(name)
            if not phase_name:
                raise ValidationError("Phase name is required.")
            return self._match_or_create_phase(prop, phase_name)

    def _match_or_create_phase(self, prop: Property, phase_name: str) -> Phase:
        existing = lookup_name(prop.phases, phase_name, lambda p: p.name)
        if existing is not None:
            LOGGER.debug("phase_reused property=%s phase=%s", prop.id, existing.id)
            return existing
        phase = Phase(id=new_id("phase"), name=phase_name)
        prop.phases.append(phase)
        LOGGER.info("phase_created property=%s phase=%s name=%r", prop.id, phase.id, phase.name)
        return phase

    def _default_phase(self, prop: Property) -> Phase:
        if not prop.phases:
            prop.phases.append(Phase(id=new_id("phase"), name=DEFAULT_PHASE_NAME))
        return prop.phases[0]

    # ------------------------------------------------------------------
    # Units
    def add_unit(self, property_id: str, payload: Union[UnitCreate, Dict[str, Any]]) -> UnitRef:
        with self._lock:
            prop = self.get_property(property_id)
            payload = _coerce(UnitCreate, payload)
            if not payload.unit_number:
                raise ValidationError("Unit number is required.")
            if not payload.status:
                raise ValidationError("Status is required.")
            if payload.status not in UNIT_STATUS_VALUES:
                raise ValidationError(f"Invalid unit status. Valid options: {', '.join(UNIT_STATUS_VALUES)}")
            if prop.uses_phases and not payload.phase_name:
                raise ValidationError("Phase name is required for this property.")

            unit = Unit(
                id=new_id("unit"),
                unit_number=payload.unit_number,
                status=payload.status,
                list_price=payload.list_price,
                sale_price=payload.sale_price,
                total_received=payload.total_received,
                buyer=map_buyer(payload.buyer),
                contract=map_contract(payload.contract),
            )
            if prop.uses_phases:
                phase = self._match_or_create_phase(prop, payload.phase_name)
            else:
                phase = self._default_phase(prop)
            phase.units.append(unit)
        LOGGER.info("unit_added property=%s phase=%s unit=%s status=%s", prop.id, phase.id, unit.id, unit.status)
        return phase, unit

    def find_unit(self, prop: Property, unit_id: str) -> Optional[UnitRef]:
        for phase, unit in prop.iter_units():
            if unit.id == unit_id:
                return phase, unit
        return None

    def get_unit(self, property_id: str, unit_id: str) -> Tuple[Property, Phase, Unit]:
        with self._lock:
            prop = self.get_property(property_id)
            ref = self.find_unit(prop, unit_id)
            if ref is None:
                raise NotFoundError("Unit not found.")
            phase, unit = ref
            return prop, phase, unit

    def update_unit(self, property_id: str, unit_id: str, updates: Union[UnitUpdate, Dict[str, Any]]) -> UnitRef:
        with self._lock:
            _, phase, unit = self.get_unit(property_id, unit_id)
            updates = _coerce(UnitUpdate, updates)

            changes: Dict[str, Any] = {}
            if provided(updates, "unit_number") or provided(updates, "label"):
                unit_number = updates.unit_number if provided(updates, "unit_number") else updates.label
                if not unit_number:
                    raise ValidationError("Unit number is required.")
                changes["unit_number"] = unit_number
            if updates.status in UNIT_STATUS_VALUES:
                changes["status"] = updates.status
            elif provided(updates, "status"):
                LOGGER.info("unit_status_ignored unit=%s status=%r", unit.id, updates.status)
            for field in ("list_price", "sale_price", "total_received"):
                if provided(updates, field):
                    changes[field] = getattr(updates, field)
            if provided(updates, "buyer"):
                changes["buyer"] = map_buyer(updates.buyer, unit.buyer)
            if provided(updates, "contract"):
                changes["contract"] = map_contract(updates.contract, unit.contract)

            for field, value in changes.items():
                setattr(unit, field, value)
        LOGGER.info("unit_updated unit=%s fields=%s", unit.id, ",".join(sorted(changes)) or "-")
        return phase, unit

    def delete_unit(self, property_id: str, unit_id: str) -> UnitRef:
        with self._lock:
            _, phase, unit = self.get_unit(property_id, unit_id)
            phase.units.remove(unit)
        LOGGER.info("unit_deleted property=%s phase=%s unit=%s", property_id, phase.id, unit.id)
        return phase, unit

    # ------------------------------------------------------------------
    # Milestones
    def add_milestone(
        self,
        property_id: str,
        unit_id: str,
        payload: Union[MilestoneCreate, Dict[str, Any]],
    ) -> UnitRef:
        with self._lock:
            _, phase, unit = self.get_unit(property_id, unit_id)
            payload = _coerce(MilestoneCreate, payload)
            if not payload.label:
                raise ValidationError("Milestone label is required.")
            if lookup_name(unit.milestones, payload.label, lambda m: m.label) is not None:
                raise ValidationError("Milestone label already exists for this unit.")
            unit.milestones.append(Milestone(label=payload.label, completed=False, amount=payload.amount))
        LOGGER.info("milestone_added unit=%s label=%r", unit.id, payload.label)
        return phase, unit

    def update_milestone(
        self,
        property_id: str,
        unit_id: str,
        updates: Union[MilestoneUpdate, Dict[str, Any]],
    ) -> UnitRef:
        with self._lock:
            _, phase, unit = self.get_unit(property_id, unit_id)
            updates = _coerce(MilestoneUpdate, updates)
            if not updates.label:
                raise ValidationError("Milestone label is required.")
            milestone = lookup_name(unit.milestones, updates.label, lambda m: m.label)
            if milestone is None:
                raise NotFoundError("Milestone not found.")
            if provided(updates, "completed"):
                milestone.completed = updates.completed
            if provided(updates, "amount"):
                milestone.amount = updates.amount
        LOGGER.info("milestone_updated unit=%s label=%r completed=%s", unit.id, milestone.label, milestone.completed)
        return phase, unit
