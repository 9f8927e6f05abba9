"""Transient view state for the Streamlit page.

Nothing here is a source of truth: after every API call the page re-fetches
the property list and calls :meth:`ViewState.reconcile` so the selection
points at things that still exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

STEP_PROPERTIES = "properties"
STEP_PHASES = "phases"
STEP_UNITS = "units"


@dataclass
class StepTab:
    key: str
    title: str
    description: str
    enabled: bool


def uses_phases(prop: Optional[Dict]) -> bool:
    return bool(prop) and prop.get("usesPhases") is not False


def _find(items: List[Dict], item_id: Optional[str]) -> Optional[Dict]:
    if item_id is None:
        return None
    return next((item for item in items if item.get("id") == item_id), None)


@dataclass
class ViewState:
    step: str = STEP_PROPERTIES
    property_id: Optional[str] = None
    phase_id: Optional[str] = None
    unit_id: Optional[str] = None
    open_form: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Lookups against the last fetched list
    def selected_property(self, properties: List[Dict]) -> Optional[Dict]:
        return _find(properties, self.property_id)

    def selected_phase(self, properties: List[Dict]) -> Optional[Dict]:
        prop = self.selected_property(properties)
        return _find(prop.get("phases") or [], self.phase_id) if prop else None

    def selected_unit(self, properties: List[Dict]) -> Optional[Dict]:
        phase = self.selected_phase(properties)
        return _find(phase.get("units") or [], self.unit_id) if phase else None

    # ------------------------------------------------------------------
    def reconcile(self, properties: List[Dict], property_id: Optional[str] = None) -> None:
        """Re-resolve selected ids against a freshly fetched list.

        A selection that vanished falls back to the first available property
        or phase, or to ``None`` when there is nothing to select.
        """
        if property_id is not None:
            self.property_id = property_id
        prop = self.selected_property(properties)
        if prop is None:
            prop = properties[0] if properties else None
            self.property_id = prop["id"] if prop else None

        phases = (prop or {}).get("phases") or []
        phase = _find(phases, self.phase_id)
        if phase is None:
            phase = phases[0] if phases else None
            self.phase_id = phase["id"] if phase else None
            self.unit_id = None

        if phase is None or _find(phase.get("units") or [], self.unit_id) is None:
            self.unit_id = None

        if prop is None:
            self.step = STEP_PROPERTIES
            self.open_form = None
        elif self.step == STEP_PHASES and not uses_phases(prop):
            self.step = STEP_UNITS
        elif self.step == STEP_UNITS and phase is None:
            self.step = STEP_PHASES if uses_phases(prop) else STEP_PROPERTIES

    # ------------------------------------------------------------------
    # Selection
    def select_property(self, property_id: Optional[str]) -> None:
        if property_id != self.property_id:
            self.property_id = property_id
            self.phase_id = None
            self.unit_id = None
        self.open_form = None

    def select_phase(self, phase_id: Optional[str]) -> None:
        if phase_id != self.phase_id:
            self.phase_id = phase_id
            self.unit_id = None
        self.open_form = None

    def select_unit(self, unit_id: Optional[str]) -> None:
        self.unit_id = unit_id
        self.open_form = None

    def go_to(self, step: str) -> None:
        self.step = step
        self.open_form = None

    # ------------------------------------------------------------------
    # Inline forms and their errors
    def toggle_form(self, name: str) -> None:
        self.open_form = None if self.open_form == name else name
        self.errors.pop(name, None)

    def set_error(self, form: str, message: str) -> None:
        self.errors[form] = message

    def clear_error(self, form: str) -> None:
        self.errors.pop(form, None)

    def error_for(self, form: str) -> str:
        return self.errors.get(form, "")

    # ------------------------------------------------------------------
    def steps(self, properties: List[Dict]) -> List[StepTab]:
        prop = self.selected_property(properties)
        phase = self.selected_phase(properties)
        first = StepTab(STEP_PROPERTIES, "Properties", prop["name"] if prop else "Pick a property", True)
        if prop is not None and not uses_phases(prop):
            total = sum(len(p.get("units") or []) for p in prop.get("phases") or [])
            return [first, StepTab(STEP_UNITS, "Units", f"{total} units", True)]
        return [
            first,
            StepTab(
                STEP_PHASES,
                "Phases",
                f"{len(prop.get('phases') or [])} phases" if prop else "Select a property",
                prop is not None,
            ),
            StepTab(
                STEP_UNITS,
                "Phase units",
                f"{len(phase.get('units') or [])} units" if phase else "Choose a phase",
                phase is not None,
            ),
        ]
