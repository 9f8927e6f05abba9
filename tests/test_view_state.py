from app.state import STEP_PHASES, STEP_PROPERTIES, STEP_UNITS, ViewState


def _properties():
    return [
        {
            "id": "prop-1",
            "name": "Palm Residences",
            "usesPhases": True,
            "phases": [
                {"id": "phase-1", "name": "North", "units": [{"id": "unit-1"}, {"id": "unit-2"}]},
                {"id": "phase-2", "name": "South", "units": []},
            ],
        },
        {
            "id": "prop-2",
            "name": "Azure Villas",
            "usesPhases": False,
            "phases": [{"id": "phase-v", "name": "General Inventory", "units": [{"id": "villa-1"}]}],
        },
    ]


def test_reconcile_selects_first_available():
    view = ViewState()
    view.reconcile(_properties())
    assert view.property_id == "prop-1"
    assert view.phase_id == "phase-1"
    assert view.unit_id is None


def test_reconcile_keeps_existing_selection():
    view = ViewState(step=STEP_UNITS, property_id="prop-1", phase_id="phase-2")
    view.reconcile(_properties())
    assert view.phase_id == "phase-2"
    assert view.step == STEP_UNITS


def test_reconcile_falls_back_when_selection_disappears():
    view = ViewState(step=STEP_UNITS, property_id="prop-1", phase_id="phase-1", unit_id="unit-2")
    properties = _properties()
    properties[0]["phases"][0]["units"] = [{"id": "unit-1"}]
    view.reconcile(properties)
    assert view.unit_id is None

    view.reconcile(properties[1:])
    assert view.property_id == "prop-2"
    assert view.phase_id == "phase-v"


def test_reconcile_with_empty_list_resets_everything():
    view = ViewState(step=STEP_UNITS, property_id="prop-1", phase_id="phase-1", unit_id="unit-1", open_form="unit")
    view.reconcile([])
    assert (view.property_id, view.phase_id, view.unit_id) == (None, None, None)
    assert view.step == STEP_PROPERTIES
    assert view.open_form is None


def test_reconcile_prefers_requested_property():
    view = ViewState(property_id="prop-1")
    view.reconcile(_properties(), property_id="prop-2")
    assert view.property_id == "prop-2"
    assert view.phase_id == "phase-v"


def test_unphased_property_skips_phase_step():
    view = ViewState(step=STEP_PHASES, property_id="prop-2")
    view.reconcile(_properties())
    assert view.step == STEP_UNITS


def test_select_property_clears_lower_levels():
    view = ViewState(property_id="prop-1", phase_id="phase-1", unit_id="unit-1", open_form="edit-unit")
    view.select_property("prop-2")
    assert (view.phase_id, view.unit_id, view.open_form) == (None, None, None)


def test_steps_for_phased_and_unphased_properties():
    properties = _properties()
    view = ViewState()
    tabs = view.steps(properties)
    assert [t.title for t in tabs] == ["Properties", "Phases", "Phase units"]
    assert [t.enabled for t in tabs] == [True, False, False]

    view.reconcile(properties)
    tabs = view.steps(properties)
    assert tabs[0].description == "Palm Residences"
    assert tabs[1].description == "2 phases"
    assert tabs[2].description == "2 units"

    view.select_property("prop-2")
    view.reconcile(properties)
    tabs = view.steps(properties)
    assert [t.title for t in tabs] == ["Properties", "Units"]
    assert tabs[1].description == "1 units"


def test_form_toggle_and_errors():
    view = ViewState()
    view.toggle_form("unit")
    assert view.open_form == "unit"
    view.set_error("unit", "Unit number is required.")
    assert view.error_for("unit") == "Unit number is required."
    view.toggle_form("unit")
    assert view.open_form is None
    assert view.error_for("unit") == ""
