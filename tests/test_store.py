import pytest

from backend.db.seed import build_demo_store
from backend.db.store import DEFAULT_PHASE_NAME, PropertyStore
from backend.exceptions import NotFoundError, ValidationError
from backend.models.payloads import UnitUpdate


def _store_with_phased_property():
    store = PropertyStore()
    prop = store.create_property("Palm Residences", "Abu Dhabi", "semi_detached", True)
    return store, prop


def _unit(store, prop, **fields):
    body = {"unitNumber": "SD-101", "status": "available", "phaseName": "North"}
    body.update(fields)
    return store.add_unit(prop.id, body)


def test_villa_never_uses_phases_and_gets_default_phase():
    store = PropertyStore()
    prop = store.create_property("Azure", "Dubai", "villa", True)
    assert prop.uses_phases is False
    assert len(prop.phases) == 1
    assert prop.phases[0].name == DEFAULT_PHASE_NAME


def test_phased_property_starts_without_phases():
    _, prop = _store_with_phased_property()
    assert prop.uses_phases is True
    assert prop.phases == []
    assert prop.id.startswith("prop-")


@pytest.mark.parametrize(
    "args",
    [
        ("", "Dubai", "villa"),
        ("Azure", "   ", "villa"),
        ("Azure", "Dubai", None),
    ],
)
def test_create_property_requires_name_location_type(args):
    store = PropertyStore()
    with pytest.raises(ValidationError, match="required"):
        store.create_property(*args)
    assert store.list_properties() == []


def test_create_property_rejects_unknown_type():
    store = PropertyStore()
    with pytest.raises(ValidationError, match="Invalid property type"):
        store.create_property("X", "Y", "castle")


def test_create_property_trims_text():
    store = PropertyStore()
    prop = store.create_property("  Harbor Heights ", " Doha ", "apartment")
    assert prop.name == "Harbor Heights"
    assert prop.location == "Doha"
    assert prop.uses_phases is False


def test_find_property_returns_none_when_missing():
    assert PropertyStore().find_property("prop-missing") is None
    with pytest.raises(NotFoundError):
        PropertyStore().get_property("prop-missing")


def test_create_phase_is_case_insensitive_and_idempotent():
    store, prop = _store_with_phased_property()
    first = store.create_phase(prop.id, "Palm North")
    again = store.create_phase(prop.id, "  palm NORTH ")
    assert again.id == first.id
    assert len(prop.phases) == 1


def test_create_phase_validation():
    store, prop = _store_with_phased_property()
    with pytest.raises(ValidationError, match="Phase name is required"):
        store.create_phase(prop.id, "   ")
    with pytest.raises(NotFoundError):
        store.create_phase("prop-missing", "North")

    villa = store.create_property("Azure", "Dubai", "villa")
    with pytest.raises(ValidationError, match="does not use phases"):
        store.create_phase(villa.id, "North")
    assert len(villa.phases) == 1


def test_add_unit_creates_phase_by_name():
    store, prop = _store_with_phased_property()
    phase, unit = _unit(store, prop, phaseName="North", listPrice="1250000")
    assert phase.name == "North"
    assert unit.list_price == 1250000
    assert unit.sale_price is None
    assert unit.buyer.name == ""
    assert unit.contract.document_file is None
    assert unit.milestones == []

    phase_again, _ = _unit(store, prop, unitNumber="SD-102", phaseName="north")
    assert phase_again.id == phase.id
    assert len(phase.units) == 2


def test_add_unit_to_unphased_property_uses_default_phase():
    store = PropertyStore()
    prop = store.create_property("Harbor", "Doha", "apartment")
    phase, unit = store.add_unit(prop.id, {"unitNumber": "Apt 1", "status": "deposit", "phaseName": "Ignored"})
    assert phase.id == prop.phases[0].id
    assert len(prop.phases) == 1
    assert unit.status == "deposit"


def test_add_unit_requires_unit_number_and_leaves_phase_untouched():
    store, prop = _store_with_phased_property()
    phase = store.create_phase(prop.id, "North")
    with pytest.raises(ValidationError, match="Unit number is required"):
        store.add_unit(prop.id, {"unitNumber": "  ", "status": "available", "phaseName": "North"})
    assert phase.units == []


def test_add_unit_status_validation():
    store, prop = _store_with_phased_property()
    with pytest.raises(ValidationError, match="Status is required"):
        _unit(store, prop, status="")
    with pytest.raises(ValidationError, match="Invalid unit status"):
        _unit(store, prop, status="unknown_status")
    assert prop.phases == []


def test_add_unit_requires_phase_name_for_phased_property():
    store, prop = _store_with_phased_property()
    with pytest.raises(ValidationError, match="Phase name is required for this property"):
        store.add_unit(prop.id, {"unitNumber": "A", "status": "available"})
    with pytest.raises(NotFoundError):
        store.add_unit("prop-missing", {"unitNumber": "A", "status": "available"})


def test_add_unit_normalizes_numbers_and_buyer():
    store, prop = _store_with_phased_property()
    _, unit = _unit(
        store,
        prop,
        salePrice="abc",
        totalReceived=float("inf"),
        buyer={"name": " Layla ", "initialPayment": "150000", "firstPayment": True},
        contract={"reference": "PR-1", "documentFile": {"name": "c.pdf", "type": "application/pdf", "size": 10, "data": "QUJD"}},
    )
    assert unit.sale_price is None
    assert unit.total_received is None
    assert unit.buyer.name == "Layla"
    assert unit.buyer.initial_payment == 150000
    assert unit.buyer.first_payment is None
    assert unit.buyer.phone == ""
    assert unit.contract.reference == "PR-1"
    assert unit.contract.document_file.name == "c.pdf"
    assert unit.contract.document_file.data == "QUJD"


def test_partial_update_only_changes_status():
    store, prop = _store_with_phased_property()
    _, unit = _unit(store, prop, listPrice=100, buyer={"name": "Layla"}, contract={"reference": "R-1"})
    _, updated = store.update_unit(prop.id, unit.id, {"status": "sold"})
    assert updated.status == "sold"
    assert updated.unit_number == "SD-101"
    assert updated.list_price == 100
    assert updated.buyer.name == "Layla"
    assert updated.contract.reference == "R-1"


def test_update_unit_distinguishes_null_from_omitted():
    store, prop = _store_with_phased_property()
    _, unit = _unit(store, prop, listPrice=100, salePrice=90)
    store.update_unit(prop.id, unit.id, {"salePrice": None})
    assert unit.sale_price is None
    assert unit.list_price == 100


def test_update_unit_ignores_invalid_status():
    store, prop = _store_with_phased_property()
    _, unit = _unit(store, prop, status="deposit")
    store.update_unit(prop.id, unit.id, UnitUpdate(status="bogus", list_price=5))
    assert unit.status == "deposit"
    assert unit.list_price == 5


def test_update_unit_rejects_blank_unit_number_without_partial_changes():
    store, prop = _store_with_phased_property()
    _, unit = _unit(store, prop, listPrice=100)
    with pytest.raises(ValidationError, match="Unit number is required"):
        store.update_unit(prop.id, unit.id, {"unitNumber": " ", "listPrice": 1})
    assert unit.unit_number == "SD-101"
    assert unit.list_price == 100


def test_update_unit_accepts_label_alias():
    store, prop = _store_with_phased_property()
    _, unit = _unit(store, prop)
    store.update_unit(prop.id, unit.id, {"label": "SD-999"})
    assert unit.unit_number == "SD-999"


def test_update_unit_merges_buyer_and_replaces_files():
    store, prop = _store_with_phased_property()
    passport = {"name": "p.png", "type": "image/png", "size": 3, "data": "AAA"}
    _, unit = _unit(store, prop, buyer={"name": "Layla", "phone": "+971", "passportFile": passport})

    store.update_unit(prop.id, unit.id, {"buyer": {"phone": "+974"}})
    assert unit.buyer.name == "Layla"
    assert unit.buyer.phone == "+974"
    assert unit.buyer.passport_file.name == "p.png"

    store.update_unit(prop.id, unit.id, {"buyer": {"passportFile": {"name": "new.png", "data": "data:image/png;base64,BBB"}}})
    assert unit.buyer.passport_file.name == "new.png"
    assert unit.buyer.passport_file.data == "BBB"
    assert unit.buyer.passport_file.type == ""

    store.update_unit(prop.id, unit.id, {"buyer": {"passportFile": None}})
    assert unit.buyer.passport_file is None
    assert unit.buyer.name == "Layla"


def test_update_unit_merges_contract_and_keeps_file_on_empty_object():
    store, prop = _store_with_phased_property()
    document = {"name": "c.pdf", "type": "application/pdf", "size": 10, "data": "QUJD"}
    _, unit = _unit(store, prop, contract={"reference": "PR-1", "telephone": "1", "documentFile": document})

    store.update_unit(prop.id, unit.id, {"contract": {"telephone": "2", "documentFile": {"type": "x"}}})
    assert unit.contract.reference == "PR-1"
    assert unit.contract.telephone == "2"
    assert unit.contract.document_file.name == "c.pdf"
    assert unit.contract.document_file.data == "QUJD"

    store.update_unit(prop.id, unit.id, {"contract": {"documentFile": None}})
    assert unit.contract.document_file is None
    assert unit.contract.reference == "PR-1"
    assert unit.contract.telephone == "2"


def test_malformed_nested_payload_raises_domain_validation_error():
    store, prop = _store_with_phased_property()
    with pytest.raises(ValidationError, match="Invalid request body: buyer"):
        _unit(store, prop, buyer="oops")
    assert prop.phases == []

    _, unit = _unit(store, prop)
    with pytest.raises(ValidationError, match="contract"):
        store.update_unit(prop.id, unit.id, {"contract": ["not", "an", "object"]})


def test_missing_property_wins_over_malformed_payload():
    store, prop = _store_with_phased_property()
    with pytest.raises(NotFoundError, match="Property not found"):
        store.add_unit("prop-missing", {"unitNumber": "A", "status": "available", "buyer": "oops"})
    with pytest.raises(NotFoundError, match="Unit not found"):
        store.update_unit(prop.id, "unit-missing", {"buyer": "oops"})


def test_update_unit_not_found():
    store, prop = _store_with_phased_property()
    with pytest.raises(NotFoundError, match="Unit not found"):
        store.update_unit(prop.id, "unit-missing", {"status": "sold"})
    with pytest.raises(NotFoundError, match="Property not found"):
        store.update_unit("prop-missing", "unit-missing", {"status": "sold"})


def test_delete_unit_returns_phase_and_unit():
    store, prop = _store_with_phased_property()
    _unit(store, prop, phaseName="North")
    phase, unit = _unit(store, prop, unitNumber="SD-2", phaseName="South")
    removed_phase, removed = store.delete_unit(prop.id, unit.id)
    assert removed_phase.id == phase.id
    assert removed.id == unit.id
    assert phase.units == []
    with pytest.raises(NotFoundError):
        store.delete_unit(prop.id, unit.id)


def test_milestones_are_unique_per_unit():
    store, prop = _store_with_phased_property()
    _, unit = _unit(store, prop)
    store.add_milestone(prop.id, unit.id, {"label": "Deposit", "amount": "100000"})
    assert unit.milestones[0].completed is False
    assert unit.milestones[0].amount == 100000

    with pytest.raises(ValidationError, match="already exists"):
        store.add_milestone(prop.id, unit.id, {"label": " deposit "})
    with pytest.raises(ValidationError, match="label is required"):
        store.add_milestone(prop.id, unit.id, {"label": ""})
    assert [m.label for m in unit.milestones] == ["Deposit"]


def test_add_milestone_not_found():
    store, prop = _store_with_phased_property()
    with pytest.raises(NotFoundError, match="Unit not found"):
        store.add_milestone(prop.id, "unit-missing", {"label": "Deposit"})


def test_update_milestone_only_touches_supplied_fields():
    store, prop = _store_with_phased_property()
    _, unit = _unit(store, prop)
    store.add_milestone(prop.id, unit.id, {"label": "Deposit", "amount": 50})
    store.update_milestone(prop.id, unit.id, {"label": "DEPOSIT", "completed": True})
    assert unit.milestones[0].completed is True
    assert unit.milestones[0].amount == 50

    store.update_milestone(prop.id, unit.id, {"label": "deposit", "amount": None})
    assert unit.milestones[0].completed is True
    assert unit.milestones[0].amount is None

    with pytest.raises(NotFoundError, match="Milestone not found"):
        store.update_milestone(prop.id, unit.id, {"label": "Handover", "completed": True})


def test_delete_property_cascades():
    store, prop = _store_with_phased_property()
    phase, unit = _unit(store, prop)
    store.delete_property(prop.id)
    assert store.find_property(prop.id) is None
    with pytest.raises(NotFoundError):
        store.get_unit(prop.id, unit.id)
    with pytest.raises(NotFoundError):
        store.create_phase(prop.id, phase.name)
    with pytest.raises(NotFoundError):
        store.delete_property(prop.id)


def test_ids_are_unique():
    store, prop = _store_with_phased_property()
    ids = {prop.id}
    for idx in range(20):
        phase, unit = _unit(store, prop, unitNumber=f"U-{idx}", phaseName=f"P-{idx}")
        ids.update({phase.id, unit.id})
    assert len(ids) == 41


def test_demo_store_is_isolated_per_build():
    first = build_demo_store()
    second = build_demo_store()
    first.delete_property("prop-001")
    assert first.find_property("prop-001") is None
    assert second.find_property("prop-001") is not None
    prop, phase, unit = second.get_unit("prop-001", "unit-1b")
    assert phase.name == "Palm North"
    assert unit.buyer.name == "Layla Kader"
    assert [m.label for m in unit.milestones] == ["Reservation", "Deposit", "Handover"]
