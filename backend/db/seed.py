"""Demo inventory loaded into the store when the API starts."""

from __future__ import annotations

from typing import Dict, List

from ..models.property import Property
from ..utils.logging import get_logger
from .store import PropertyStore

LOGGER = get_logger("db.seed")


def _unit(unit_id: str, number: str, status: str, list_price: float, **extra) -> Dict:
    row = {
        "id": unit_id,
        "unit_number": number,
        "status": status,
        "list_price": list_price,
        "sale_price": None,
        "total_received": None,
        "milestones": [],
    }
    row.update(extra)
    return row


def _milestones(*items) -> List[Dict]:
    return [{"label": label, "completed": done, "amount": amount} for label, done, amount in items]


DEMO_PROPERTIES: List[Dict] = [
    {
        "id": "prop-001",
        "name": "Palm Residences",
        "type": "semi_detached",
        "uses_phases": True,
        "location": "Abu Dhabi, UAE",
        "phases": [
            {
                "id": "phase-1",
                "name": "Palm North",
                "units": [
                    _unit("unit-1a", "SD-101", "available", 1250000),
                    _unit(
                        "unit-1b",
                        "SD-115",
                        "sold",
                        1395000,
                        sale_price=1375000,
                        total_received=450000,
                        buyer={
                            "name": "Layla Kader",
                            "passport_number": "A45599871",
                            "purchase_date": "2024-05-18",
                            "initial_payment": 150000,
                            "first_payment": 200000,
                            "second_payment": 100000,
                            "phone": "+971501112233",
                        },
                        contract={"reference": "PR-SD-115", "telephone": "+97125555000"},
                        milestones=_milestones(
                            ("Reservation", True, 50000),
                            ("Deposit", True, 100000),
                            ("Handover", False, 300000),
                        ),
                    ),
                ],
            },
            {
                "id": "phase-2",
                "name": "Palm South",
                "units": [
                    _unit(
                        "unit-2a",
                        "SD-220",
                        "under_contract",
                        1320000,
                        total_received=250000,
                        buyer={
                            "name": "Aamir Rahman",
                            "passport_number": "P77892344",
                            "purchase_date": "2024-04-02",
                            "initial_payment": 100000,
                            "first_payment": 150000,
                            "phone": "+971509998877",
                        },
                        contract={"reference": "PR-SD-220", "telephone": "+97125555123"},
                        milestones=_milestones(("Deposit", True, 100000), ("First Draw", True, 150000)),
                    ),
                ],
            },
        ],
    },
    {
        "id": "prop-002",
        "name": "Azure Retreat Villas",
        "type": "villa",
        "uses_phases": False,
        "location": "Dubai, UAE",
        "phases": [
            {
                "id": "phase-villas",
                "name": "General Inventory",
                "units": [
                    _unit("villa-5", "Villa 5", "available", 3850000),
                    _unit(
                        "villa-7",
                        "Villa 7",
                        "signed_contract",
                        4120000,
                        sale_price=4075000,
                        total_received=750000,
                        buyer={
                            "name": "Farah Aziz",
                            "passport_number": "AA0993456",
                            "purchase_date": "2024-01-12",
                            "initial_payment": 250000,
                            "first_payment": 300000,
                            "second_payment": 200000,
                            "phone": "+971504561234",
                        },
                        contract={"reference": "ARV-07", "telephone": "+97145557890"},
                        milestones=_milestones(
                            ("Deposit", True, 250000),
                            ("Construction", True, 300000),
                            ("Finishing", False, 200000),
                        ),
                    ),
                ],
            },
        ],
    },
    {
        "id": "prop-003",
        "name": "Harbor Heights",
        "type": "apartment",
        "uses_phases": False,
        "location": "Doha, Qatar",
        "phases": [
            {
                "id": "phase-harbor",
                "name": "Inventory",
                "units": [
                    _unit(
                        "apt-1402",
                        "Apt 1402",
                        "deposit",
                        980000,
                        total_received=90000,
                        buyer={
                            "name": "Jude Carter",
                            "passport_number": "M4456778",
                            "purchase_date": "2024-06-05",
                            "initial_payment": 50000,
                            "first_payment": 40000,
                            "phone": "+97455501122",
                        },
                        contract={"reference": "HH-A1402", "telephone": "+97433334444"},
                        milestones=_milestones(("Deposit", True, 50000), ("Financing", False, 40000)),
                    ),
                    _unit("apt-1708", "Apt 1708", "available", 1150000),
                ],
            },
        ],
    },
]


def demo_properties() -> List[Property]:
    """Fresh copies of the demo inventory; callers may mutate them freely."""

    return [Property.model_validate(row) for row in DEMO_PROPERTIES]


def build_demo_store() -> PropertyStore:
    properties = demo_properties()
    units = sum(prop.unit_count for prop in properties)
    LOGGER.info("Seeding demo inventory properties=%d units=%d", len(properties), units)
    return PropertyStore(properties)
