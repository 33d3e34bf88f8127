import math

import pytest

from app.core.exceptions import InvalidInput
from app.services.prescription_service import normalize_items


def test_trims_names_and_drops_empty_entries():
    items = normalize_items([
        {"med_name": "  Paracetamol  ", "dosage": " 1-0-1 ", "quantity": 2},
        {"med_name": "   "},
        {"med_name": None, "quantity": 4},
        {"med_name": "Cetirizine"},
    ])

    assert [i.med_name for i in items] == ["Paracetamol", "Cetirizine"]
    assert items[0].dosage == "1-0-1"
    assert items[1].dosage is None


@pytest.mark.parametrize("raw, expected", [
    (None, 1),
    ("abc", 1),
    (math.inf, 1),
    (math.nan, 1),
    (True, 1),
    (0, 1),
    (-3, 1),
    (5, 5),
    (5.0, 5),
    ("7", 7),
])
def test_quantity_defaults_and_clamps(raw, expected):
    [item] = normalize_items([{"med_name": "X", "quantity": raw}])
    assert item.quantity == expected


def test_fractional_quantity_is_rejected():
    with pytest.raises(InvalidInput):
        normalize_items([{"med_name": "X", "quantity": 1.5}])


@pytest.mark.parametrize("field", ["quantity", "units_per_pack"])
def test_oversized_whole_numbers_are_rejected(field):
    assert normalize_items([{"med_name": "X", field: 1_000_000}])
    with pytest.raises(InvalidInput):
        normalize_items([{"med_name": "X", field: 1e20}])


def test_nothing_left_raises_invalid_input():
    with pytest.raises(InvalidInput):
        normalize_items([{"med_name": " "}, {"dosage": "1-0-1"}])
    with pytest.raises(InvalidInput):
        normalize_items([])


def test_explicit_mode_and_pack_size_are_carried():
    [item] = normalize_items([{"med_name": "X", "prescribed_as": "packs", "units_per_pack": 0}])
    assert item.prescribed_as == "PACKS"
    assert item.units_per_pack == 1


def test_unknown_mode_is_rejected():
    with pytest.raises(InvalidInput):
        normalize_items([{"med_name": "X", "prescribed_as": "BOXES"}])
