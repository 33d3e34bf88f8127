from types import SimpleNamespace

import pytest

from app.services.quantity_presenter import format_item_quantity, format_quantity


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        (dict(quantity=2, prescribed_as="PACKS", units_per_pack=10, dispensing_unit="TABLET"), "2 packs (20 tablets)"),
        (dict(quantity=1, prescribed_as="PACKS", units_per_pack=1, dispensing_unit="BOTTLE"), "1 pack (1 bottle)"),
        (dict(quantity=1, prescribed_as="PACKS", units_per_pack=10, dispensing_unit="TABLET"), "1 pack (10 tablets)"),
        (dict(quantity=3, prescribed_as="PACKS", units_per_pack=5, dispensing_unit=None), "3 packs (15 units)"),
        (dict(quantity=1, prescribed_as="UNITS", dispensing_unit="CAPSULE"), "1 capsule"),
        (dict(quantity=4, prescribed_as="UNITS", dispensing_unit="ML"), "4 mls"),
        (dict(quantity=3, prescribed_as=None), "3"),
        (dict(quantity=3, prescribed_as="UNITS", dispensing_unit=None), "3"),
        (dict(quantity=0), "—"),
        (dict(quantity=None), "—"),
        (dict(quantity=None, prescribed_as="PACKS", units_per_pack=10, dispensing_unit="TABLET"), "—"),
        (dict(quantity=0, prescribed_as="UNITS", dispensing_unit="CAPSULE"), "—"),
    ],
)
def test_format_quantity(kwargs, expected):
    assert format_quantity(**kwargs) == expected


def test_item_with_stock_uses_stock_dispensing_unit():
    item = SimpleNamespace(
        quantity=2,
        prescribed_as="PACKS",
        units_per_pack=10,
        stock=SimpleNamespace(dispensing_unit="TABLET"),
    )
    assert format_item_quantity(item) == "2 packs (20 tablets)"


def test_item_without_stock_shows_bare_quantity():
    item = SimpleNamespace(quantity=2, prescribed_as="PACKS", units_per_pack=10, stock=None)
    assert format_item_quantity(item) == "2"
