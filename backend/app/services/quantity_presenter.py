"""
Human-readable quantities for saved prescription items.

Every surface that shows a saved quantity (save response, prescription
list, printed PDF) goes through format_item_quantity() so they never
disagree.

Examples:
    format_quantity(2, "PACKS", 10, "TABLET")  -> "2 packs (20 tablets)"
    format_quantity(1, "UNITS", None, "CAPSULE") -> "1 capsule"
    format_quantity(3)                           -> "3"
"""
from typing import Optional

from app.models.prescription import PrescribedAs

EMPTY_QUANTITY = "—"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def format_quantity(
    quantity: Optional[int],
    prescribed_as: Optional[str] = None,
    units_per_pack: Optional[int] = None,
    dispensing_unit: Optional[str] = None,
) -> str:
    if not quantity:
        return EMPTY_QUANTITY

    if prescribed_as == PrescribedAs.PACKS.value and units_per_pack:
        unit = dispensing_unit.lower() if dispensing_unit else "unit"
        total_units = quantity * units_per_pack
        return f"{_plural(quantity, 'pack')} ({_plural(total_units, unit)})"

    if prescribed_as == PrescribedAs.UNITS.value and dispensing_unit:
        return _plural(quantity, dispensing_unit.lower())

    return str(quantity)


def format_item_quantity(item) -> str:
    """Format a saved PrescriptionItem; items without a stock link show the bare quantity."""
    stock = getattr(item, "stock", None)
    if stock is None:
        return str(item.quantity) if item.quantity else EMPTY_QUANTITY
    return format_quantity(
        item.quantity,
        prescribed_as=item.prescribed_as,
        units_per_pack=item.units_per_pack,
        dispensing_unit=stock.dispensing_unit,
    )
