"""
Stock lookup, restocking and the prescription-time stock adjustment.

Lookup rules:
- The link stored on a prescription item uses exact, case-insensitive
  name equality only. No fuzzy or prefix matching.
- search_stocks() is the looser "contains" search used for autocomplete.

Adjustment rules:
- Stock quantity is counted in packs.
- Requested amounts are summed per stock row in dispensing units, then
  converted to whole packs (floor). One decrement per distinct stock row.
- A decrement larger than what is on the shelf empties the row (quantity 0).
  Prescribing is never blocked by insufficient stock.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidInput
from app.models.prescription import PrescribedAs
from app.models.stock import DispensingUnit, Stock

logger = logging.getLogger(__name__)


@dataclass
class StockLink:
    """One normalized line item and the stock row it resolved to (if any)."""
    item: "NormalizedItem"  # noqa: F821 - defined in prescription_service
    stock: Optional[Stock]
    prescribed_as: Optional[str]
    units_per_pack: int


@dataclass
class StockPlan:
    links: List[StockLink] = field(default_factory=list)
    decrements: Dict[int, int] = field(default_factory=dict)  # stock_id -> packs


# ==============================================================================
# LOOKUP
# ==============================================================================

def find_stock(db: Session, name: str) -> Optional[Stock]:
    """Exact case-insensitive match. Returns None when nothing matches."""
    if not name or not name.strip():
        return None
    return find_stocks_by_names(db, [name]).get(name.strip().lower())


def find_stocks_by_names(db: Session, names: Iterable[str]) -> Dict[str, Stock]:
    """Batch lookup keyed by lower-cased name.

    Rows whose names differ only by case are not expected; if present the
    lowest id wins.
    """
    wanted = {n.strip().lower() for n in names if n and n.strip()}
    if not wanted:
        return {}

    candidates = (
        db.query(Stock)
        .filter(func.lower(Stock.name).in_(sorted(wanted)))
        .order_by(Stock.id.asc())
        .all()
    )
    found: Dict[str, Stock] = {}
    for stock in candidates:
        key = stock.name.strip().lower()
        if key in wanted and key not in found:
            found[key] = stock
    return found


def search_stocks(db: Session, q: Optional[str] = None) -> List[Stock]:
    """Case-insensitive "contains" search, ordered by name."""
    query = db.query(Stock)
    if q and q.strip():
        query = query.filter(Stock.name.ilike(f"%{q.strip()}%"))
    return query.order_by(Stock.name.asc()).all()


def low_stock_items(db: Session, limit: Optional[int] = None) -> List[Stock]:
    """Stocks that are empty or at/below their own threshold."""
    rows = (
        db.query(Stock)
        .filter(Stock.quantity <= Stock.low_stock_threshold)
        .order_by(Stock.quantity.asc(), Stock.name.asc())
        .limit(limit or settings.LOW_STOCK_ALERT_LIMIT)
        .all()
    )
    return rows


# ==============================================================================
# RESTOCK
# ==============================================================================

def normalize_dispensing_unit(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        return DispensingUnit.TABLET.value
    unit = str(value).strip().upper()
    if unit not in DispensingUnit.__members__:
        raise InvalidInput(f"Unknown dispensing unit '{value}'")
    return unit


def restock(
    db: Session,
    name: str,
    amount: int,
    low_stock_threshold: Optional[int] = None,
    is_divisible: bool = True,
    dispensing_unit: Optional[str] = None,
    units_per_pack: int = 1,
) -> Stock:
    """Add (or remove, with a negative amount) packs of a medicine.

    Existing rows are matched case-insensitively and have their attributes
    refreshed; the quantity never drops below zero. New rows start at
    max(0, amount).
    """
    name = (name or "").strip()
    if not name or not amount:
        raise InvalidInput("name and non-zero amount required")

    unit = normalize_dispensing_unit(dispensing_unit)
    units_per_pack = max(1, int(units_per_pack or 1))
    if low_stock_threshold is not None:
        low_stock_threshold = max(0, int(low_stock_threshold))

    stock = find_stock(db, name)
    if stock:
        stock.quantity = max(0, (stock.quantity or 0) + amount)
        logger.info(f"[Stock] Adjusted '{stock.name}' by {amount} -> {stock.quantity}")
    else:
        stock = Stock(name=name, quantity=max(0, amount))
        db.add(stock)
        logger.info(f"[Stock] Created '{name}' with {stock.quantity} packs")

    if low_stock_threshold is not None:
        stock.low_stock_threshold = low_stock_threshold
    stock.is_divisible = bool(is_divisible)
    stock.dispensing_unit = unit
    stock.units_per_pack = units_per_pack

    db.commit()
    db.refresh(stock)
    return stock


# ==============================================================================
# PRESCRIPTION-TIME ADJUSTMENT
# ==============================================================================

def resolve_prescribed_as(explicit: Optional[str], stock: Optional[Stock]) -> Optional[str]:
    if explicit:
        return explicit
    if stock is None:
        return None
    return PrescribedAs.UNITS.value if stock.is_divisible else PrescribedAs.PACKS.value


def resolve_units_per_pack(explicit: Optional[int], stock: Optional[Stock]) -> int:
    if explicit:
        return explicit
    if stock is not None and stock.units_per_pack:
        return stock.units_per_pack
    return 1


def plan_stock_links(items, lookup: Callable[[str], Optional[Stock]]) -> StockPlan:
    """Match each item to stock and work out one decrement per stock row.

    Unmatched items are kept (with no stock); a prescribed medicine need not
    exist in inventory.
    """
    plan = StockPlan()
    units_by_stock: Dict[int, int] = {}
    stocks: Dict[int, Stock] = {}

    for item in items:
        stock = lookup(item.med_name)
        link = StockLink(
            item=item,
            stock=stock,
            prescribed_as=resolve_prescribed_as(item.prescribed_as, stock),
            units_per_pack=resolve_units_per_pack(item.units_per_pack, stock),
        )
        plan.links.append(link)
        if stock is None:
            continue

        pack_size = max(1, stock.units_per_pack or 1)
        if link.prescribed_as == PrescribedAs.UNITS.value:
            units = item.quantity
        else:
            units = item.quantity * pack_size
        units_by_stock[stock.id] = units_by_stock.get(stock.id, 0) + units
        stocks[stock.id] = stock

    for stock_id, units in units_by_stock.items():
        packs = units // max(1, stocks[stock_id].units_per_pack or 1)
        if packs > 0:
            plan.decrements[stock_id] = packs

    return plan


def decrement_stock(db: Session, stock_id: int, total: int) -> None:
    """Take `total` packs off a stock row, flooring at zero.

    Runs as conditional UPDATEs against the current row so the check and the
    write happen in the same statement.
    """
    result = db.execute(
        update(Stock)
        .where(Stock.id == stock_id, Stock.quantity >= total)
        .values(quantity=Stock.quantity - total)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.info(f"[Stock] Decremented stock {stock_id} by {total}")
    else:
        result = db.execute(
            update(Stock)
            .where(Stock.id == stock_id, Stock.quantity < total)
            .values(quantity=0)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.warning(f"[Stock] Stock {stock_id} short of {total} packs, clamped to 0")

    # Loaded instances must re-read the new quantity
    cached = db.identity_map.get(db.identity_key(Stock, stock_id))
    if cached is not None:
        db.expire(cached, ["quantity", "updated_at"])
