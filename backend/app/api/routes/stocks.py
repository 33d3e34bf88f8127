"""Stocks: search, low-stock alerts and restocking."""
import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.api.serializers import serialize_stock
from app.core.exceptions import BusinessError, InvalidInput
from app.schemas.stock import StockAdjust
from app.services import inventory_service

router = APIRouter()


def _truncate(value, default=None):
    if value is None or not math.isfinite(value):
        return default
    return math.trunc(value)


@router.get("", response_model=dict)
def list_stocks(q: str | None = Query(None), db: Session = Depends(get_db)):
    """Stock list with "contains" search. Powers the prescription autocomplete."""
    stocks = inventory_service.search_stocks(db, q)
    return {"stocks": [serialize_stock(s) for s in stocks]}


# ==============================================================================
# LOW STOCK ALERT ENDPOINT
# ==============================================================================

@router.get("/low-stock", response_model=dict)
def get_low_stock_items(
    limit: int | None = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Empty or low stocks for the dashboard alert banner."""
    items = inventory_service.low_stock_items(db, limit)
    return {
        "stocks": [
            {**serialize_stock(s), "status": "Out of Stock" if not s.in_stock else "Low Stock"}
            for s in items
        ]
    }


# ==============================================================================
# RESTOCK ENDPOINT
# ==============================================================================

@router.post("", response_model=dict)
def adjust_stock(body: StockAdjust, db: Session = Depends(get_db)):
    """Add packs to a medicine (creating it if new). Negative amounts remove packs."""
    try:
        stock = inventory_service.restock(
            db,
            name=body.name,
            amount=_truncate(body.amount, 0),
            low_stock_threshold=_truncate(body.low_stock_threshold),
            is_divisible=body.is_divisible if body.is_divisible is not None else True,
            dispensing_unit=body.dispensing_unit,
            units_per_pack=_truncate(body.units_per_pack, 1),
        )
    except InvalidInput as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))
    return {"stock": serialize_stock(stock)}
