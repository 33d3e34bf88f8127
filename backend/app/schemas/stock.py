from pydantic import BaseModel, Field
from typing import Optional

# Upper bound for pack counts and pack sizes; keeps values inside a 64-bit column
MAX_STOCK_VALUE = 1_000_000


class StockAdjust(BaseModel):
    """POST /stocks body. Adds `amount` packs to an existing row or creates it."""
    name: Optional[str] = None
    amount: Optional[float] = Field(0, ge=-MAX_STOCK_VALUE, le=MAX_STOCK_VALUE)
    low_stock_threshold: Optional[float] = Field(None, alias="lowStockThreshold", le=MAX_STOCK_VALUE)
    is_divisible: Optional[bool] = Field(None, alias="isDivisible")
    dispensing_unit: Optional[str] = Field(None, alias="dispensingUnit")
    units_per_pack: Optional[float] = Field(None, alias="unitsPerPack", le=MAX_STOCK_VALUE)

    class Config:
        populate_by_name = True
