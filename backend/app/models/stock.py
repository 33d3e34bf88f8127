import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from app.core.config import settings
from app.db.base import Base


class DispensingUnit(str, enum.Enum):
    TABLET = "TABLET"
    CAPSULE = "CAPSULE"
    BOTTLE = "BOTTLE"
    VIAL = "VIAL"
    ML = "ML"
    MG = "MG"
    SACHET = "SACHET"
    TUBE = "TUBE"
    INJECTION = "INJECTION"
    OTHER = "OTHER"


class Stock(Base):
    """
    Medicine inventory row.

    UNIT NOTE:
    - quantity is always counted in packs
    - one pack holds units_per_pack dispensing units (tablets, mL, ...)
    - is_divisible: single dispensing units may be prescribed
    """
    __tablename__ = "stocks"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=settings.DEFAULT_LOW_STOCK_THRESHOLD)
    is_divisible = Column(Boolean, nullable=False, default=True)
    dispensing_unit = Column(String(32), nullable=False, default=DispensingUnit.TABLET.value)
    units_per_pack = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def in_stock(self) -> bool:
        return (self.quantity or 0) > 0

    @property
    def is_low(self) -> bool:
        quantity = self.quantity or 0
        return quantity > 0 and quantity <= (self.low_stock_threshold or 0)

    def __repr__(self):
        return f"<Stock name={self.name} quantity={self.quantity}>"
