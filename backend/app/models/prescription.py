"""
Prescription and its line items.

Created once, atomically, together with the stock decrement. Never edited.
PrescriptionItem.stock_id is a historical pointer: the stock row may later be
renamed or deleted (ON DELETE SET NULL) without touching saved prescriptions.
"""
import enum

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class PrescribedAs(str, enum.Enum):
    UNITS = "UNITS"  # quantity counts dispensing units
    PACKS = "PACKS"  # quantity counts whole packs


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(Integer, unique=True, nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)
    symptoms = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("Patient", backref="prescriptions")
    items = relationship(
        "PrescriptionItem",
        back_populates="prescription",
        cascade="all, delete-orphan",
        order_by="PrescriptionItem.id",
    )

    def __repr__(self):
        return f"<Prescription number={self.number} patient_id={self.patient_id}>"


class PrescriptionItem(Base):
    __tablename__ = "prescription_items"

    id = Column(Integer, primary_key=True, index=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id", ondelete="CASCADE"), nullable=False)
    med_name = Column(String(255), nullable=False)
    dosage = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    prescribed_as = Column(String(16), nullable=True)  # UNITS | PACKS, null when no stock match
    units_per_pack = Column(Integer, nullable=False, default=1)
    stock_id = Column(Integer, ForeignKey("stocks.id", ondelete="SET NULL"), nullable=True)

    prescription = relationship("Prescription", back_populates="items")
    stock = relationship("Stock")
