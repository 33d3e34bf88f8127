"""
Unit of work for the prescription save.

Wraps one SQLAlchemy session and exposes only what the save needs:
patient upsert, stock lookup by a set of names, number assignment,
prescription creation and the conditional stock decrement. Nothing is
committed until commit() is called; leaving the block with an exception
rolls everything back.

Usage:
    with PrescriptionUnitOfWork(db) as uow:
        patient = uow.upsert_patient(phone, name, age)
        ...
        uow.commit()
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from app.models.patient import Patient
from app.models.prescription import Prescription, PrescriptionItem
from app.models.stock import Stock
from app.services import inventory_service, patient_service
from app.services.inventory_service import StockLink

logger = logging.getLogger(__name__)


class PrescriptionUnitOfWork:
    def __init__(self, db: Session):
        self.db = db

    def __enter__(self) -> "PrescriptionUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.rollback()
            logger.info(f"[UnitOfWork] Rolled back after {exc_type.__name__}")
        return False

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def upsert_patient(self, phone: str, name: str, age: Optional[int]) -> Patient:
        return patient_service.upsert_patient(self.db, phone, name, age)

    def find_stocks_by_names(self, names: Iterable[str]) -> Dict[str, Stock]:
        return inventory_service.find_stocks_by_names(self.db, names)

    def next_prescription_number(self) -> int:
        return next_prescription_number(self.db)

    def create_prescription(
        self,
        patient: Patient,
        number: int,
        symptoms: Optional[str],
        links: List[StockLink],
    ) -> Prescription:
        prescription = Prescription(
            number=number,
            patient_id=patient.id,
            symptoms=symptoms,
        )
        for link in links:
            prescription.items.append(
                PrescriptionItem(
                    med_name=link.item.med_name,
                    dosage=link.item.dosage,
                    quantity=link.item.quantity,
                    prescribed_as=link.prescribed_as,
                    units_per_pack=link.units_per_pack,
                    stock_id=link.stock.id if link.stock is not None else None,
                )
            )
        self.db.add(prescription)
        self.db.flush()  # Get IDs without committing
        return prescription

    def decrement_stock(self, stock_id: int, total: int) -> None:
        inventory_service.decrement_stock(self.db, stock_id, total)

    def load_prescription(self, prescription_id: int) -> Optional[Prescription]:
        return load_prescription(self.db, prescription_id)


def next_prescription_number(db: Session) -> int:
    """Highest saved number + 1. Authoritative only inside the save transaction."""
    current = db.query(Prescription.number).order_by(Prescription.number.desc()).limit(1).scalar()
    return (current or 0) + 1


def load_prescription(db: Session, prescription_id: int) -> Optional[Prescription]:
    return (
        db.query(Prescription)
        .options(
            selectinload(Prescription.patient),
            selectinload(Prescription.items).selectinload(PrescriptionItem.stock),
        )
        .filter(Prescription.id == prescription_id)
        .first()
    )
