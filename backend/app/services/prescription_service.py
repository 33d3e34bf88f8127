"""
Prescription save, listing and number prediction.

SAVE PIPELINE (one transaction, all-or-nothing):
1. Validate phone/name
2. Upsert patient by phone
3. Normalize line items (trim, default/clamp quantity, drop empty names)
4. Match items to stock and plan one decrement per stock row
5. Persist prescription + items with the next number
6. Apply the decrements
7. Commit and return the fully loaded prescription

A failure at any step rolls back the patient upsert, the prescription and
the stock changes together. No automatic retries.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.core.exceptions import InvalidInput, TransactionFailure
from app.db.unit_of_work import PrescriptionUnitOfWork, load_prescription, next_prescription_number
from app.models.prescription import PrescribedAs, Prescription, PrescriptionItem
from app.services.inventory_service import plan_stock_links
from app.services.patient_service import normalize_age

logger = logging.getLogger(__name__)

MAX_WHOLE_NUMBER = 1_000_000


@dataclass(frozen=True)
class NormalizedItem:
    med_name: str
    dosage: Optional[str]
    quantity: int
    prescribed_as: Optional[str] = None
    units_per_pack: Optional[int] = None


# ==============================================================================
# NORMALIZATION
# ==============================================================================

def _whole_number(value: Any, field_name: str) -> Optional[int]:
    """Finite whole number, or None when absent/unusable. Fractions are rejected."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    if not number.is_integer():
        raise InvalidInput(f"{field_name} must be a whole number")
    if number > MAX_WHOLE_NUMBER:
        raise InvalidInput(f"{field_name} must not exceed {MAX_WHOLE_NUMBER}")
    return int(number)


def _prescribed_as(value: Any) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    mode = str(value).strip().upper()
    if mode not in PrescribedAs.__members__:
        raise InvalidInput(f"prescribedAs must be UNITS or PACKS, got '{value}'")
    return mode


def normalize_items(raw_items: Iterable[Mapping[str, Any]]) -> List[NormalizedItem]:
    """Clean submitted line items.

    - med_name trimmed; entries left empty are dropped
    - quantity absent/not a finite number -> 1, otherwise at least 1
    - explicit prescribed_as / units_per_pack are validated and carried through

    Raises:
        InvalidInput: nothing left after filtering, or a malformed value
    """
    normalized = []
    for raw in raw_items or []:
        med_name = str(raw.get("med_name") or "").strip()
        if not med_name:
            continue

        dosage = raw.get("dosage")
        dosage = str(dosage).strip() if dosage is not None else None

        quantity = _whole_number(raw.get("quantity"), "quantity")
        units_per_pack = _whole_number(raw.get("units_per_pack"), "unitsPerPack")

        normalized.append(
            NormalizedItem(
                med_name=med_name,
                dosage=dosage or None,
                quantity=max(1, quantity) if quantity is not None else 1,
                prescribed_as=_prescribed_as(raw.get("prescribed_as")),
                units_per_pack=max(1, units_per_pack) if units_per_pack is not None else None,
            )
        )

    if not normalized:
        raise InvalidInput("invalid items")
    return normalized


# ==============================================================================
# SAVE
# ==============================================================================

def save_prescription(
    uow: PrescriptionUnitOfWork,
    phone: str,
    name: str,
    age: Any = None,
    symptoms: Optional[str] = None,
    items: Optional[Iterable[Mapping[str, Any]]] = None,
) -> Prescription:
    """Create a prescription and adjust stock atomically.

    Args:
        uow: Unit of work wrapping the session this save runs in
        phone: Patient phone (identifying key)
        name: Patient name; replaces the stored name
        age: Optional age; replaces the stored age
        symptoms: Free text
        items: Raw line items with med_name, dosage, quantity,
            prescribed_as, units_per_pack

    Returns:
        The saved Prescription with patient, items and item stock loaded

    Raises:
        InvalidInput: missing phone/name or no usable items (nothing saved)
        TransactionFailure: the store failed mid-save (nothing saved)
    """
    phone = (phone or "").strip()
    name = (name or "").strip()
    if not phone or not name:
        raise InvalidInput("name and phone required")

    raw_items = list(items or [])
    if not raw_items:
        raise InvalidInput("at least one item required")

    symptoms = symptoms.strip() if symptoms and symptoms.strip() else None

    with uow:
        try:
            patient = uow.upsert_patient(phone, name, normalize_age(age))

            normalized = normalize_items(raw_items)

            stocks = uow.find_stocks_by_names(i.med_name for i in normalized)
            plan = plan_stock_links(normalized, lambda med_name: stocks.get(med_name.lower()))

            number = uow.next_prescription_number()
            prescription = uow.create_prescription(patient, number, symptoms, plan.links)

            for stock_id, total in plan.decrements.items():
                uow.decrement_stock(stock_id, total)

            uow.commit()
        except SQLAlchemyError as e:
            logger.error(f"[Prescription] Save failed for phone {phone}: {e}", exc_info=True)
            raise TransactionFailure("Prescription could not be saved") from e

    logger.info(
        f"[Prescription] Saved #{number} for {phone}: {len(plan.links)} items, "
        f"{len(plan.decrements)} stock rows decremented"
    )
    return uow.load_prescription(prescription.id)


# ==============================================================================
# READ
# ==============================================================================

def list_prescriptions(db: Session, limit: Optional[int] = None) -> List[Prescription]:
    """Newest first, with patient, items and item stock loaded."""
    return (
        db.query(Prescription)
        .options(
            selectinload(Prescription.patient),
            selectinload(Prescription.items).selectinload(PrescriptionItem.stock),
        )
        .order_by(Prescription.id.desc())
        .limit(limit or settings.PRESCRIPTION_LIST_LIMIT)
        .all()
    )


def get_prescription(db: Session, prescription_id: int) -> Optional[Prescription]:
    return load_prescription(db, prescription_id)


def predict_next_number(db: Session) -> int:
    """Display-only guess of the next number; the save assigns the real one."""
    return next_prescription_number(db)
