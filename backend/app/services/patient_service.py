"""Patient lookup and upsert by phone."""
import logging
import math
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidInput
from app.models.patient import Patient

logger = logging.getLogger(__name__)


def normalize_age(raw) -> Optional[int]:
    """Whole, non-negative years. Anything unparseable becomes None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str) and not raw.strip():
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return max(0, math.floor(value))


def get_patient_by_phone(db: Session, phone: str) -> Optional[Patient]:
    phone = (phone or "").strip()
    if not phone:
        return None
    return db.query(Patient).filter(Patient.phone == phone).first()


def upsert_patient(db: Session, phone: str, name: str, age: Optional[int] = None) -> Patient:
    """Create the patient or refresh name/age. The latest submission wins.

    Flushes only; the caller owns the transaction.
    """
    phone = (phone or "").strip()
    name = (name or "").strip()
    if not phone or not name:
        raise InvalidInput("name and phone required")

    patient = get_patient_by_phone(db, phone)
    if patient:
        patient.name = name
        patient.age = age
    else:
        patient = Patient(phone=phone, name=name, age=age)
        db.add(patient)
        logger.info(f"[Patient] New patient for phone {phone}")
    db.flush()
    return patient
