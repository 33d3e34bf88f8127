"""Patients: lookup by phone and upsert."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.api.serializers import serialize_patient
from app.core.exceptions import BusinessError, InvalidInput
from app.schemas.patient import PatientUpsert
from app.services.patient_service import get_patient_by_phone, normalize_age, upsert_patient

router = APIRouter()


@router.get("", response_model=dict)
def lookup_patient(
    phone: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """Find a patient by phone. No match is not an error: patient is null."""
    if not phone or not phone.strip():
        raise BusinessError.bad_request("phone required")
    return {"patient": serialize_patient(get_patient_by_phone(db, phone))}


@router.post("", response_model=dict)
def save_patient(body: PatientUpsert, db: Session = Depends(get_db)):
    """Create the patient or refresh name/age for an existing phone."""
    try:
        patient = upsert_patient(db, body.phone, body.name, normalize_age(body.age))
    except InvalidInput as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))
    db.commit()
    db.refresh(patient)
    return {"patient": serialize_patient(patient)}
