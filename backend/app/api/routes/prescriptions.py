"""Prescriptions: save (with stock adjustment), list, next-number preview and print."""
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_unit_of_work
from app.api.serializers import serialize_prescription
from app.core.exceptions import BusinessError, InvalidInput, TransactionFailure
from app.db.unit_of_work import PrescriptionUnitOfWork
from app.schemas.prescription import PrescriptionCreate
from app.services import prescription_service
from app.services.pdf_service import generate_prescription_pdf

router = APIRouter()


@router.get("", response_model=dict)
def list_prescriptions(db: Session = Depends(get_db)):
    """Latest prescriptions, newest first."""
    rows = prescription_service.list_prescriptions(db)
    return {"prescriptions": [serialize_prescription(p) for p in rows]}


@router.get("/next-number", response_model=dict)
def next_number(db: Session = Depends(get_db)):
    """Preview only. The number is assigned for real when the prescription is saved."""
    return {"nextNumber": prescription_service.predict_next_number(db)}


@router.get("/{prescription_id}", response_model=dict)
def get_prescription(prescription_id: int, db: Session = Depends(get_db)):
    prescription = prescription_service.get_prescription(db, prescription_id)
    if not prescription:
        raise BusinessError.not_found("Prescription")
    return {"prescription": serialize_prescription(prescription)}


@router.get("/{prescription_id}/print")
def print_prescription(prescription_id: int, db: Session = Depends(get_db)):
    """Printable PDF of a saved prescription."""
    try:
        buffer = generate_prescription_pdf(db, prescription_id)
    except ValueError as e:
        raise BusinessError.not_found("Prescription", reason=str(e))
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename=prescription_{prescription_id}.pdf"},
    )


@router.post("", response_model=dict)
def create_prescription(
    body: PrescriptionCreate,
    uow: PrescriptionUnitOfWork = Depends(get_unit_of_work),
):
    """Save a prescription, upsert the patient and decrement stock in one transaction."""
    try:
        prescription = prescription_service.save_prescription(
            uow,
            phone=body.phone,
            name=body.name,
            age=body.age,
            symptoms=body.symptoms,
            items=[i.model_dump() for i in body.items],
        )
    except InvalidInput as e:
        raise BusinessError.bad_request(str(e))
    except TransactionFailure as e:
        raise BusinessError.server_error(e)
    return {"prescription": serialize_prescription(prescription)}
