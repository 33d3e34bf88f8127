"""JSON shapes returned by the API.

Keys are camelCase; integer ids are sent as strings so large values survive
JavaScript clients.
"""
from typing import Optional

from app.models.patient import Patient
from app.models.prescription import Prescription, PrescriptionItem
from app.models.stock import Stock
from app.services.quantity_presenter import format_item_quantity


def _id(value) -> Optional[str]:
    return str(value) if value is not None else None


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_patient(patient: Optional[Patient]) -> Optional[dict]:
    if patient is None:
        return None
    return {
        "id": _id(patient.id),
        "phone": patient.phone,
        "name": patient.name,
        "age": patient.age,
    }


def serialize_stock(stock: Optional[Stock]) -> Optional[dict]:
    if stock is None:
        return None
    return {
        "id": _id(stock.id),
        "name": stock.name,
        "quantity": stock.quantity,
        "lowStockThreshold": stock.low_stock_threshold,
        "updatedAt": _iso(stock.updated_at),
        "inStock": stock.in_stock,
        "isLow": stock.is_low,
        "isDivisible": stock.is_divisible,
        "dispensingUnit": stock.dispensing_unit,
        "unitsPerPack": stock.units_per_pack,
    }


def serialize_item(item: PrescriptionItem) -> dict:
    return {
        "id": _id(item.id),
        "medName": item.med_name,
        "dosage": item.dosage,
        "quantity": item.quantity,
        "prescribedAs": item.prescribed_as,
        "unitsPerPack": item.units_per_pack,
        "stockId": _id(item.stock_id),
        "stock": serialize_stock(item.stock),
        "quantityDisplay": format_item_quantity(item),
    }


def serialize_prescription(prescription: Prescription) -> dict:
    return {
        "id": _id(prescription.id),
        "number": prescription.number,
        "patientId": _id(prescription.patient_id),
        "symptoms": prescription.symptoms,
        "createdAt": _iso(prescription.created_at),
        "patient": serialize_patient(prescription.patient),
        "items": [serialize_item(i) for i in prescription.items],
    }
