from app.models.patient import Patient
from app.models.stock import Stock, DispensingUnit
from app.models.prescription import Prescription, PrescriptionItem, PrescribedAs

__all__ = ["Patient", "Stock", "DispensingUnit", "Prescription", "PrescriptionItem", "PrescribedAs"]
