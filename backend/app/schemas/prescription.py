from pydantic import BaseModel, Field
from typing import Any, List, Optional, Union


class PrescriptionItemIn(BaseModel):
    med_name: Optional[str] = Field(None, alias="medName")
    dosage: Optional[str] = None
    # Defaulted, clamped or rejected by prescription_service.normalize_items
    quantity: Optional[Any] = None
    prescribed_as: Optional[str] = Field(None, alias="prescribedAs")
    units_per_pack: Optional[Any] = Field(None, alias="unitsPerPack")

    class Config:
        populate_by_name = True


class PrescriptionCreate(BaseModel):
    phone: Optional[str] = None
    name: Optional[str] = None
    age: Optional[Union[float, str]] = None
    symptoms: Optional[str] = None
    items: List[PrescriptionItemIn] = []
