from pydantic import BaseModel
from typing import Optional, Union


class PatientUpsert(BaseModel):
    phone: Optional[str] = None
    name: Optional[str] = None
    age: Optional[Union[float, str]] = None
