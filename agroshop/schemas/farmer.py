from typing import Optional
from pydantic import BaseModel, field_validator
from agroshop.schemas.base import TimestampSchema

class FarmerBase(BaseModel):
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    village: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    aadhar_number: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value):
        if value is not None and not value.strip():
            raise ValueError("Farmer name is required")
        return value.strip() if value is not None else value

class FarmerCreate(FarmerBase):
    pass

class FarmerUpdate(FarmerBase):
    name: Optional[str] = None

class Farmer(TimestampSchema, FarmerBase):
    id: int
