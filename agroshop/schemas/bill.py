from datetime import date
from typing import Optional, List, Literal
from pydantic import BaseModel, Field
from agroshop.schemas.base import BaseSchema, TimestampSchema

PaymentStatus = Literal['paid', 'partial', 'pending']

class BillItemCreate(BaseModel):
    product_id: int
    quantity: float = Field(..., gt=0, allow_inf_nan=False)
    unit_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

class ProductRef(BaseSchema):
    id: int
    name: str

class FarmerRef(BaseSchema):
    id: int
    name: str

class BillItem(BaseSchema):
    id: int
    bill_id: int
    product_id: int
    quantity: float
    unit_price: float
    total_price: float
    product: Optional[ProductRef] = None

class BillCreate(BaseModel):
    farmer_id: int
    bill_number: Optional[str] = None
    discount_amount: float = Field(0, ge=0, allow_inf_nan=False)
    payment_status: PaymentStatus = "pending"
    due_date: Optional[date] = None
    items: List[BillItemCreate]

class BillUpdate(BaseModel):
    discount_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    payment_status: Optional[PaymentStatus] = None
    due_date: Optional[date] = None

class Bill(TimestampSchema):
    id: int
    bill_number: str
    farmer_id: int
    total_amount: float
    discount_amount: float
    final_amount: float
    payment_status: PaymentStatus
    due_date: Optional[date] = None
    farmer: Optional[FarmerRef] = None
    bill_items: List[BillItem] = []

class BillIntegrity(BaseModel):
    bill_id: int
    consistent: bool
    issues: List[str]
