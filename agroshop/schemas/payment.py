from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field
from agroshop.schemas.base import TimestampSchema

PaymentMethod = Literal['cash', 'bank_transfer', 'cheque', 'card', 'upi']

class PaymentCreate(BaseModel):
    farmer_id: Optional[int] = None
    bill_id: Optional[int] = None
    amount_paid: float = Field(..., allow_inf_nan=False)
    payment_method: str = "cash"
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None

class Payment(TimestampSchema):
    id: int
    farmer_id: int
    bill_id: Optional[int] = None
    amount_paid: float
    payment_method: PaymentMethod
    payment_date: datetime
    notes: Optional[str] = None
    recorded_by: Optional[int] = None
