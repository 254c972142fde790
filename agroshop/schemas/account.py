from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, computed_field
from agroshop.schemas.base import BaseSchema, TimestampSchema
from agroshop.schemas.bill import FarmerRef
from agroshop.services.ledger import balance_status

class CustomerAccountUpdate(BaseModel):
    total_credit_limit: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    current_balance: Optional[float] = Field(None, allow_inf_nan=False)
    interest_rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

class CustomerAccount(TimestampSchema):
    id: int
    farmer_id: int
    total_credit_limit: float
    current_balance: float
    interest_rate: float
    last_payment_date: Optional[datetime] = None
    farmer: Optional[FarmerRef] = None

    @computed_field
    @property
    def balance_status(self) -> str:
        return balance_status(self.current_balance)

class InterestCharge(BaseSchema):
    id: int
    farmer_id: int
    bill_id: Optional[int] = None
    principal_amount: float
    interest_amount: float
    interest_rate: float
    charge_date: datetime

class InterestAccrual(BaseModel):
    farmer_id: int
    applied: bool
    message: str
    interest_amount: float = 0
    new_balance: float
    charge: Optional[InterestCharge] = None

class Ledger(BaseModel):
    account: CustomerAccount
    interest_charges: List[InterestCharge]
