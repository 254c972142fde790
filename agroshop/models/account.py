from sqlalchemy import Column, DateTime, Numeric, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from agroshop.models.base import BaseModel

class CustomerAccount(BaseModel):
    __tablename__ = "customer_accounts"
    
    farmer_id = Column(Integer, ForeignKey('farmers.id'), nullable=False, unique=True)
    total_credit_limit = Column(Numeric(12, 2), nullable=False, default=0)
    current_balance = Column(Numeric(12, 2), nullable=False, default=0)
    interest_rate = Column(Numeric(5, 2), nullable=False, default=0)  # % per month
    last_payment_date = Column(DateTime)
    
    farmer = relationship("Farmer", back_populates="account")

class InterestCharge(BaseModel):
    __tablename__ = "interest_charges"
    
    farmer_id = Column(Integer, ForeignKey('farmers.id'), nullable=False, index=True)
    bill_id = Column(Integer, ForeignKey('bills.id'))
    principal_amount = Column(Numeric(12, 2), nullable=False)
    interest_amount = Column(Numeric(12, 2), nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)
    charge_date = Column(DateTime, nullable=False, default=func.now())
    
    farmer = relationship("Farmer", back_populates="interest_charges")
