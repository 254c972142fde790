from sqlalchemy import Column, DateTime, Enum, Numeric, String, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from agroshop.models.base import BaseModel

PAYMENT_METHODS = ('cash', 'bank_transfer', 'cheque', 'card', 'upi')

class Payment(BaseModel):
    __tablename__ = "payments"
    
    bill_id = Column(Integer, ForeignKey('bills.id'), index=True)
    farmer_id = Column(Integer, ForeignKey('farmers.id'), nullable=False, index=True)
    amount_paid = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(Enum(*PAYMENT_METHODS, name='payment_methods'), nullable=False, default='cash')
    payment_date = Column(DateTime, nullable=False, default=func.now())
    notes = Column(String)
    recorded_by = Column(Integer, ForeignKey('users.id'))
    
    farmer = relationship("Farmer")
    bill = relationship("Bill")
