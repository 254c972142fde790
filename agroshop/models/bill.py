from sqlalchemy import Column, Date, Enum, Numeric, String, ForeignKey, Integer
from sqlalchemy.orm import relationship
from agroshop.models.base import BaseModel

PAYMENT_STATUSES = ('paid', 'partial', 'pending')

class Bill(BaseModel):
    __tablename__ = "bills"
    
    bill_number = Column(String(40), unique=True, nullable=False, index=True)
    farmer_id = Column(Integer, ForeignKey('farmers.id'), nullable=False, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    final_amount = Column(Numeric(12, 2), nullable=False)
    payment_status = Column(
        Enum(*PAYMENT_STATUSES, name='payment_status'), nullable=False, default='pending'
    )
    due_date = Column(Date)
    created_by = Column(Integer, ForeignKey('users.id'))
    
    farmer = relationship("Farmer")
    bill_items = relationship(
        "BillItem", back_populates="bill", cascade="all, delete-orphan",
        order_by="BillItem.id"
    )

class BillItem(BaseModel):
    __tablename__ = "bill_items"
    
    bill_id = Column(Integer, ForeignKey('bills.id'), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    quantity = Column(Numeric(12, 2), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    
    bill = relationship("Bill", back_populates="bill_items")
    product = relationship("Product")
