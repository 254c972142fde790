from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from agroshop.models.base import BaseModel

class Farmer(BaseModel):
    __tablename__ = "farmers"
    
    name = Column(String(100), nullable=False, index=True)
    phone = Column(String(20))
    address = Column(String)
    village = Column(String(100))
    district = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(10))
    aadhar_number = Column(String(20))
    created_by = Column(Integer, ForeignKey('users.id'))
    
    account = relationship(
        "CustomerAccount", uselist=False, back_populates="farmer",
        cascade="all, delete-orphan"
    )
    interest_charges = relationship(
        "InterestCharge", back_populates="farmer", cascade="all, delete-orphan"
    )
