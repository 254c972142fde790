from sqlalchemy import Column, String, Integer, Enum, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from agroshop.models.base import BaseModel

PRODUCT_TYPES = ('insecticide', 'pesticide', 'fertilizer')

class Product(BaseModel):
    __tablename__ = "products"
    
    name = Column(String(100), nullable=False, index=True)
    type = Column(Enum(*PRODUCT_TYPES, name='product_type'), nullable=False)
    brand = Column(String(100))
    description = Column(String)
    price_per_unit = Column(Numeric(12, 2), nullable=False)
    unit = Column(String(20), nullable=False, default='kg')
    stock_quantity = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=10)
    created_by = Column(Integer, ForeignKey('users.id'))
    
    creator = relationship("User")
