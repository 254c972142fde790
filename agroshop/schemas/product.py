from typing import Optional, Literal
from pydantic import Field, computed_field
from agroshop.schemas.base import BaseSchema, TimestampSchema

ProductType = Literal['insecticide', 'pesticide', 'fertilizer']

class ProductBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    type: ProductType
    brand: Optional[str] = None
    description: Optional[str] = None
    price_per_unit: float = Field(..., ge=0, allow_inf_nan=False)
    unit: str = "kg"
    stock_quantity: int = Field(0, ge=0)
    reorder_level: int = Field(10, ge=0)

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[ProductType] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    price_per_unit: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    unit: Optional[str] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    reorder_level: Optional[int] = Field(None, ge=0)

class Product(TimestampSchema, ProductBase):
    id: int

    @computed_field
    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.reorder_level
