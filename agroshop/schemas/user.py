from typing import Optional, Literal
from pydantic import BaseModel, EmailStr
from agroshop.schemas.base import TimestampSchema

Role = Literal['admin', 'staff']

class StaffRegistration(BaseModel):
    username: str
    email: EmailStr
    password: str
    full_name: Optional[str] = None
    phone_number: Optional[str] = None

class StaffCreate(StaffRegistration):
    role: Role = "staff"

class StaffProfileUpdate(BaseModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    password: Optional[str] = None

class StaffAccessUpdate(BaseModel):
    role: Optional[Role] = None
    is_active: Optional[bool] = None

class StaffUser(TimestampSchema):
    id: int
    username: str
    email: EmailStr
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    role: Role
    is_active: bool

class StaffSession(BaseModel):
    user: StaffUser
    access_token: str
    token_type: str = "bearer"

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenData(BaseModel):
    username: Optional[str] = None
