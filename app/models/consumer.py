"""
Consumer (customer) model and schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Literal

ConsumerType = Literal["regular", "corporate", "new"]


class ConsumerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=20)
    email: EmailStr
    address: str = ""
    company: str = ""
    type: ConsumerType = "new"

class ConsumerCreate(ConsumerBase):
    pass

class ConsumerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    company: Optional[str] = None
    type: Optional[ConsumerType] = None

    # Every consumer field is required or defaulted on create, so none may be cleared
    @field_validator("*", mode="before")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

# Running totals are declared on every consumer but no operation maintains them
RUNNING_TOTALS = {
    "totalBookings": 0,
    "totalAmount": 0,
    "outstandingAmount": 0,
}
