"""
Booking model and schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, Literal
from datetime import datetime
from app.utils.helpers import canonical_vehicle_number, is_valid_object_id, to_naive_utc

BOOKING_STATUSES = ("pending", "approved", "rejected", "completed")


class CustomerDetails(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: EmailStr

class VehicleSnapshot(BaseModel):
    vehicleId: str
    type: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    driver: str = Field(..., min_length=1)

    @field_validator("vehicleId")
    @classmethod
    def _check_vehicle_id(cls, v: str) -> str:
        if not is_valid_object_id(v):
            raise ValueError("vehicleId must be a valid ObjectId")
        return v

    @field_validator("number")
    @classmethod
    def _canonical_number(cls, v: str) -> str:
        return canonical_vehicle_number(v)

class TripDetails(BaseModel):
    model_config = {"populate_by_name": True}

    from_: str = Field(..., alias="from", min_length=1)
    to: str = Field(..., min_length=1)
    startDate: datetime
    endDate: datetime
    totalDays: Optional[int] = Field(None, ge=1)
    purpose: str = Field(..., min_length=1)

    @field_validator("startDate", "endDate", mode="after")
    @classmethod
    def _naive_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def _compute_total_days(self):
        if self.endDate < self.startDate:
            raise ValueError("endDate must not be before startDate")
        if self.totalDays is None:
            # Inclusive calendar days: same-day trip counts as one
            self.totalDays = (self.endDate.date() - self.startDate.date()).days + 1
        return self

class PaymentDetails(BaseModel):
    total: float = Field(..., gt=0)
    advance: float = Field(0, ge=0)
    balance: Optional[float] = Field(None, ge=0)
    status: Literal["pending", "partial", "completed", "overdue"] = "pending"
    rateType: Literal["km_wise", "lumpsum", "daily_wages"] = "km_wise"

    @model_validator(mode="after")
    def _default_balance(self):
        if self.advance > self.total:
            raise ValueError("advance cannot exceed total")
        if self.balance is None:
            self.balance = self.total - self.advance
        return self


class BookingCreate(BaseModel):
    """Payload for both creating and fully replacing a booking"""
    customer: CustomerDetails
    vehicle: VehicleSnapshot
    trip: TripDetails
    payment: PaymentDetails

class BookingStatusUpdate(BaseModel):
    # Checked against BOOKING_STATUSES by the lifecycle manager so a bad
    # value reports "Invalid status" rather than a schema error
    status: Optional[str] = None
