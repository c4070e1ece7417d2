"""
Vehicle model and schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
from app.utils.helpers import canonical_vehicle_number, is_valid_object_id, to_naive_utc

VehicleType = Literal["bus", "car", "tempo", "mini-bus"]
VehicleStatus = Literal["available", "booked", "maintenance"]
Ownership = Literal["own", "vendor", "leased"]


class _UTCDates(BaseModel):
    """Stores every datetime field as naive UTC"""

    @field_validator("*", mode="after")
    @classmethod
    def _naive_utc(cls, v):
        return to_naive_utc(v) if isinstance(v, datetime) else v


class Driver(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    license: Optional[str] = None
    address: str = ""

class NumberedDocument(_UTCDates):
    number: Optional[str] = None
    expiry: Optional[datetime] = None

class Compliance(_UTCDates):
    rcExpiry: Optional[datetime] = None
    insurance: NumberedDocument = Field(default_factory=NumberedDocument)
    fitnessExpiry: Optional[datetime] = None
    permit: NumberedDocument = Field(default_factory=NumberedDocument)
    pocExpiry: Optional[datetime] = None

class ComplianceDocuments(BaseModel):
    rc: str = ""
    insurance: str = ""
    fitness: str = ""
    permit: str = ""
    poc: str = ""

class VendorLink(BaseModel):
    vendorId: Optional[str] = None
    rate: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("vendorId")
    @classmethod
    def _check_vendor_id(cls, v):
        if v is not None and not is_valid_object_id(v):
            raise ValueError("vendorId must be a valid ObjectId")
        return v

class VehicleStats(BaseModel):
    # Not accumulated by any operation; written only through create/update
    totalTrips: int = Field(0, ge=0)
    totalKms: float = Field(0, ge=0)
    revenue: float = Field(0, ge=0)


class VehicleBase(BaseModel):
    number: str = Field(..., min_length=1, description="Registration number, stored upper-case")
    type: VehicleType
    model: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    status: VehicleStatus = "available"
    driver: Driver = Field(default_factory=Driver)
    compliance: Compliance = Field(default_factory=Compliance)
    complianceDocuments: ComplianceDocuments = Field(default_factory=ComplianceDocuments)
    ownership: Ownership = "own"
    vendor: VendorLink = Field(default_factory=VendorLink)
    stats: VehicleStats = Field(default_factory=VehicleStats)
    image: Optional[str] = None

    @field_validator("number")
    @classmethod
    def _canonical_number(cls, v: str) -> str:
        v = canonical_vehicle_number(v)
        if not v:
            raise ValueError("number must not be blank")
        return v

class VehicleCreate(VehicleBase):
    pass


class DriverUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    license: Optional[str] = None
    address: Optional[str] = None

class ComplianceUpdate(_UTCDates):
    rcExpiry: Optional[datetime] = None
    insurance: Optional[NumberedDocument] = None
    fitnessExpiry: Optional[datetime] = None
    permit: Optional[NumberedDocument] = None
    pocExpiry: Optional[datetime] = None

class ComplianceDocumentsUpdate(BaseModel):
    rc: Optional[str] = None
    insurance: Optional[str] = None
    fitness: Optional[str] = None
    permit: Optional[str] = None
    poc: Optional[str] = None

class VehicleStatsUpdate(BaseModel):
    totalTrips: Optional[int] = Field(None, ge=0)
    totalKms: Optional[float] = Field(None, ge=0)
    revenue: Optional[float] = Field(None, ge=0)

class VehicleUpdate(BaseModel):
    number: Optional[str] = Field(None, min_length=1)
    type: Optional[VehicleType] = None
    model: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    status: Optional[VehicleStatus] = None
    driver: Optional[DriverUpdate] = None
    compliance: Optional[ComplianceUpdate] = None
    complianceDocuments: Optional[ComplianceDocumentsUpdate] = None
    ownership: Optional[Ownership] = None
    vendor: Optional[VendorLink] = None
    stats: Optional[VehicleStatsUpdate] = None
    image: Optional[str] = None

    @field_validator("number")
    @classmethod
    def _canonical_number(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = canonical_vehicle_number(v)
        if not v:
            raise ValueError("number must not be blank")
        return v

    @field_validator(
        "number", "type", "status", "driver", "compliance",
        "complianceDocuments", "ownership", "vendor", "stats",
        mode="before",
    )
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v
