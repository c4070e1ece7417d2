"""
Team member model and schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional, Literal

MemberStatus = Literal["active", "inactive"]


class TeamMemberBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str = ""
    role: str = Field(..., min_length=1, description="Free text, e.g. manager, dispatcher")
    permissions: List[str] = Field(default=[])
    status: MemberStatus = "active"

class TeamMemberCreate(TeamMemberBase):
    pass

class TeamMemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[str] = Field(None, min_length=1)
    permissions: Optional[List[str]] = None
    status: Optional[MemberStatus] = None

    @field_validator("*", mode="before")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v
