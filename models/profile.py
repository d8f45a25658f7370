# models/profile.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .enums import ApprovalStatus, UserType


# -------------------------------------------------
# Shared descriptive fields
# -------------------------------------------------
class ProfileBase(BaseModel):
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    country: Optional[str] = Field(None, description="Country name or two-letter code")
    user_type: UserType = UserType.buyer


# -------------------------------------------------
# Created at signup (status is always pending)
# -------------------------------------------------
class ProfileCreate(ProfileBase):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    country: str = Field(..., min_length=1)


# -------------------------------------------------
# Self-service / admin edit (never the status)
# -------------------------------------------------
class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    user_type: Optional[UserType] = None


class ProfileRead(ProfileBase):
    user_id: str
    approval_status: ApprovalStatus = ApprovalStatus.pending
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("user_id", mode="before")
    def user_id_to_str(cls, v):
        return str(v)


class ProfileStatusChange(BaseModel):
    status: ApprovalStatus
