# models/sub_admin.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


def _clean_countries(v):
    if not isinstance(v, list):
        return v
    seen = []
    for c in v:
        c = str(c).strip()
        if c and c not in seen:
            seen.append(c)
    return seen


class SubAdminCreate(BaseModel):
    """Admin creates a sub-admin with a country assignment."""
    full_name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=3)
    email: EmailStr
    password: str = Field(..., min_length=6)
    assigned_countries: List[str] = Field(..., min_length=1)

    @field_validator("assigned_countries", mode="before")
    def dedupe_countries(cls, v):
        return _clean_countries(v)


class SubAdminCountriesUpdate(BaseModel):
    assigned_countries: List[str] = Field(..., min_length=1)

    @field_validator("assigned_countries", mode="before")
    def dedupe_countries(cls, v):
        return _clean_countries(v)


class SubAdminRead(BaseModel):
    """Never exposes password_hash."""
    id: str
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    created_by: Optional[str] = None
    assigned_countries: List[str] = []
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
