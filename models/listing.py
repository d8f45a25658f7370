# models/listing.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import ListingStatus, Urgency


# -------------------------------------------------
# Products (posted by exporters)
# -------------------------------------------------
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=10, max_length=1000)
    category: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    unit: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    currency: str = Field(..., min_length=1)
    country_origin: str = Field(..., min_length=1)
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    category: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    unit: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    currency: Optional[str] = None
    country_origin: Optional[str] = None
    image_url: Optional[str] = None


class ProductRead(BaseModel):
    id: str
    exporter_id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    country_origin: Optional[str] = None
    image_url: Optional[str] = None
    status: ListingStatus = ListingStatus.active
    created_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    def parse_status(cls, v):
        return ListingStatus.parse(v) if isinstance(v, str) else v


# -------------------------------------------------
# Product requests (posted by buyers)
# -------------------------------------------------
class _BudgetCheck(BaseModel):

    @model_validator(mode="after")
    def check_budget_range(self):
        low = getattr(self, "budget_min", None)
        high = getattr(self, "budget_max", None)
        if low is not None and high is not None and low > high:
            raise ValueError("budget_min cannot exceed budget_max")
        return self


class ProductRequestCreate(_BudgetCheck):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=20, max_length=1000)
    category: str = Field(..., min_length=1)
    quantity: Optional[int] = Field(None, ge=1)
    unit: Optional[str] = None
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    currency: str = Field(..., min_length=1)
    target_country: Optional[str] = None
    urgency: Urgency = Urgency.medium
    expires_at: Optional[datetime] = None


class ProductRequestUpdate(_BudgetCheck):
    title: Optional[str] = Field(None, min_length=5, max_length=100)
    description: Optional[str] = Field(None, min_length=20, max_length=1000)
    category: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    unit: Optional[str] = None
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    target_country: Optional[str] = None
    urgency: Optional[Urgency] = None
    expires_at: Optional[datetime] = None


class ProductRequestRead(BaseModel):
    id: str
    requester_id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    currency: Optional[str] = None
    target_country: Optional[str] = None
    urgency: Optional[str] = None
    status: ListingStatus = ListingStatus.active
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    def parse_status(cls, v):
        return ListingStatus.parse(v) if isinstance(v, str) else v


class ListingStatusChange(BaseModel):
    status: ListingStatus


class TransitionResult(BaseModel):
    """
    applied=False means the row no longer matched (another writer got there
    first). That is a completed outcome, not an error.
    """
    id: str
    status: str
    applied: bool
    allowed_next: List[str] = []
