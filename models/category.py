# models/category.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryRead(BaseModel):
    """Row from the categories table."""
    id: str
    name: str
    created_by: Optional[str] = None
    is_approved: bool = False

    model_config = ConfigDict(from_attributes=True)
