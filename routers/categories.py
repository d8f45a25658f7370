# routers/categories.py

from typing import List

from fastapi import APIRouter, Depends, Query

from core.store import DataStore, get_store
from dependencies.auth import get_current_principal, get_principal, requires_kind
from models.category import CategoryCreate, CategoryRead
from models.enums import PrincipalKind
from models.principal import Principal
from services.categories import approve_category, create_category, list_categories


router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


@router.get("", response_model=List[CategoryRead], summary="List categories")
def list_all(
    include_pending: bool = Query(False, description="Admins only"),
    principal: Principal = Depends(get_principal),
    store: DataStore = Depends(get_store),
):
    return list_categories(store, principal, include_pending=include_pending)


@router.post("", response_model=CategoryRead, status_code=201, summary="Propose a category")
def propose(
    payload: CategoryCreate,
    principal: Principal = Depends(get_current_principal),
    store: DataStore = Depends(get_store),
):
    return create_category(store, principal, payload.name)


@router.post("/{category_id}/approve", response_model=CategoryRead, summary="Admin: approve category")
def approve(
    category_id: str,
    principal: Principal = Depends(requires_kind(PrincipalKind.admin)),
    store: DataStore = Depends(get_store),
):
    return approve_category(store, principal, category_id)
