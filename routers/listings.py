# routers/listings.py

"""
Products and product requests share one lifecycle and one policy, so both
routers are built from the same factory.
"""

from typing import List, Optional, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from core.store import DataStore, get_store
from dependencies.auth import get_current_principal, get_principal, requires_kind
from models.enums import EntityKind, PrincipalKind
from models.listing import (
    ListingStatusChange,
    ProductCreate,
    ProductRead,
    ProductRequestCreate,
    ProductRequestRead,
    ProductRequestUpdate,
    ProductUpdate,
    TransitionResult,
)
from models.principal import Principal
from services.marketplace import (
    create_listing,
    get_record,
    list_own_listings,
    list_records,
    transition,
    update_fields,
)


def build_listing_router(
    kind: EntityKind,
    prefix: str,
    tag: str,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    read_model: Type[BaseModel],
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])
    label = kind.value

    # -------------------------------------------------
    # Catalog (anonymous allowed)
    # -------------------------------------------------
    @router.get("", response_model=List[read_model], summary=f"List {label}s in scope")
    def list_listings(
        status: Optional[str] = Query(None, description="active | done | deleted | all"),
        search: Optional[str] = Query(None),
        category: Optional[str] = Query(None),
        country: Optional[str] = Query(None),
        limit: Optional[int] = Query(None, ge=1, le=500),
        principal: Principal = Depends(get_principal),
        store: DataStore = Depends(get_store),
    ):
        return list_records(
            store,
            principal,
            kind,
            status=status,
            search=search,
            category=category,
            country=country,
            limit=limit,
        )

    @router.get("/mine", response_model=List[read_model], summary=f"Own {label}s, every status")
    def list_mine(
        principal: Principal = Depends(requires_kind(PrincipalKind.user)),
        store: DataStore = Depends(get_store),
    ):
        return list_own_listings(store, principal, kind)

    @router.get("/{record_id}", response_model=read_model, summary=f"Get {label}")
    def read_listing(
        record_id: str,
        principal: Principal = Depends(get_principal),
        store: DataStore = Depends(get_store),
    ):
        return get_record(store, principal, kind, record_id)

    # -------------------------------------------------
    # Writes
    # -------------------------------------------------
    @router.post("", response_model=read_model, status_code=201, summary=f"Post a {label}")
    def create(
        payload: create_model,
        principal: Principal = Depends(get_current_principal),
        store: DataStore = Depends(get_store),
    ):
        return create_listing(store, principal, kind, payload.model_dump(mode="json", exclude_none=True))

    @router.patch("/{record_id}", response_model=read_model, summary=f"Edit {label} (owner or admin)")
    def edit(
        record_id: str,
        payload: update_model,
        principal: Principal = Depends(get_current_principal),
        store: DataStore = Depends(get_store),
    ):
        changes = payload.model_dump(mode="json", exclude_none=True)
        return update_fields(store, principal, kind, record_id, changes)

    @router.post("/{record_id}/status", response_model=TransitionResult, summary=f"Mark {label} done / deleted")
    def change_status(
        record_id: str,
        payload: ListingStatusChange,
        principal: Principal = Depends(get_current_principal),
        store: DataStore = Depends(get_store),
    ):
        return transition(store, principal, kind, record_id, payload.status.value)

    return router


products_router = build_listing_router(
    EntityKind.product,
    prefix="/products",
    tag="Products",
    create_model=ProductCreate,
    update_model=ProductUpdate,
    read_model=ProductRead,
)

requests_router = build_listing_router(
    EntityKind.request,
    prefix="/requests",
    tag="Product Requests",
    create_model=ProductRequestCreate,
    update_model=ProductRequestUpdate,
    read_model=ProductRequestRead,
)
