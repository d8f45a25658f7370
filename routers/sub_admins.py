# routers/sub_admins.py

from typing import List

from fastapi import APIRouter, Depends

from core.store import DataStore, get_store
from dependencies.auth import requires_kind
from models.enums import PrincipalKind
from models.principal import Principal
from models.sub_admin import SubAdminCountriesUpdate, SubAdminCreate, SubAdminRead
from services.staff import (
    create_sub_admin,
    deactivate_sub_admin,
    list_sub_admins,
    update_sub_admin_countries,
)


router = APIRouter(
    prefix="/sub-admins",
    tags=["Sub-Admins"],
)

admin_only = requires_kind(PrincipalKind.admin)


@router.get("", response_model=List[SubAdminRead], summary="Admin: list sub-admins")
def list_all(
    principal: Principal = Depends(admin_only),
    store: DataStore = Depends(get_store),
):
    return list_sub_admins(store, principal)


@router.post("", response_model=SubAdminRead, status_code=201, summary="Admin: create sub-admin")
def create(
    payload: SubAdminCreate,
    principal: Principal = Depends(admin_only),
    store: DataStore = Depends(get_store),
):
    return create_sub_admin(store, principal, payload.model_dump())


@router.patch("/{sub_admin_id}/countries", response_model=SubAdminRead, summary="Admin: reassign countries")
def reassign_countries(
    sub_admin_id: str,
    payload: SubAdminCountriesUpdate,
    principal: Principal = Depends(admin_only),
    store: DataStore = Depends(get_store),
):
    """Applies from the sub-admin's next login."""
    return update_sub_admin_countries(store, principal, sub_admin_id, payload.assigned_countries)


@router.delete("/{sub_admin_id}", summary="Admin: deactivate sub-admin")
def deactivate(
    sub_admin_id: str,
    principal: Principal = Depends(admin_only),
    store: DataStore = Depends(get_store),
):
    return deactivate_sub_admin(store, principal, sub_admin_id)
