# routers/profiles.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.store import DataStore, get_store
from dependencies.auth import get_current_principal, requires_kind
from models.enums import EntityKind, PrincipalKind
from models.listing import TransitionResult
from models.principal import Principal
from models.profile import ProfileRead, ProfileStatusChange, ProfileUpdate
from services.marketplace import (
    get_own_profile,
    get_record,
    list_records,
    transition,
    update_fields,
)


router = APIRouter(
    prefix="/profiles",
    tags=["Profiles"],
)


# -----------------------------------------------------
# Self-service
# -----------------------------------------------------
@router.get("/me", response_model=ProfileRead, summary="Current member's profile")
def read_own_profile(
    principal: Principal = Depends(requires_kind(PrincipalKind.user)),
    store: DataStore = Depends(get_store),
):
    return get_own_profile(store, principal)


@router.patch("/me", response_model=ProfileRead, summary="Edit own profile")
def edit_own_profile(
    payload: ProfileUpdate,
    principal: Principal = Depends(requires_kind(PrincipalKind.user)),
    store: DataStore = Depends(get_store),
):
    changes = payload.model_dump(mode="json", exclude_none=True)
    return update_fields(store, principal, EntityKind.profile, principal.id, changes)


# -----------------------------------------------------
# Back-office views (scope comes from the policy engine)
# -----------------------------------------------------
@router.get("", response_model=List[ProfileRead], summary="List profiles in scope")
def list_profiles(
    status: Optional[str] = Query(None, description="pending | approved | rejected | deleted | all"),
    search: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    principal: Principal = Depends(get_current_principal),
    store: DataStore = Depends(get_store),
):
    """
    Sub-admins default to the pending approval queue for their countries.
    Passing `status` widens the status view, never the country scope.
    """
    return list_records(
        store,
        principal,
        EntityKind.profile,
        status=status,
        search=search,
        country=country,
        limit=limit,
    )


@router.get("/{user_id}", response_model=ProfileRead, summary="Get profile")
def read_profile(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    store: DataStore = Depends(get_store),
):
    return get_record(store, principal, EntityKind.profile, user_id)


@router.patch("/{user_id}", response_model=ProfileRead, summary="Edit profile (owner or admin)")
def edit_profile(
    user_id: str,
    payload: ProfileUpdate,
    principal: Principal = Depends(get_current_principal),
    store: DataStore = Depends(get_store),
):
    changes = payload.model_dump(mode="json", exclude_none=True)
    return update_fields(store, principal, EntityKind.profile, user_id, changes)


@router.post("/{user_id}/status", response_model=TransitionResult, summary="Approve / reject / delete")
def change_profile_status(
    user_id: str,
    payload: ProfileStatusChange,
    principal: Principal = Depends(get_current_principal),
    store: DataStore = Depends(get_store),
):
    return transition(store, principal, EntityKind.profile, user_id, payload.status.value)
