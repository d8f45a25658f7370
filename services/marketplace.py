# services/marketplace.py

"""
Marketplace operations: profiles, products and product requests.

Every function takes the acting Principal explicitly and a DataStore; none
of them read ambient session state. Authorization always comes from
core.policy / core.lifecycle, and every mutation is re-validated by the
datastore through a conditional update.
"""

from typing import Any, Dict, List, Optional

from core.countries import country_variants
from core.entities import schema_for, status_of
from core.errors import Forbidden, InvalidInput, MarketplaceError, NotFound
from core.lifecycle import allowed_targets, check_transition
from core.logging_config import logger
from core.policy import (
    check_create_listing,
    check_read,
    check_write,
    default_status_filter,
    list_filter,
    require_staff,
    status_filter,
    write_scope,
)
from core.predicates import Predicate
from core.store import DataStore
from core.utils import drop_none, utcnow_iso
from models.enums import ApprovalStatus, EntityKind, ListingStatus
from models.principal import Principal


PROFILES_TABLE = schema_for(EntityKind.profile).table

SEARCH_FIELDS = {
    EntityKind.profile: ("full_name", "company_name", "email"),
    EntityKind.product: ("name", "description"),
    EntityKind.request: ("title", "description"),
}

STATUS_ALL = "all"


# ============================================================
# Reads
# ============================================================

def _by_id(kind: EntityKind, record_id: str) -> Predicate:
    return Predicate.eq(schema_for(kind).id_field, record_id)


def get_record(store: DataStore, principal: Principal, kind: EntityKind, record_id: str) -> Dict[str, Any]:
    kind = EntityKind(kind)
    record = store.fetch_one(schema_for(kind).table, _by_id(kind, record_id))
    return check_read(principal, kind, record)


def build_list_predicate(
    principal: Principal,
    kind: EntityKind,
    *,
    status: Optional[str] = None,
    search: Optional[str] = None,
    category: Optional[str] = None,
    country: Optional[str] = None,
) -> Predicate:
    """
    Scope from the policy engine AND the caller's filters.

    status=None   -> the principal's default status view (if any)
    status="all"  -> no status narrowing
    status="a,b"  -> those statuses
    """
    kind = EntityKind(kind)
    schema = schema_for(kind)

    predicate = list_filter(principal, kind)

    if status is None:
        default = default_status_filter(principal, kind)
        if default is not None:
            predicate = predicate & default
    elif status != STATUS_ALL:
        wanted = [s.strip() for s in status.split(",") if s.strip()]
        predicate = predicate & status_filter(kind, wanted)

    if search and search.strip():
        term = search.strip()
        predicate = predicate & Predicate.any_of(
            *[Predicate.contains(f, term) for f in SEARCH_FIELDS[kind]]
        )

    if category and kind.is_listing:
        predicate = predicate & Predicate.eq("category", category)

    if country:
        predicate = predicate & Predicate.one_of(schema.country_field, country_variants(country))

    return predicate


def list_records(
    store: DataStore,
    principal: Principal,
    kind: EntityKind,
    *,
    status: Optional[str] = None,
    search: Optional[str] = None,
    category: Optional[str] = None,
    country: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    kind = EntityKind(kind)
    predicate = build_list_predicate(
        principal, kind, status=status, search=search, category=category, country=country
    )
    return store.fetch_many(schema_for(kind).table, predicate, limit=limit)


def list_own_listings(store: DataStore, principal: Principal, kind: EntityKind) -> List[Dict[str, Any]]:
    """A member's dashboard: their listings in every status."""
    kind = EntityKind(kind)
    if not principal.is_user:
        raise Forbidden("Only marketplace members have listings")
    schema = schema_for(kind)
    return store.fetch_many(schema.table, Predicate.eq(schema.owner_field, principal.id))


# ============================================================
# Profiles
# ============================================================

def get_own_profile(store: DataStore, principal: Principal) -> Dict[str, Any]:
    if not principal.is_user:
        raise NotFound("Profile not found")
    return get_record(store, principal, EntityKind.profile, principal.id)


def create_profile(store: DataStore, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """New registrations always start pending, whatever the caller sent."""
    record = {
        **data,
        "user_id": user_id,
        "approval_status": ApprovalStatus.pending.value,
        "created_at": utcnow_iso(),
    }
    profile = store.insert(PROFILES_TABLE, record)
    logger.info(f"Profile created for user {user_id} (pending approval)")
    return profile


def ensure_profile(store: DataStore, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    existing = store.fetch_one(PROFILES_TABLE, Predicate.eq("user_id", user_id))
    if existing:
        return existing
    return create_profile(store, user_id, data)


# ============================================================
# Listings
# ============================================================

def create_listing(
    store: DataStore,
    principal: Principal,
    kind: EntityKind,
    data: Dict[str, Any],
) -> Dict[str, Any]:
    """
    The owner's approval is re-read here, at write time. What the client saw
    when it rendered the form is irrelevant: approval can be revoked between
    page load and submit.
    """
    kind = EntityKind(kind)
    if not kind.is_listing:
        raise ValueError(f"{kind} is not a listing kind")

    if not principal.is_user:
        raise Forbidden("Only marketplace members can post listings")

    profile = store.fetch_one(PROFILES_TABLE, Predicate.eq("user_id", principal.id))
    check_create_listing(principal, profile)

    schema = schema_for(kind)
    record = {
        **data,
        schema.owner_field: principal.id,
        schema.status_field: ListingStatus.active.value,
        "created_at": utcnow_iso(),
    }
    created = store.insert(schema.table, record)
    logger.info(f"User {principal.id} created {kind.value} {created.get('id')}")
    return created


# ============================================================
# Field edits (never status)
# ============================================================

def _check_budget_range(merged: Dict[str, Any]) -> None:
    """A partial PATCH is checked against the stored row, not just the payload."""
    low = merged.get("budget_min")
    high = merged.get("budget_max")
    if low is not None and high is not None and float(low) > float(high):
        raise InvalidInput("budget_min cannot exceed budget_max")



def update_fields(
    store: DataStore,
    principal: Principal,
    kind: EntityKind,
    record_id: str,
    changes: Dict[str, Any],
) -> Dict[str, Any]:
    kind = EntityKind(kind)
    schema = schema_for(kind)

    record = get_record(store, principal, kind, record_id)

    changes = drop_none(changes)
    if not changes:
        return record

    if schema.status_field in changes:
        raise Forbidden("Status changes go through the status endpoint")

    check_write(principal, kind, record, changes)

    if kind == EntityKind.request:
        _check_budget_range({**record, **changes})

    patch = {**changes, "updated_at": utcnow_iso()}
    affected = store.conditional_update(
        schema.table,
        _by_id(kind, record_id) & write_scope(principal, kind),
        patch,
    )
    if affected == 0:
        raise NotFound(f"{kind.value.capitalize()} not found")

    logger.info(f"{principal.kind.value} {principal.id} edited {kind.value} {record_id}: {sorted(changes)}")
    return {**record, **patch}


# ============================================================
# Status transitions
# ============================================================

def transition(
    store: DataStore,
    principal: Principal,
    kind: EntityKind,
    record_id: str,
    to_status: str,
) -> Dict[str, Any]:
    """
    Move a profile or listing along the lifecycle table.

    The UPDATE is conditioned on id, the status we read, and the principal's
    write scope. If another writer changed the row first the update touches
    nothing and we report applied=False with whatever status the row has now.
    """
    kind = EntityKind(kind)
    schema = schema_for(kind)
    to_status = str(to_status)

    record = get_record(store, principal, kind, record_id)
    from_status = str(status_of(kind, record))

    check_transition(principal, kind, record, from_status, to_status)

    expected = (
        _by_id(kind, record_id)
        & Predicate.eq(schema.status_field, from_status)
        & write_scope(principal, kind)
    )
    patch = {schema.status_field: to_status, "updated_at": utcnow_iso()}
    affected = store.conditional_update(schema.table, expected, patch)
    applied = affected > 0

    if applied:
        current = {**record, **patch}
    else:
        current = store.fetch_one(schema.table, _by_id(kind, record_id)) or record

    logger.info(
        f"{principal.kind.value} {principal.id} moved {kind.value} {record_id} "
        f"{from_status} -> {to_status} (applied={applied})"
    )

    if applied and kind == EntityKind.profile and to_status == ApprovalStatus.deleted.value:
        hide_member_listings(store, record_id)

    return {
        "id": record_id,
        "status": str(status_of(kind, current)),
        "applied": applied,
        "allowed_next": allowed_targets(principal, kind, current),
    }


def hide_member_listings(store: DataStore, user_id: str) -> Dict[str, int]:
    """
    Soft-delete a deleted member's live listings so they leave the catalog.
    Failures are logged; the profile deletion has already been applied.
    """
    hidden = {}
    for kind in (EntityKind.product, EntityKind.request):
        schema = schema_for(kind)
        live = Predicate.eq(schema.owner_field, user_id) & status_filter(kind, [ListingStatus.active.value])
        try:
            hidden[schema.table] = store.conditional_update(
                schema.table,
                live,
                {schema.status_field: ListingStatus.deleted.value, "updated_at": utcnow_iso()},
            )
        except MarketplaceError as e:
            logger.warning(f"Failed to hide {schema.table} for deleted user {user_id}: {e.message}")
            hidden[schema.table] = 0

    logger.info(f"Hid listings for deleted user {user_id}: {hidden}")
    return hidden


# ============================================================
# Back-office dashboard
# ============================================================

def dashboard_stats(store: DataStore, principal: Principal) -> Dict[str, Any]:
    """Counts restricted to what the caller may see."""
    require_staff(principal)

    profiles = schema_for(EntityKind.profile)
    profile_scope = list_filter(principal, EntityKind.profile)

    stats = {
        "profiles": {
            s.value: store.count(profiles.table, profile_scope & status_filter(EntityKind.profile, [s.value]))
            for s in ApprovalStatus
        },
    }

    for kind in (EntityKind.product, EntityKind.request):
        schema = schema_for(kind)
        scope = list_filter(principal, kind)
        stats[schema.table] = {
            s.value: store.count(schema.table, scope & status_filter(kind, [s.value]))
            for s in ListingStatus
        }

    return stats
