# core/policy.py

"""
Visibility / authorization policy engine.

One place decides, for every role, which profiles and listings a principal
may read, list and change. Route handlers and services never re-implement
country or status filtering; they ask this module.

    can_read(principal, kind, record)           -> bool
    can_write(principal, kind, record, change)  -> bool
    can_create_listing(principal, profile)      -> bool
    list_filter(principal, kind)                -> Predicate

list_filter() is the enforcement boundary for list views. Callers AND their
own search / category / status filters onto it; nothing a caller adds can
widen what it admits.
"""

from typing import Any, Dict, Iterable, Optional

from core.countries import expand_variants, is_covered
from core.entities import country_of, schema_for, status_of
from core.errors import Forbidden, NotFound
from core.lifecycle import can_transition, principal_owns
from core.predicates import Predicate
from models.enums import (
    ApprovalStatus,
    EntityKind,
    LEGACY_ACTIVE_STATUSES,
    ListingStatus,
)
from models.principal import Principal


# Columns nobody may change through a field edit
IMMUTABLE_FIELDS = {
    EntityKind.profile: {"id", "user_id", "created_at", "is_admin"},
    EntityKind.product: {"id", "exporter_id", "created_at"},
    EntityKind.request: {"id", "requester_id", "created_at"},
}


# ============================================================
# Status predicates
# ============================================================

def status_values(kind: EntityKind, statuses: Iterable[str]) -> set:
    """Stored values matching the given statuses (legacy aliases included)."""
    values = set()
    for status in statuses:
        values.add(str(status))
        if EntityKind(kind).is_listing and str(status) == ListingStatus.active.value:
            values.update(LEGACY_ACTIVE_STATUSES)
    return values


def status_filter(kind: EntityKind, statuses: Iterable[str]) -> Predicate:
    schema = schema_for(kind)
    return Predicate.one_of(schema.status_field, status_values(kind, statuses))


def _is_public_listing(kind: EntityKind, record: Dict[str, Any]) -> bool:
    status = status_of(kind, record)
    return status in status_values(kind, [ListingStatus.active.value])


# ============================================================
# Read
# ============================================================

def can_read(principal: Principal, kind: EntityKind, record: Dict[str, Any]) -> bool:
    kind = EntityKind(kind)

    if principal.is_admin:
        return True

    if principal.is_sub_admin:
        return is_covered(country_of(kind, record), principal.assigned_countries)

    if kind.is_listing:
        if _is_public_listing(kind, record):
            return True
        return principal_owns(principal, kind, record)

    # Profiles: only your own
    return principal_owns(principal, kind, record)


def check_read(principal: Principal, kind: EntityKind, record: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Out-of-scope records are reported exactly like missing ones."""
    if record is None or not can_read(principal, kind, record):
        raise NotFound(f"{EntityKind(kind).value.capitalize()} not found")
    return record


def list_filter(principal: Principal, kind: EntityKind) -> Predicate:
    """Pure function of (principal, kind): the scope every list view is ANDed with."""
    kind = EntityKind(kind)
    schema = schema_for(kind)

    if principal.is_admin:
        return Predicate.always()

    if principal.is_sub_admin:
        variants = expand_variants(principal.assigned_countries)
        if not variants:
            return Predicate.never()
        return Predicate.one_of(schema.country_field, variants)

    if kind.is_listing:
        # Members browse the public catalog; their closed listings live in list_own_listings()
        return status_filter(kind, [ListingStatus.active.value])

    if principal.is_user and principal.id:
        return Predicate.eq(schema.owner_field, principal.id)
    return Predicate.never()


def default_status_filter(principal: Principal, kind: EntityKind) -> Optional[Predicate]:
    """
    Status a sub-admin's list views start from: pending profiles (the
    approval queue) and active listings. Callers may pass their own status
    filter instead; the country scope from list_filter() still applies.
    """
    kind = EntityKind(kind)
    if not principal.is_sub_admin:
        return None
    if kind == EntityKind.profile:
        return status_filter(kind, [ApprovalStatus.pending.value])
    return status_filter(kind, [ListingStatus.active.value])


# ============================================================
# Write
# ============================================================

def can_edit_fields(principal: Principal, kind: EntityKind, record: Dict[str, Any]) -> bool:
    """Non-status field edits: the owner or an admin."""
    return principal.is_admin or principal_owns(principal, kind, record)


def can_write(
    principal: Principal,
    kind: EntityKind,
    record: Dict[str, Any],
    change: Dict[str, Any],
) -> bool:
    kind = EntityKind(kind)
    schema = schema_for(kind)

    if principal.is_anonymous or not change:
        return False

    if set(change) & IMMUTABLE_FIELDS[kind]:
        return False

    field_changes = {k: v for k, v in change.items() if k != schema.status_field}
    if field_changes and not can_edit_fields(principal, kind, record):
        return False

    if schema.status_field in change:
        return can_transition(
            principal,
            kind,
            record,
            str(status_of(kind, record)),
            str(change[schema.status_field]),
        )

    return True


def check_write(
    principal: Principal,
    kind: EntityKind,
    record: Dict[str, Any],
    change: Dict[str, Any],
) -> None:
    if not can_write(principal, kind, record, change):
        raise Forbidden(f"You do not have permission to modify this {EntityKind(kind).value}")


def write_scope(principal: Principal, kind: EntityKind) -> Predicate:
    """
    Facts a write must still find true in the datastore at UPDATE time:
    ownership for users, country coverage for sub-admins.
    """
    kind = EntityKind(kind)
    schema = schema_for(kind)

    if principal.is_admin:
        return Predicate.always()
    if principal.is_sub_admin:
        return list_filter(principal, kind)
    if principal.is_user and principal.id:
        return Predicate.eq(schema.owner_field, principal.id)
    return Predicate.never()


def can_create_listing(principal: Principal, owner_profile: Optional[Dict[str, Any]]) -> bool:
    """
    Only an approved marketplace user may post. The profile passed here must
    be fetched at write time, not reused from an earlier page load.
    """
    if not principal.is_user or not principal.id or owner_profile is None:
        return False
    if owner_profile.get("user_id") != principal.id:
        return False
    return owner_profile.get("approval_status") == ApprovalStatus.approved.value


def check_create_listing(principal: Principal, owner_profile: Optional[Dict[str, Any]]) -> None:
    if not principal.is_user:
        raise Forbidden("Only marketplace members can post listings")
    if not can_create_listing(principal, owner_profile):
        raise Forbidden("Your account must be approved before posting")


def require_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise Forbidden("Admin privileges required for this action")


def require_staff(principal: Principal) -> None:
    if not principal.is_staff:
        raise Forbidden("Admin or sub-admin privileges required for this action")
