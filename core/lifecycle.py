# core/lifecycle.py

"""
Approval / listing status state machine.

Profiles:  pending -> approved | rejected, approved <-> rejected,
           any live status -> deleted (admin only). deleted is terminal.
Listings:  active -> done | deleted. done and deleted are terminal.

Who may take an edge:
    ADMIN            any admin
    COVERING_STAFF   admin, or a sub-admin whose assigned countries cover
                     the record's country field
    OWNER            the user who created the record
"""

from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from core.countries import is_covered
from core.entities import country_of, owner_of, status_of
from core.errors import Forbidden, InvalidTransition
from core.logging_config import logger
from models.enums import ApprovalStatus, EntityKind, ListingStatus
from models.principal import Principal


ADMIN = "admin"
COVERING_SUB_ADMIN = "covering_sub_admin"
OWNER = "owner"

COVERING_STAFF: FrozenSet[str] = frozenset({ADMIN, COVERING_SUB_ADMIN})
ADMIN_ONLY: FrozenSet[str] = frozenset({ADMIN})
OWNER_OR_COVERING_STAFF: FrozenSet[str] = frozenset({OWNER, ADMIN, COVERING_SUB_ADMIN})


PROFILE_TRANSITIONS: Dict[Tuple[ApprovalStatus, ApprovalStatus], FrozenSet[str]] = {
    (ApprovalStatus.pending, ApprovalStatus.approved): COVERING_STAFF,
    (ApprovalStatus.pending, ApprovalStatus.rejected): COVERING_STAFF,
    (ApprovalStatus.rejected, ApprovalStatus.approved): COVERING_STAFF,
    (ApprovalStatus.approved, ApprovalStatus.rejected): COVERING_STAFF,
    (ApprovalStatus.pending, ApprovalStatus.deleted): ADMIN_ONLY,
    (ApprovalStatus.approved, ApprovalStatus.deleted): ADMIN_ONLY,
    (ApprovalStatus.rejected, ApprovalStatus.deleted): ADMIN_ONLY,
}

LISTING_TRANSITIONS: Dict[Tuple[ListingStatus, ListingStatus], FrozenSet[str]] = {
    (ListingStatus.active, ListingStatus.done): OWNER_OR_COVERING_STAFF,
    (ListingStatus.active, ListingStatus.deleted): OWNER_OR_COVERING_STAFF,
}

PROFILE_INITIAL = ApprovalStatus.pending
PROFILE_TERMINAL = frozenset({ApprovalStatus.deleted})
LISTING_INITIAL = ListingStatus.active
LISTING_TERMINAL = frozenset({ListingStatus.done, ListingStatus.deleted})


# ============================================================
# Helpers
# ============================================================

def principal_covers(principal: Principal, country: Optional[str]) -> bool:
    """Admins cover every country; sub-admins only their assigned set."""
    if principal.is_admin:
        return True
    if principal.is_sub_admin:
        return is_covered(country, principal.assigned_countries)
    return False


def principal_owns(principal: Principal, kind: EntityKind, record: Dict[str, Any]) -> bool:
    if not principal.is_user or not principal.id:
        return False
    return owner_of(kind, record) == principal.id


def _parse_edge(kind: EntityKind, from_status: str, to_status: str):
    """Returns the typed (from, to) pair, or None when either side is unknown."""
    try:
        if kind == EntityKind.profile:
            return ApprovalStatus(from_status), ApprovalStatus(to_status)
        return ListingStatus.parse(from_status), ListingStatus.parse(to_status)
    except ValueError:
        return None


def _table_for(kind: EntityKind):
    return PROFILE_TRANSITIONS if kind == EntityKind.profile else LISTING_TRANSITIONS


def actors_for_edge(kind: EntityKind, from_status: str, to_status: str) -> Optional[FrozenSet[str]]:
    """Who may take this edge, or None when the edge does not exist."""
    kind = EntityKind(kind)
    edge = _parse_edge(kind, from_status, to_status)
    if edge is None:
        return None
    return _table_for(kind).get(edge)


def is_legal_edge(kind: EntityKind, from_status: str, to_status: str) -> bool:
    return actors_for_edge(kind, from_status, to_status) is not None


def _principal_matches(
    principal: Principal,
    actors: FrozenSet[str],
    kind: EntityKind,
    record: Dict[str, Any],
) -> bool:
    if ADMIN in actors and principal.is_admin:
        return True
    if COVERING_SUB_ADMIN in actors and principal.is_sub_admin:
        return is_covered(country_of(kind, record), principal.assigned_countries)
    if OWNER in actors and principal_owns(principal, kind, record):
        return True
    return False


# ============================================================
# Public API
# ============================================================

def can_transition(
    principal: Principal,
    kind: EntityKind,
    record: Dict[str, Any],
    from_status: str,
    to_status: str,
) -> bool:
    actors = actors_for_edge(kind, from_status, to_status)
    if actors is None:
        return False
    return _principal_matches(principal, actors, EntityKind(kind), record)


def check_transition(
    principal: Principal,
    kind: EntityKind,
    record: Dict[str, Any],
    from_status: str,
    to_status: str,
) -> None:
    """
    Raise InvalidTransition for an edge outside the table, Forbidden for a
    legal edge this principal may not take.
    """
    actors = actors_for_edge(kind, from_status, to_status)
    if actors is None:
        raise InvalidTransition(str(from_status), str(to_status))

    if not _principal_matches(principal, actors, EntityKind(kind), record):
        logger.info(
            f"Transition denied: {principal.kind} {principal.id} "
            f"{kind} {from_status}->{to_status}"
        )
        raise Forbidden(f"You are not allowed to move this {kind} to '{to_status}'")


def allowed_targets(principal: Principal, kind: EntityKind, record: Dict[str, Any]) -> List[str]:
    """Statuses this principal could move the record to right now."""
    kind = EntityKind(kind)
    current = status_of(kind, record)
    if current is None:
        return []

    targets = []
    for (src, dst), actors in _table_for(kind).items():
        edge = _parse_edge(kind, current, dst.value)
        if edge is None or edge[0] != src:
            continue
        if _principal_matches(principal, actors, kind, record):
            targets.append(dst.value)
    return targets


def is_terminal(kind: EntityKind, status: str) -> bool:
    kind = EntityKind(kind)
    try:
        if kind == EntityKind.profile:
            return ApprovalStatus(status) in PROFILE_TERMINAL
        return ListingStatus.parse(status) in LISTING_TERMINAL
    except ValueError:
        return False
