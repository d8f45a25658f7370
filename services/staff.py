# services/staff.py

"""
Admin portal accounts: admin / sub-admin login and sub-admin management.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from core.errors import Conflict, InvalidCredentials, MarketplaceError, NotFound
from core.hashing import hash_password, verify_password
from core.logging_config import logger
from core.policy import require_admin
from core.predicates import Predicate
from core.store import DataStore
from core.utils import utcnow_iso
from models.enums import PrincipalKind
from models.principal import Principal


ADMIN_TABLE = "admin_users"
SUB_ADMIN_TABLE = "sub_admin_users"

STAFF_TABLES = {
    PrincipalKind.admin: ADMIN_TABLE,
    PrincipalKind.sub_admin: SUB_ADMIN_TABLE,
}

PUBLIC_FIELDS = (
    "id", "username", "email", "full_name", "created_by",
    "assigned_countries", "is_active", "last_login", "created_at",
)


def _public(row: Dict[str, Any]) -> Dict[str, Any]:
    return {k: row.get(k) for k in PUBLIC_FIELDS if k in row}


# ============================================================
# Login
# ============================================================
def authenticate_staff(
    store: DataStore,
    username: str,
    password: str,
    kind: PrincipalKind,
) -> Principal:
    """
    Check portal credentials and build the session principal.
    Sub-admin countries are snapshotted here and carried for the whole
    session.
    """
    kind = PrincipalKind(kind)
    if kind not in STAFF_TABLES:
        raise InvalidCredentials("Invalid credentials")

    table = STAFF_TABLES[kind]
    username = (username or "").strip()

    account = store.fetch_one(
        table,
        Predicate.eq("username", username) & Predicate.eq("is_active", True),
    )

    if not account or not verify_password(password, account.get("password_hash", "")):
        logger.warning(f"Admin portal login failed: role={kind.value} username={username}")
        raise InvalidCredentials("Invalid credentials")

    login_time = datetime.now(timezone.utc)

    # Best effort; a failed bookkeeping write must not block login
    try:
        store.conditional_update(table, Predicate.eq("id", account["id"]), {"last_login": login_time.isoformat()})
    except MarketplaceError as e:
        logger.warning(f"Failed to update last_login for {username}: {e.message}")

    logger.info(f"Admin portal login: role={kind.value} username={username}")

    assigned = ()
    if kind == PrincipalKind.sub_admin:
        assigned = tuple(account.get("assigned_countries") or ())

    return Principal(
        kind=kind,
        id=str(account["id"]),
        username=account.get("username"),
        assigned_countries=assigned,
        login_time=login_time,
    )


# ============================================================
# Sub-admin management (admin only)
# ============================================================
def list_sub_admins(store: DataStore, principal: Principal) -> List[Dict[str, Any]]:
    require_admin(principal)
    rows = store.fetch_many(SUB_ADMIN_TABLE, Predicate.always())
    return [_public(r) for r in rows]


def create_sub_admin(store: DataStore, principal: Principal, data: Dict[str, Any]) -> Dict[str, Any]:
    require_admin(principal)

    record = {
        "username": data["username"].strip(),
        "password_hash": hash_password(data["password"]),
        "email": data.get("email"),
        "full_name": data.get("full_name"),
        "created_by": principal.id,
        "assigned_countries": list(data["assigned_countries"]),
        "is_active": True,
        "created_at": utcnow_iso(),
    }

    try:
        created = store.insert(SUB_ADMIN_TABLE, record)
    except Conflict:
        raise Conflict("Username already exists")

    logger.info(
        f"Admin {principal.id} created sub-admin {record['username']} "
        f"for {record['assigned_countries']}"
    )
    return _public(created)


def update_sub_admin_countries(
    store: DataStore,
    principal: Principal,
    sub_admin_id: str,
    countries: List[str],
) -> Dict[str, Any]:
    """
    Takes effect at the sub-admin's next login; live sessions keep the
    countries they logged in with.
    """
    require_admin(principal)

    patch = {"assigned_countries": list(countries), "updated_at": utcnow_iso()}
    affected = store.conditional_update(SUB_ADMIN_TABLE, Predicate.eq("id", sub_admin_id), patch)
    if affected == 0:
        raise NotFound("Sub-admin not found")

    logger.info(f"Admin {principal.id} reassigned sub-admin {sub_admin_id} to {countries}")
    row = store.fetch_one(SUB_ADMIN_TABLE, Predicate.eq("id", sub_admin_id))
    return _public(row or {"id": sub_admin_id, **patch})


def deactivate_sub_admin(store: DataStore, principal: Principal, sub_admin_id: str) -> Dict[str, Any]:
    """Soft revoke: is_active=false, history kept."""
    require_admin(principal)

    existing = store.fetch_one(SUB_ADMIN_TABLE, Predicate.eq("id", sub_admin_id))
    if not existing:
        raise NotFound("Sub-admin not found")

    affected = store.conditional_update(
        SUB_ADMIN_TABLE,
        Predicate.eq("id", sub_admin_id) & Predicate.eq("is_active", True),
        {"is_active": False, "updated_at": utcnow_iso()},
    )

    logger.info(f"Admin {principal.id} deactivated sub-admin {sub_admin_id} (applied={affected > 0})")
    return {"id": sub_admin_id, "is_active": False, "applied": affected > 0}
