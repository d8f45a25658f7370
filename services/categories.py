# services/categories.py

from typing import Any, Dict, List

from core.errors import Conflict, Forbidden, NotFound
from core.logging_config import logger
from core.policy import require_admin
from core.predicates import Predicate
from core.store import DataStore
from core.utils import utcnow_iso
from models.principal import Principal


CATEGORIES_TABLE = "categories"


def list_categories(store: DataStore, principal: Principal, include_pending: bool = False) -> List[Dict[str, Any]]:
    """Approved categories for everyone; admins may also see proposals."""
    predicate = Predicate.eq("is_approved", True)
    if include_pending and principal.is_admin:
        predicate = Predicate.always()
    return store.fetch_many(CATEGORIES_TABLE, predicate, order_by="name", desc=False)


def create_category(store: DataStore, principal: Principal, name: str) -> Dict[str, Any]:
    """
    Members propose categories (unapproved until an admin approves);
    admin-created categories are approved immediately.
    """
    if not (principal.is_user or principal.is_admin):
        raise Forbidden("Only members and admins can add categories")

    record = {
        "name": name.strip(),
        "created_by": principal.id,
        "is_approved": principal.is_admin,
        "created_at": utcnow_iso(),
    }

    try:
        created = store.insert(CATEGORIES_TABLE, record)
    except Conflict:
        raise Conflict("This category already exists")

    logger.info(f"{principal.kind.value} {principal.id} added category '{record['name']}'")
    return created


def approve_category(store: DataStore, principal: Principal, category_id: str) -> Dict[str, Any]:
    require_admin(principal)

    affected = store.conditional_update(
        CATEGORIES_TABLE,
        Predicate.eq("id", category_id),
        {"is_approved": True, "updated_at": utcnow_iso()},
    )
    if affected == 0:
        raise NotFound("Category not found")

    row = store.fetch_one(CATEGORIES_TABLE, Predicate.eq("id", category_id))
    return row or {"id": category_id, "is_approved": True}
