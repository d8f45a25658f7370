# core/entities.py

"""
Where each governed record family lives and which columns carry the
ownership / country / status facts the policy engine reasons about.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.enums import EntityKind


@dataclass(frozen=True)
class EntitySchema:
    kind: EntityKind
    table: str
    id_field: str
    owner_field: str
    country_field: str
    status_field: str


ENTITY_SCHEMAS = {
    EntityKind.profile: EntitySchema(
        kind=EntityKind.profile,
        table="profiles",
        id_field="user_id",
        owner_field="user_id",
        country_field="country",
        status_field="approval_status",
    ),
    EntityKind.product: EntitySchema(
        kind=EntityKind.product,
        table="products",
        id_field="id",
        owner_field="exporter_id",
        country_field="country_origin",
        status_field="status",
    ),
    EntityKind.request: EntitySchema(
        kind=EntityKind.request,
        table="product_requests",
        id_field="id",
        owner_field="requester_id",
        country_field="target_country",
        status_field="status",
    ),
}


def schema_for(kind: EntityKind) -> EntitySchema:
    return ENTITY_SCHEMAS[EntityKind(kind)]


def owner_of(kind: EntityKind, record: Dict[str, Any]) -> Optional[str]:
    return record.get(schema_for(kind).owner_field)


def country_of(kind: EntityKind, record: Dict[str, Any]) -> Optional[str]:
    return record.get(schema_for(kind).country_field)


def status_of(kind: EntityKind, record: Dict[str, Any]) -> Optional[str]:
    return record.get(schema_for(kind).status_field)


def id_of(kind: EntityKind, record: Dict[str, Any]) -> Optional[str]:
    return record.get(schema_for(kind).id_field)
