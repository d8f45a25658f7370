from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# PRINCIPAL KIND
# -----------------------------------------------------
class PrincipalKind(BaseStrEnum):
    """Who is acting: visitor, marketplace member, or back-office staff."""

    anonymous = "anonymous"
    user = "user"
    admin = "admin"
    sub_admin = "sub_admin"


# -----------------------------------------------------
# PROFILE APPROVAL STATUS
# -----------------------------------------------------
class ApprovalStatus(BaseStrEnum):
    """Lifecycle of a registered user's profile."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    deleted = "deleted"


# -----------------------------------------------------
# LISTING STATUS
# -----------------------------------------------------
class ListingStatus(BaseStrEnum):
    """Lifecycle shared by products and product requests."""

    active = "active"
    done = "done"
    deleted = "deleted"

    @classmethod
    def parse(cls, value: str) -> "ListingStatus":
        # Older request rows were written with "open"
        if value in LEGACY_ACTIVE_STATUSES:
            return cls.active
        return cls(value)


LEGACY_ACTIVE_STATUSES = ("open",)


# -----------------------------------------------------
# ENTITY KIND
# -----------------------------------------------------
class EntityKind(BaseStrEnum):
    """Record families governed by the policy engine."""

    profile = "profile"
    product = "product"
    request = "request"

    @property
    def is_listing(self) -> bool:
        return self in (EntityKind.product, EntityKind.request)


# -----------------------------------------------------
# USER TYPE
# -----------------------------------------------------
class UserType(BaseStrEnum):
    buyer = "buyer"
    exporter = "exporter"
    both = "both"


# -----------------------------------------------------
# REQUEST URGENCY
# -----------------------------------------------------
class Urgency(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"
