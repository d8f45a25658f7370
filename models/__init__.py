# -------------------------
# Enums
# -------------------------
from .enums import (
    ApprovalStatus,
    EntityKind,
    ListingStatus,
    PrincipalKind,
    Urgency,
    UserType,
)

# -------------------------
# Principal (acting identity)
# -------------------------
from .principal import Principal

# -------------------------
# Profile Models
# -------------------------
from .profile import (
    ProfileBase,
    ProfileCreate,
    ProfileRead,
    ProfileStatusChange,
    ProfileUpdate,
)

# -------------------------
# Listing Models
# -------------------------
from .listing import (
    ListingStatusChange,
    ProductCreate,
    ProductRead,
    ProductRequestCreate,
    ProductRequestRead,
    ProductRequestUpdate,
    ProductUpdate,
    TransitionResult,
)

# -------------------------
# Back office
# -------------------------
from .sub_admin import SubAdminCountriesUpdate, SubAdminCreate, SubAdminRead
from .category import CategoryCreate, CategoryRead

# -------------------------
# Auth Models
# -------------------------
from .auth import (
    AdminLoginRequest,
    LoginRequest,
    OAuthCallbackRequest,
    OAuthStartResponse,
    PrincipalRead,
    SessionResponse,
    SignupRequest,
)

__all__ = [
    # enums
    "ApprovalStatus",
    "EntityKind",
    "ListingStatus",
    "PrincipalKind",
    "Urgency",
    "UserType",

    # principal
    "Principal",

    # profiles
    "ProfileBase",
    "ProfileCreate",
    "ProfileRead",
    "ProfileStatusChange",
    "ProfileUpdate",

    # listings
    "ListingStatusChange",
    "ProductCreate",
    "ProductRead",
    "ProductRequestCreate",
    "ProductRequestRead",
    "ProductRequestUpdate",
    "ProductUpdate",
    "TransitionResult",

    # back office
    "SubAdminCountriesUpdate",
    "SubAdminCreate",
    "SubAdminRead",
    "CategoryCreate",
    "CategoryRead",

    # auth
    "AdminLoginRequest",
    "LoginRequest",
    "OAuthCallbackRequest",
    "OAuthStartResponse",
    "PrincipalRead",
    "SessionResponse",
    "SignupRequest",
]
