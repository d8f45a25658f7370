from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from .enums import PrincipalKind
from .profile import ProfileCreate


# -----------------------------------------------------
# MARKETPLACE USER LOGIN (Supabase email/password)
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SignupRequest(ProfileCreate):
    password: str = Field(..., min_length=6)


# -----------------------------------------------------
# ADMIN PORTAL LOGIN (admin_users / sub_admin_users)
# -----------------------------------------------------
class AdminLoginRequest(BaseModel):
    username: str
    password: str
    role: Literal["admin", "sub_admin"] = "admin"


# -----------------------------------------------------
# THIRD-PARTY OAUTH
# -----------------------------------------------------
class OAuthStartResponse(BaseModel):
    provider: str
    url: str


class OAuthCallbackRequest(BaseModel):
    auth_code: str
    code_verifier: Optional[str] = None


# -----------------------------------------------------
# SESSION RESPONSE (app credential, not the Supabase JWT)
# -----------------------------------------------------
class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    principal_kind: PrincipalKind
    expires_in: int


class PrincipalRead(BaseModel):
    kind: PrincipalKind
    id: Optional[str] = None
    username: Optional[str] = None
    assigned_countries: List[str] = []
