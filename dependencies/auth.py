from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.config import settings
from core.errors import AuthError, AuthErrorReason, Forbidden
from core.session import resolve
from models.enums import PrincipalKind
from models.principal import Principal


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Credential lookup: Authorization header first, then cookie
# ============================================================
def read_credential(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def _mark_session_invalid(request: Request):
    # main.py clears the session cookie on the error response
    request.state.clear_session = True


# ============================================================
# PRINCIPAL (anonymous when no credential is presented)
# ============================================================
def get_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Resolve the acting principal once per request.

    No credential -> anonymous. A malformed or expired credential is NOT
    silently downgraded: the caller gets a 401 and the cookie is dropped.
    """
    token = read_credential(request, credentials)
    if not token:
        return Principal.anonymous()

    try:
        return resolve(token, invalidate=lambda: _mark_session_invalid(request))
    except AuthError as e:
        if e.reason == AuthErrorReason.malformed:
            _mark_session_invalid(request)
        raise


# ============================================================
# AUTHENTICATED PRINCIPAL
# ============================================================
def get_current_principal(principal: Principal = Depends(get_principal)) -> Principal:
    if principal.is_anonymous:
        raise AuthError(AuthErrorReason.missing, "Authentication required")
    return principal


# ============================================================
# KIND CHECKER (basic role guard)
# ============================================================
def requires_kind(*kinds: PrincipalKind):
    """
    Usage:
        @router.get("/stats", dependencies=[Depends(requires_kind(PrincipalKind.admin))])
    """
    allowed = {PrincipalKind(k) for k in kinds}

    def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.kind not in allowed:
            raise Forbidden(f"Requires one of: {sorted(k.value for k in allowed)}")
        return principal

    return checker
