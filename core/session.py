# core/session.py

"""
Identity & role resolver.

The session credential is a signed JWT carrying the logical session fields:

    principal_kind       user | admin | sub_admin
    sub                  principal id
    username             display handle (admin portal accounts)
    assigned_countries   sub-admins only, snapshot taken at login
    login_time           ISO-8601 UTC

Expiry is absolute: login_time + SESSION_MAX_AGE_HOURS, wall clock,
independent of activity. Countries are never re-fetched mid-session.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from core.config import settings
from core.errors import AuthError, AuthErrorReason
from core.logging_config import logger
from models.enums import PrincipalKind
from models.principal import Principal


class SessionClaims(BaseModel):
    principal_kind: PrincipalKind
    sub: Optional[str] = None
    username: Optional[str] = None
    assigned_countries: List[str] = []
    login_time: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def session_max_age() -> timedelta:
    return timedelta(hours=settings.SESSION_MAX_AGE_HOURS)


# ============================================================
# Issue
# ============================================================
def issue_credential(principal: Principal, login_time: Optional[datetime] = None) -> str:
    if principal.is_anonymous or not principal.id:
        raise ValueError("Anonymous principals do not get a session credential")

    login_time = _as_utc(login_time or principal.login_time or _utcnow())

    payload = {
        "sub": principal.id,
        "principal_kind": principal.kind.value,
        "login_time": login_time.isoformat(),
    }
    if principal.username:
        payload["username"] = principal.username
    if principal.is_sub_admin:
        payload["assigned_countries"] = list(principal.assigned_countries)

    return jwt.encode(
        payload,
        settings.SESSION_SECRET_KEY,
        algorithm=settings.SESSION_ALGORITHM,
    )


# ============================================================
# Resolve
# ============================================================
def resolve(
    credential: Optional[str],
    *,
    now: Optional[datetime] = None,
    invalidate: Optional[Callable[[], None]] = None,
) -> Principal:
    """
    Turn a stored credential into a Principal, or raise AuthError.

    On expiry, `invalidate` (e.g. "drop the cookie") runs before the error
    is raised. Malformed credentials are never retried.
    """
    if not credential:
        raise AuthError(AuthErrorReason.missing, "No session credential")

    try:
        payload = jwt.decode(
            credential,
            settings.SESSION_SECRET_KEY,
            algorithms=[settings.SESSION_ALGORITHM],
        )
        claims = SessionClaims(**payload)
    except (JWTError, ValidationError, TypeError) as e:
        logger.info(f"Malformed session credential: {type(e).__name__}")
        raise AuthError(AuthErrorReason.malformed, "Invalid session credential")

    if claims.principal_kind == PrincipalKind.anonymous or not claims.sub:
        raise AuthError(AuthErrorReason.malformed, "Invalid session credential")

    login_time = _as_utc(claims.login_time)
    now = _as_utc(now or _utcnow())

    if now - login_time > session_max_age():
        logger.info(f"Session expired for {claims.principal_kind.value} {claims.sub}")
        if invalidate is not None:
            invalidate()
        raise AuthError(AuthErrorReason.expired, "Session expired, please log in again")

    assigned = ()
    if claims.principal_kind == PrincipalKind.sub_admin:
        assigned = tuple(claims.assigned_countries)

    return Principal(
        kind=claims.principal_kind,
        id=claims.sub,
        username=claims.username,
        assigned_countries=assigned,
        login_time=login_time,
    )
