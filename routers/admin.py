# routers/admin.py

from fastapi import APIRouter, Depends, Request, Response

from core.config import settings
from core.rate_limiter import require_rate_limit, get_rate_limit_identifier
from core.store import DataStore, get_store
from dependencies.auth import requires_kind
from models.auth import AdminLoginRequest, SessionResponse
from models.enums import PrincipalKind
from models.principal import Principal
from routers.auth import open_session
from services.marketplace import dashboard_stats
from services.staff import authenticate_staff


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


# -----------------------------------------------------
# Admin portal login (admin or sub-admin)
# -----------------------------------------------------
@router.post("/login", response_model=SessionResponse, summary="Admin portal login")
def admin_login(
    payload: AdminLoginRequest,
    request: Request,
    response: Response,
    store: DataStore = Depends(get_store),
):
    username = payload.username.strip()

    identifier = get_rate_limit_identifier(request, user_id=f"{payload.role}:{username}")
    require_rate_limit(
        request,
        identifier=identifier,
        max_requests=settings.ADMIN_LOGIN_MAX_ATTEMPTS,
        window_seconds=settings.ADMIN_LOGIN_WINDOW_SECONDS,
    )

    principal = authenticate_staff(store, username, payload.password, PrincipalKind(payload.role))
    return open_session(response, principal)


# -----------------------------------------------------
# Dashboard counts, scoped to the caller's countries
# -----------------------------------------------------
@router.get("/stats", summary="Back-office dashboard counts")
def stats(
    principal: Principal = Depends(requires_kind(PrincipalKind.admin, PrincipalKind.sub_admin)),
    store: DataStore = Depends(get_store),
):
    return dashboard_stats(store, principal)
