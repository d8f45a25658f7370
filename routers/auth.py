from fastapi import APIRouter, Depends, HTTPException, Request, Response

from core.config import settings
from core.errors import InvalidCredentials
from core.logging_config import logger
from core.rate_limiter import require_rate_limit, get_rate_limit_identifier
from core.session import issue_credential
from core.store import DataStore, get_store
from core.supabase_client import get_supabase_client
from dependencies.auth import get_current_principal
from models.auth import (
    LoginRequest,
    OAuthCallbackRequest,
    OAuthStartResponse,
    PrincipalRead,
    SessionResponse,
    SignupRequest,
)
from models.enums import PrincipalKind
from models.principal import Principal
from models.profile import ProfileRead
from services.marketplace import create_profile, ensure_profile


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# Session helpers (shared with the admin portal login)
# ============================================================
def open_session(response: Response, principal: Principal) -> SessionResponse:
    token = issue_credential(principal)
    max_age = settings.SESSION_MAX_AGE_HOURS * 3600

    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=max_age,
        httponly=True,
        secure=settings.ENV != "development",
        samesite="lax",
    )

    return SessionResponse(
        access_token=token,
        principal_kind=principal.kind,
        expires_in=max_age,
    )


def _require_client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


def _user_principal(auth_user) -> Principal:
    return Principal(kind=PrincipalKind.user, id=str(auth_user.id))


# ============================================================
# SIGNUP (Supabase Auth + pending profile)
# ============================================================
@router.post("/signup", response_model=ProfileRead, status_code=201, summary="Register a marketplace account")
def signup(payload: SignupRequest, store: DataStore = Depends(get_store)):
    client = _require_client()
    email = payload.email.strip().lower()

    try:
        result = client.auth.sign_up(
            {
                "email": email,
                "password": payload.password,
                "options": {"data": {"full_name": payload.full_name}},
            }
        )
    except Exception as e:
        logger.warning(f"Signup failed for {email}: {type(e).__name__}")
        raise HTTPException(400, "Could not create account")

    if not result.user:
        raise HTTPException(400, "Could not create account")

    profile_data = payload.model_dump(mode="json", exclude={"password"})
    profile_data["email"] = email

    return create_profile(store, str(result.user.id), profile_data)


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=SessionResponse, summary="Authenticate marketplace user")
def login(payload: LoginRequest, request: Request, response: Response):
    email = payload.email.strip().lower()

    identifier = get_rate_limit_identifier(request, user_id=email)
    require_rate_limit(request, identifier=identifier, max_requests=10, window_seconds=900)

    client = _require_client()

    try:
        result = client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise InvalidCredentials("Invalid email or password")

    if not result.user or not result.session:
        raise InvalidCredentials("Invalid email or password")

    logger.info(f"User login: {result.user.id}")
    return open_session(response, _user_principal(result.user))


# ============================================================
# THIRD-PARTY OAUTH (Supabase GoTrue providers)
# ============================================================
@router.get("/oauth/{provider}", response_model=OAuthStartResponse, summary="Start third-party login")
def oauth_start(provider: str):
    if provider not in settings.OAUTH_PROVIDERS:
        raise HTTPException(404, f"Unsupported login provider: {provider}")

    client = _require_client()

    options = {}
    if settings.OAUTH_REDIRECT_URL:
        options["redirect_to"] = settings.OAUTH_REDIRECT_URL

    try:
        result = client.auth.sign_in_with_oauth({"provider": provider, "options": options})
    except Exception as e:
        logger.error(f"OAuth start failed for {provider}: {e}")
        raise HTTPException(502, "Login provider unavailable")

    return OAuthStartResponse(provider=provider, url=result.url)


@router.post("/oauth/callback", response_model=SessionResponse, summary="Complete third-party login")
def oauth_callback(
    payload: OAuthCallbackRequest,
    response: Response,
    store: DataStore = Depends(get_store),
):
    client = _require_client()

    params = {"auth_code": payload.auth_code}
    if payload.code_verifier:
        params["code_verifier"] = payload.code_verifier
    if settings.OAUTH_REDIRECT_URL:
        params["redirect_to"] = settings.OAUTH_REDIRECT_URL

    try:
        result = client.auth.exchange_code_for_session(params)
    except Exception as e:
        logger.warning(f"OAuth code exchange failed: {type(e).__name__}")
        raise InvalidCredentials("Third-party login failed")

    if not result.user:
        raise InvalidCredentials("Third-party login failed")

    user = result.user
    metadata = user.user_metadata or {}

    # First OAuth login registers the member (pending, like any signup)
    ensure_profile(
        store,
        str(user.id),
        {
            "email": user.email,
            "full_name": metadata.get("full_name") or metadata.get("name"),
        },
    )

    logger.info(f"OAuth login: {user.id}")
    return open_session(response, _user_principal(user))


# ============================================================
# LOGOUT / CURRENT PRINCIPAL
# ============================================================
@router.post("/logout", summary="Drop the session cookie")
def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "logged_out"}


@router.get("/me", response_model=PrincipalRead, summary="Current principal")
def read_me(principal: Principal = Depends(get_current_principal)):
    return PrincipalRead(
        kind=principal.kind,
        id=principal.id,
        username=principal.username,
        assigned_countries=list(principal.assigned_countries),
    )
