from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "BRICSZ Marketplace API"
    ENV: str = "development"
    LOG_LEVEL: str = Field("INFO", env="LOG_LEVEL")

    # -------------------------------------------------
    # Frontend Domains (CORS auto-built below)
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = Field(None, env="FRONTEND_DOMAIN")

    BRICSZ_DOMAINS: List[str] = [
        "https://bricsz.com",
        "https://www.bricsz.com",
    ]

    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # App Session Credential (signed JWT)
    # -------------------------------------------------
    SESSION_SECRET_KEY: str = Field("change-me", env="SESSION_SECRET_KEY")
    SESSION_ALGORITHM: str = "HS256"
    SESSION_MAX_AGE_HOURS: int = Field(24, env="SESSION_MAX_AGE_HOURS", description="Absolute session lifetime measured from login time")
    SESSION_COOKIE_NAME: str = "bricsz_session"

    # -------------------------------------------------
    # Third-party OAuth (via Supabase GoTrue)
    # -------------------------------------------------
    OAUTH_PROVIDERS: List[str] = ["google"]
    OAUTH_REDIRECT_URL: Optional[str] = Field(None, env="OAUTH_REDIRECT_URL")

    # -------------------------------------------------
    # Admin Portal Login Throttling
    # -------------------------------------------------
    ADMIN_LOGIN_MAX_ATTEMPTS: int = Field(5, env="ADMIN_LOGIN_MAX_ATTEMPTS")
    ADMIN_LOGIN_WINDOW_SECONDS: int = Field(900, env="ADMIN_LOGIN_WINDOW_SECONDS")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

cors_origins.extend([d.rstrip("/") for d in settings.BRICSZ_DOMAINS])

settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
