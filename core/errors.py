# core/errors.py

"""
Domain error taxonomy for the marketplace policy engine.

None of these are retried automatically. The HTTP layer (main.py) maps each
class to a status code; the engine itself never imports FastAPI.
"""

from enum import Enum


class AuthErrorReason(str, Enum):
    missing = "missing"
    malformed = "malformed"
    expired = "expired"


class MarketplaceError(Exception):
    """Base class for every error the engine raises on purpose."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class AuthError(MarketplaceError):
    status_code = 401

    def __init__(self, reason: AuthErrorReason, message: str = ""):
        super().__init__(message or f"Session {reason.value}")
        self.reason = reason


class InvalidCredentials(MarketplaceError):
    """Login rejected. Deliberately vague about which part was wrong."""

    status_code = 401


class Forbidden(MarketplaceError):
    """The principal can see the record but may not act on it."""

    status_code = 403


class NotFound(MarketplaceError):
    """Missing record, or one outside the principal's read scope."""

    status_code = 404


class Conflict(MarketplaceError):
    status_code = 409


class InvalidTransition(MarketplaceError):
    status_code = 409

    def __init__(self, from_status: str, to_status: str, message: str = ""):
        super().__init__(message or f"Transition {from_status} -> {to_status} is not allowed")
        self.from_status = from_status
        self.to_status = to_status


class InvalidInput(MarketplaceError):
    """A change that passes field validation but breaks a cross-field rule on the stored row."""

    status_code = 422


class StoreError(MarketplaceError):
    status_code = 500


# ============================================================
# Supabase error normalization
# ============================================================

def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors (APIError carries .message / .code)
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: PostgREST / GoTrue errors expose .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: plain string fallback
    return str(error) or "Unknown Supabase error"


def is_unique_violation(error: Exception) -> bool:
    """Postgres unique_violation is SQLSTATE 23505."""
    if getattr(error, "code", None) == "23505":
        return True
    detail = extract_supabase_error(error).lower()
    return "duplicate" in detail or "unique" in detail


def translate_supabase_error(error: Exception, operation: str = "Database operation") -> MarketplaceError:
    """
    Map a Supabase exception onto the domain taxonomy.
    Returns the error (doesn't raise) so the caller can re-raise with context.
    """
    from core.logging_config import logger

    detail = extract_supabase_error(error)

    if is_unique_violation(error):
        logger.info(f"{operation}: duplicate record ({detail})")
        return Conflict(f"{operation}: Record already exists")

    logger.error(f"{operation}: {detail}")
    return StoreError(f"{operation} failed")
