# core/rate_limiter.py

"""
In-memory sliding-window limiter for login endpoints.
Per-process only; behind several workers each keeps its own window.
"""

from collections import defaultdict
from typing import Dict, Optional, Tuple
import time

from fastapi import HTTPException, Request


_rate_limit_store: Dict[str, list] = defaultdict(list)
_rate_limit_windows: Dict[str, int] = {}


def _prune_stale(now: float):
    """Forget identifiers whose last attempt has left its window."""
    for identifier in list(_rate_limit_store):
        attempts = _rate_limit_store[identifier]
        window = _rate_limit_windows.get(identifier, 0)
        if not attempts or attempts[-1] <= now - window:
            del _rate_limit_store[identifier]
            _rate_limit_windows.pop(identifier, None)


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record one attempt for `identifier`.

    Returns:
        Tuple of (allowed, remaining)
    """
    now = time.time()
    window_start = now - window_seconds

    _prune_stale(now)
    _rate_limit_windows[identifier] = window_seconds

    attempts = [ts for ts in _rate_limit_store.get(identifier, ()) if ts > window_start]

    if len(attempts) >= max_requests:
        _rate_limit_store[identifier] = attempts
        return False, 0

    attempts.append(now)
    _rate_limit_store[identifier] = attempts
    return True, max_requests - len(attempts)


def reset_rate_limits():
    _rate_limit_store.clear()
    _rate_limit_windows.clear()


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_rate_limit_identifier(request: Request, user_id: Optional[str] = None) -> str:
    """Prefers the login handle when known, otherwise the client IP."""
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_client_ip(request)}"


def require_rate_limit(
    request: Request,
    identifier: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60,
):
    """
    Raises:
        HTTPException: 429 Too Many Requests if limit exceeded
    """
    if identifier is None:
        identifier = get_rate_limit_identifier(request)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        raise HTTPException(
            status_code=429,
            detail=f"Too many attempts. Try again in {window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            },
        )

    return remaining
