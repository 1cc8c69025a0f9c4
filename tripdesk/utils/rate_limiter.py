"""
Rate Limiter Configuration

Uses Redis storage when REDIS_URL is set (multiple instances),
otherwise in-memory.

One limiter serves every app in the process; whether limits apply and
whether proxy headers are trusted is read from the app handling the request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import os


def get_real_client_ip(request: Request) -> str:
    """
    Client IP for rate limiting.

    X-Forwarded-For / X-Real-IP are only honoured when TRUST_PROXY_HEADERS is
    set, i.e. when a reverse proxy in front of the app overwrites them.
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and settings.trust_proxy_headers:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # Take the first IP (original client)
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

    return get_remote_address(request)


def rate_limit_exempt(request: Request) -> bool:
    """True for apps built with RATE_LIMIT_ENABLED=false"""
    return not getattr(request.app.state, "rate_limit_enabled", True)


def create_limiter() -> Limiter:
    return Limiter(
        key_func=get_real_client_ip,
        storage_uri=os.getenv("REDIS_URL") or "memory://",
        default_limits=["100/minute"]
    )


# Global rate limiter instance
limiter = create_limiter()


RATE_LIMITS = {
    # Admin writes move money - keep them tight
    "admin_write": "30/minute",
    "admin_read": "120/minute",
    "history": "60/minute",
}


def get_rate_limit(operation: str) -> str:
    """Get rate limit for a specific operation."""
    return RATE_LIMITS.get(operation, "100/minute")
