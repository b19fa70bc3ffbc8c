# vermietertools/core/rate_limit_config.py
"""
Rate limiting configuration for the Vermietertools API

Only the public credential endpoints are limited; everything else sits
behind a session anyway.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address


def _trust_proxy_headers(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.TRUST_PROXY_HEADERS)


def get_real_ip(request: Request) -> str:
    """
    Get the real IP address, considering proxy headers.

    The headers are client-controlled, so they only count when
    TRUST_PROXY_HEADERS says a load balancer in front sets them.
    """
    if not _trust_proxy_headers(request):
        return get_remote_address(request)

    # Check for proxy headers (in order of preference)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fallback to direct connection IP
    return get_remote_address(request)


RATE_LIMITS = {
    "login": "10/minute",       # Password guessing
    "register": "5/minute",     # Account spam
}

RATE_LIMIT_MESSAGE = "Zu viele Anfragen. Bitte warte einen Moment und versuche es erneut."

# Shared by the route decorators; create_app() switches it on or off
limiter = Limiter(key_func=get_real_ip)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Structured 429 in the same shape as every other error"""
    response = JSONResponse(
        status_code=429,
        content={"error": RATE_LIMIT_MESSAGE, "code": "rate_limited"},
    )
    response.headers["Retry-After"] = "60"
    return response
