"""
Rate limiting utilities for API endpoints.
Uses slowapi to prevent brute force attacks on the admin login.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, status
from fastapi.responses import JSONResponse

from bakery.config import Settings, settings


def get_client_identifier(request: Request) -> str:
    """
    Get client identifier for rate limiting.
    Uses forwarded IP if behind proxy, otherwise remote address.

    Args:
        request: FastAPI request object

    Returns:
        str: Client identifier (IP address)
    """
    # Check for forwarded IP (if behind reverse proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Get first IP in chain (original client)
        return forwarded.split(",")[0].strip()

    # Fall back to direct remote address
    return get_remote_address(request)


# Create limiter instance
limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri="memory://"  # Use in-memory storage (single process)
)


# Rate limit configurations for specific use cases
RATE_LIMITS = {
    "login": settings.LOGIN_RATE_LIMIT,  # 5 login attempts per 15 minutes per IP
}


def configure_rate_limits(app_settings: Settings) -> None:
    """Apply the limits of the settings an app was built with."""
    RATE_LIMITS["login"] = app_settings.LOGIN_RATE_LIMIT


def login_rate_limit() -> str:
    # Resolved per request so configure_rate_limits takes effect after import
    return RATE_LIMITS["login"]


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a structured 429 with retry guidance."""
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "success": False,
            "error": "Too many requests",
            "message": f"Too many login attempts, please try again later (limit: {exc.detail})",
        },
        headers={"Retry-After": str(exc.limit.limit.get_expiry())},
    )
