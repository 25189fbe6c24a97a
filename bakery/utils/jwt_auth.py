"""
JWT Token-based authentication utilities for admin access.
Provides token generation, verification, and the admin session check.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status, Header, Request
from bakery.config import Settings


ALGORITHM = "HS256"


def token_lifetime(settings: Settings) -> timedelta:
    """Token lifetime; the admin session sweep uses the same value."""
    return timedelta(minutes=settings.SESSION_MAX_AGE_MINUTES)


def format_expires_in(settings: Settings) -> str:
    minutes = settings.SESSION_MAX_AGE_MINUTES
    return f"{minutes // 60}h" if minutes % 60 == 0 else f"{minutes}m"


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to include in token
        settings: Settings holding JWT_SECRET_KEY
        expires_delta: Optional custom expiration time

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta else token_lifetime(settings))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access"
    })

    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def verify_token(token: str, settings: Settings) -> dict:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string
        settings: Settings holding JWT_SECRET_KEY

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: If token is invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "error": "Invalid token", "message": "Authentication token is invalid or expired"}
        )

    # Verify token type
    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "error": "Invalid token type", "message": "Token is not an access token"}
        )

    # Check if token is expired (jose should handle this, but double-check)
    exp = payload.get("exp")
    if exp:
        exp_datetime = datetime.fromtimestamp(exp, tz=timezone.utc)
        if datetime.now(timezone.utc) > exp_datetime:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"success": False, "error": "Token expired", "message": "Please login again"}
            )

    return payload


def extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    """Read the bearer token from the Authorization header, falling back to the admin_token cookie."""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    return request.cookies.get("admin_token")


def require_admin(
    request: Request,
    authorization: Optional[str] = Header(None, description="Bearer token for admin authentication")
) -> dict:
    """
    FastAPI dependency for admin-only endpoints.

    Args:
        request: FastAPI request object (app state and cookies)
        authorization: Authorization header value (e.g., "Bearer <token>")

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or its session
            is no longer active; 403 if the token does not grant admin rights
    """
    token = extract_token(request, authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "error": "Missing token", "message": "Authentication required"},
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = verify_token(token, request.app.state.settings)

    if not payload.get("isAdmin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"success": False, "error": "Forbidden", "message": "Admin access required"}
        )

    sessions = request.app.state.storage.sessions
    if not sessions.is_valid(payload.get("sessionId")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "error": "Session expired", "message": "Please login again"},
            headers={"WWW-Authenticate": "Bearer"}
        )

    return payload
