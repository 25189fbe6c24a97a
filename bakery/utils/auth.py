"""
Password authentication utilities for admin access.
Uses bcrypt for secure password hashing.
"""
import hmac

import bcrypt

from bakery.config import Settings


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password using bcrypt.
    Used for generating the initial password hash.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hashed password.

    Args:
        password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(
            password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Malformed hash
        return False


def verify_admin_credentials(username: str, password: str, settings: Settings) -> bool:
    """
    Verify admin username and password against configured credentials.

    Args:
        username: Submitted username
        password: Plain text password to verify
        settings: Settings holding ADMIN_USERNAME and ADMIN_PASSWORD_HASH

    Returns:
        True if both match, False otherwise

    Raises:
        ValueError: If ADMIN_PASSWORD_HASH is not configured
    """
    if not settings.ADMIN_PASSWORD_HASH:
        raise ValueError("ADMIN_PASSWORD_HASH not configured")

    username_ok = hmac.compare_digest(username.encode('utf-8'), settings.ADMIN_USERNAME.encode('utf-8'))
    # Always run the hash check so timing does not reveal a wrong username
    password_ok = verify_password(password, settings.ADMIN_PASSWORD_HASH)
    return username_ok and password_ok
