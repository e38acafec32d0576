"""
Security utilities for password hashing and session token management.

Default hashing uses ``pbkdf2_sha256`` for stable cross-platform behavior in
tests and local development. ``bcrypt`` verification is still supported for
hashes carried over from older deployments.

Session tokens are HS256 JWTs holding the claims the session gate reads:
``id``, ``role``, ``lastActivity`` and ``serverStartTime`` (both epoch
milliseconds) plus the standard ``exp``.
"""

import secrets
import string
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from realty.core.config import settings
from realty.core.server_epoch import get_server_start_time
from realty.models.user import UserRole, normalize_role

# Prefer pbkdf2 for new hashes while still verifying legacy bcrypt hashes.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

_PASSWORD_SYMBOLS = "!@#$%^&*"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def create_session_token(
    user_id: str,
    role: UserRole | str,
    email: str | None = None,
    name: str | None = None,
    last_activity: int | None = None,
    server_start_time: int | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed session token.

    Args:
        user_id: Subject identifier
        role: Role in any casing; stored in canonical form
        email: Optional email shown in page headers
        name: Optional display name
        last_activity: Epoch ms of the last activity (defaults to now)
        server_start_time: Boot marker to embed (defaults to this process)
        expires_delta: Optional custom lifetime

    Returns:
        Encoded JWT string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.SESSION_MAX_AGE_MINUTES)

    canonical_role = normalize_role(role)
    to_encode: dict[str, Any] = {
        "id": str(user_id),
        "sub": str(user_id),
        "role": canonical_role.value if canonical_role else None,
        "email": email,
        "name": name,
        "lastActivity": last_activity if last_activity is not None else now_ms(),
        "serverStartTime": (
            server_start_time if server_start_time is not None else get_server_start_time()
        ),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify a token's signature and expiry and return its claims.

    Raises:
        JWTError: If the token is malformed, tampered with or expired
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def try_decode_session_token(token: Optional[str]) -> Optional[dict[str, Any]]:
    """Decode a token, returning None instead of raising."""
    if not token:
        return None
    try:
        return decode_session_token(token)
    except JWTError:
        return None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using the configured default scheme."""
    return pwd_context.hash(password)


def generate_temporary_password(length: int = 12) -> str:
    """
    Generate a one-time password for admin resets and new accounts.

    At least one lowercase letter, one uppercase letter, one digit and one
    symbol are always present.
    """
    charset = string.ascii_letters + string.digits + _PASSWORD_SYMBOLS
    chars = [
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.digits),
        secrets.choice(_PASSWORD_SYMBOLS),
    ]
    chars.extend(secrets.choice(charset) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
