"""
Security Utilities

Operator JWT tokens, proxy key generation and hashing.
"""

import hashlib
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from app.config.settings import settings


PROXY_KEY_ALPHABET = string.ascii_letters + string.digits


def create_access_token(
    data: dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token (``sub`` is the owner id)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """Decode and validate a JWT token.

    Args:
        token: JWT token to decode

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def generate_proxy_key(
    prefix: Optional[str] = None, length: Optional[int] = None
) -> tuple[str, str]:
    """Generate a new proxy key and its hash.

    Args:
        prefix: Visible tag in front of the key. Defaults to
                settings.PROXY_KEY_PREFIX.
        length: Number of random characters after the prefix. Defaults to
                settings.PROXY_KEY_LENGTH.

    Returns:
        Tuple of (plain_key, hashed_key)
        - plain_key: The key to give to the caller (shown only once)
        - hashed_key: The hash to store in the database
    """
    key_prefix = prefix if prefix is not None else settings.PROXY_KEY_PREFIX
    key_length = length or settings.PROXY_KEY_LENGTH
    key_body = "".join(secrets.choice(PROXY_KEY_ALPHABET) for _ in range(key_length))
    plain_key = f"{key_prefix}{key_body}"

    return plain_key, hash_proxy_key(plain_key)


def hash_proxy_key(proxy_key: str) -> str:
    """Hash a proxy key for storage and lookup.

    Args:
        proxy_key: Plain proxy key

    Returns:
        SHA-256 hex digest of the key
    """
    return hashlib.sha256(proxy_key.encode()).hexdigest()


def mask_proxy_key(proxy_key: str) -> str:
    """Get the displayable, masked form of a proxy key.

    Args:
        proxy_key: Full proxy key

    Returns:
        Prefix with masked remainder (e.g., "sk_live_ab...wxyz")
    """
    visible = len(settings.PROXY_KEY_PREFIX) + 2
    if len(proxy_key) > visible + 4:
        return f"{proxy_key[:visible]}...{proxy_key[-4:]}"
    return proxy_key[:visible] + "..."
