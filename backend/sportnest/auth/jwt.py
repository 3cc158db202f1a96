"""JWT token creation and verification for access and refresh tokens."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from sportnest.config import Settings


def _encode(data: dict, settings: Settings, token_type: str, lifetime: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + lifetime, "iat": now, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, settings: Settings, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Args:
        data: Payload data. Must include ``sub`` (user UUID as string) and
            ``role``.
        settings: Supplies the signing key, algorithm and default lifetime.
        expires_delta: Custom expiration duration.

    Returns:
        Encoded JWT string.
    """
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(data, settings, "access", lifetime)


def create_refresh_token(data: dict, settings: Settings, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(data, settings, "refresh", lifetime)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def create_token_pair(user_id: str, role: str, settings: Settings) -> dict[str, str]:
    """Create both access and refresh tokens for a user."""
    payload = {"sub": user_id, "role": role}
    return {
        "access_token": create_access_token(payload, settings),
        "refresh_token": create_refresh_token(payload, settings),
        "token_type": "bearer",
    }
