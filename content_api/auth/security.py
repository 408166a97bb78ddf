"""Password hashing and admin token helpers."""

from datetime import UTC, datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from content_api.auth.config import AuthConfig


class InvalidTokenError(Exception):
    """The bearer token is malformed, forged or expired."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def create_access_token(admin_id: str, config: AuthConfig, now: datetime | None = None) -> str:
    """Sign a token identifying ``admin_id``, valid for the configured lifetime."""
    issued_at = now or datetime.now(UTC)
    payload = {
        "sub": admin_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=config.jwt_expires_hours),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: AuthConfig) -> str:
    """Return the admin id a token was issued for.

    Raises:
        InvalidTokenError: If the token cannot be verified or has expired.
    """
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e
    subject = payload.get("sub")
    if not subject:
        msg = "Token has no subject"
        raise InvalidTokenError(msg)
    return subject
