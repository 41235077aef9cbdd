"""Password hashing and access tokens for signed-in ground staff."""

from __future__ import annotations

import base64
import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from trolleyseal.config.settings import settings

PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 260_000
_SALT_BYTES = 16


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, *, iterations: int = PASSWORD_ITERATIONS) -> str:
    """Return ``scheme$iterations$salt$digest`` for storage on the profile."""

    salt = os.urandom(_SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return f"{PASSWORD_SCHEME}${iterations}${_b64(salt)}${_b64(digest)}"


def verify_password(password: str, stored: str) -> bool:
    """Check ``password`` against a stored hash; malformed hashes never match."""

    try:
        scheme, iterations, salt, digest = stored.split("$")
        if scheme != PASSWORD_SCHEME:
            return False
        candidate = _derive(password, base64.b64decode(salt), int(iterations))
        return hmac.compare_digest(candidate, base64.b64decode(digest))
    except (AttributeError, ValueError, TypeError):
        return False


def needs_rehash(stored: str) -> bool:
    """True when the stored hash uses fewer iterations than the current default."""

    try:
        scheme, iterations, _, _ = stored.split("$")
        return scheme != PASSWORD_SCHEME or int(iterations) < PASSWORD_ITERATIONS
    except (AttributeError, ValueError):
        return True


class AuthenticationError(Exception):
    """Raised when an access token is missing, malformed or expired."""


class TokenPayload(BaseModel):
    sub: str
    exp: datetime
    iat: Optional[datetime] = None
    name: Optional[str] = None
    staff: Optional[str] = None

    @property
    def user_id(self) -> int:
        try:
            return int(self.sub)
        except ValueError:
            raise AuthenticationError("Token subject is not a profile id") from None


def create_access_token(
    subject: str,
    name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    *,
    staff_number: Optional[str] = None,
) -> str:
    """Sign a token naming the profile id; ``name`` is shown on reports."""

    issued = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(
        minutes=settings.security.access_token_expires_minutes
    )
    claims: dict[str, Any] = {"sub": str(subject), "iat": issued, "exp": issued + lifetime}
    if name:
        claims["name"] = name
    if staff_number:
        claims["staff"] = staff_number
    return jwt.encode(
        claims,
        settings.security.jwt_secret_key.get_secret_value(),
        algorithm=settings.security.jwt_algorithm,
    )


def decode_access_token(token: str) -> TokenPayload:
    try:
        claims = jwt.decode(
            token,
            settings.security.jwt_secret_key.get_secret_value(),
            algorithms=[settings.security.jwt_algorithm],
        )
        return TokenPayload.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        raise AuthenticationError("Invalid authentication token") from exc


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer ...`` header value."""

    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


__all__ = [
    "AuthenticationError",
    "PASSWORD_ITERATIONS",
    "TokenPayload",
    "bearer_token",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
