"""Shared helpers."""

from .security import (
    AuthenticationError,
    TokenPayload,
    bearer_token,
    create_access_token,
    decode_access_token,
    hash_password,
    needs_rehash,
    verify_password,
)

__all__ = [
    "AuthenticationError",
    "TokenPayload",
    "bearer_token",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
