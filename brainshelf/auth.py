"""
Identity tokens for Brainshelf.

A signed JWT carries the identity id between app launches so a returning
user keeps the same identity.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from brainshelf.config import settings
from brainshelf.errors import IdentityProviderError


def create_identity_token(identity_id: str, is_anonymous: bool) -> str:
    """
    Create a token for an identity.

    Args:
        identity_id: Identity id to encode in the token
        is_anonymous: Whether the identity is anonymous

    Returns:
        Signed JWT string
    """
    now = datetime.now(UTC)
    payload = {
        "sub": identity_id,
        "anon": is_anonymous,
        "exp": now + timedelta(hours=settings.IDENTITY_TOKEN_EXPIRY_HOURS),
        "iat": now,
    }
    return jwt.encode(payload, settings.IDENTITY_TOKEN_SECRET, algorithm=settings.IDENTITY_TOKEN_ALGORITHM)


def decode_identity_token(token: str) -> dict:
    """
    Decode and verify an identity token.

    Args:
        token: JWT string to decode

    Returns:
        Decoded payload

    Raises:
        IdentityProviderError: If token is invalid, expired, or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.IDENTITY_TOKEN_SECRET,
            algorithms=[settings.IDENTITY_TOKEN_ALGORITHM],
        )
    except jwt.ExpiredSignatureError as e:
        raise IdentityProviderError("Session expired. Please sign in again.") from e
    except jwt.InvalidTokenError as e:
        raise IdentityProviderError("Invalid session token. Please sign in again.") from e

    if not payload.get("sub"):
        raise IdentityProviderError("Invalid session token. Please sign in again.")
    return payload
