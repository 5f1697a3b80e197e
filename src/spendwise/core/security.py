"""JWT handling for caller identities.

Tokens are issued by the external identity provider and signed with the
shared secret. The service only verifies them and reads the identity
claims; ``create_access_token`` exists for local development and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from spendwise.config import settings


@dataclass(frozen=True)
class IdentityClaims:
    """Authenticated identity extracted from a verified token."""

    subject: str
    email: str
    display_name: str | None = None


def create_access_token(
    subject: str,
    email: str,
    display_name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed identity token.

    Args:
        subject: Stable identity-provider subject
        email: Verified email of the identity
        display_name: Optional display name
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_access_expire_minutes)

    expire = datetime.now(timezone.utc) + expires_delta
    to_encode: dict[str, Any] = {
        "sub": subject,
        "email": email,
        "exp": expire,
        "type": "access",
    }
    if display_name:
        to_encode["name"] = display_name
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a JWT token.

    Raises:
        JWTError: If token is invalid or expired
    """
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def get_identity_from_token(token: str) -> IdentityClaims:
    """
    Extract the caller identity from a JWT token.

    Args:
        token: JWT token string

    Returns:
        IdentityClaims with subject, normalized email and display name

    Raises:
        JWTError: If token is invalid, expired, or missing identity claims
    """
    payload = decode_token(token)
    subject = payload.get("sub")
    email = payload.get("email")
    if not subject:
        raise JWTError("Token missing 'sub' claim")
    if not isinstance(email, str) or not email.strip():
        raise JWTError("Token missing 'email' claim")
    return IdentityClaims(
        subject=str(subject),
        email=email.strip().lower(),
        display_name=payload.get("name"),
    )
