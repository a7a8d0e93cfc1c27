"""Password hashing and access-token encoding for back-office principals."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from backoffice.config import settings
from backoffice.core.auth.schemas import TokenData


ACCESS_TOKEN_TYPE = "access"
TOKEN_ISSUER = "storefront-backoffice"
TOKEN_ID_BYTES = 32

# Hashes made with a different cost factor are flagged for upgrade on next login
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
    bcrypt__min_rounds=settings.bcrypt_rounds,
    bcrypt__max_rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def verify_and_rehash(plain_password: str, hashed_password: str) -> tuple[bool, str | None]:
    """Check a password and produce a replacement hash if the stored one is outdated.

    Returns:
        ``(matches, new_hash)``; ``new_hash`` is None unless the password
        matched and the stored hash uses outdated bcrypt settings.
    """
    return pwd_context.verify_and_update(plain_password, hashed_password)


def create_access_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """Sign a short-lived access token naming ``user_id`` as its subject.

    Every token carries a random ``jti`` so two tokens issued in the same
    second are still distinct.
    """
    issued_at = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims: dict[str, Any] = {
        "sub": str(user_id),
        "iss": TOKEN_ISSUER,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "jti": secrets.token_urlsafe(TOKEN_ID_BYTES),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenData | None:
    """Verify signature, expiry and issuer; None for anything unusable."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=TOKEN_ISSUER,
        )
        subject = payload.get("sub")
        expires = payload.get("exp")
        if not subject or expires is None:
            return None
        return TokenData(
            user_id=UUID(subject),
            exp=datetime.fromtimestamp(expires, tz=UTC),
            type=payload.get("type", ACCESS_TOKEN_TYPE),
        )
    except (JWTError, ValueError):
        return None
