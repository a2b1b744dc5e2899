# src/marketplace/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from jose import jwt
from passlib.context import CryptContext

from marketplace.core.config import settings

# --- Passwords ---
# bcrypt only; hashes are salted, so equal passwords never share a hash.
password_hasher = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt against the stored bcrypt hash."""
    return password_hasher.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return password_hasher.hash(password)


# --- Access tokens ---
# HS256 JWTs whose `sub` is the user's public uuid.

def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed access token.

    :param subject: Token owner, stored as a string in the `sub` claim.
    :param expires_delta: Lifetime override; defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(subject),
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Verify signature, algorithm and expiry, then return the claims.

    :raises jose.JWTError: on any invalid token; the authorization gate turns it into a 401.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
