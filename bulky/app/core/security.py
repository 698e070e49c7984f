"""
Password hashing and JWT handling.

Passwords use bcrypt directly (passlib has incompatibilities with bcrypt 4.1+).
Tokens are HS256 JWTs; refresh tokens are persisted only as SHA-256 digests.
"""
import hashlib
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

import bcrypt
import jwt

from bulky.app.core.settings import get_settings

JWT_ALGORITHM = "HS256"

USER_TYPE_ADMIN = "ADMIN"
USER_TYPE_BUYER = "BUYER"
TOKEN_TYPE_REFRESH = "REFRESH"


def _to_bytes(password: str) -> bytes:
    """Convert password to bytes, truncate to 72 bytes (bcrypt limit)."""
    return str(password).encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_to_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    """Verify plain password against bcrypt hash. Malformed hashes never match."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def access_token_ttl_seconds() -> int:
    return get_settings().ACCESS_TOKEN_EXPIRE_HOURS * 3600


def create_access_token(
    user_id: uuid.UUID,
    user_type: str,
    email: str,
    role_kode: str = "",
    permissions: Optional[list[str]] = None,
) -> str:
    """Create an access token. Admin tokens carry role kode and permission kodes."""
    now = datetime.utcnow()
    payload = {
        "sub": str(user_id),
        "type": user_type,
        "email": email,
        "role_kode": role_kode,
        "permissions": permissions or [],
        "iat": now,
        "exp": now + timedelta(seconds=access_token_ttl_seconds()),
    }
    return jwt.encode(payload, get_settings().jwt_secret, algorithm=JWT_ALGORITHM)


def create_refresh_token(user_id: uuid.UUID, user_type: str) -> tuple[str, datetime]:
    """Create a refresh token and return it with its expiry."""
    now = datetime.utcnow()
    expires = now + timedelta(days=get_settings().REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {
        "sub": str(user_id),
        "type": TOKEN_TYPE_REFRESH,
        "user_type": user_type,
        # jti keeps two tokens issued in the same second distinct
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, get_settings().jwt_secret, algorithm=JWT_ALGORITHM), expires


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """Decode and verify a JWT. Returns None when invalid or expired."""
    try:
        return jwt.decode(token, get_settings().jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None
