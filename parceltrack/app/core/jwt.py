"""
JWT access tokens.

Tokens carry the user's email as ``sub`` plus ``user_id`` and ``role``.
Authorization still re-reads the user from the database on every request,
so the role claim is informational.
"""

from datetime import timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from parceltrack.app.core.clock import utcnow
from parceltrack.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign ``data`` into an access token.
    
    Args:
        data: Claims to encode, e.g. ``{"sub": "rita@parcels.io", "user_id": 3, "role": "receiver"}``
        expires_delta: Lifetime override; defaults to ``access_token_expire_minutes``
    """
    issued_at = utcnow()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    
    claims = dict(data)
    claims.update({"iat": issued_at, "exp": issued_at + lifetime})
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the verified claims, or None for a bad signature or an expired token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
