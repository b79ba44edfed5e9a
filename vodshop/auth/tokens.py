"""
Émission / vérification des jetons de session (PyJWT, HS256).
- access token: courte durée, signé avec JWT_SECRET, porte sub (id utilisateur) et username
- refresh token: longue durée, signé avec JWT_REFRESH_SECRET, stocké côté utilisateur
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import uuid4

import jwt

from vodshop import config

ACCESS = "access"
REFRESH = "refresh"

# module vodshop.auth.tokens
def _encode(user_id: str, username: str, kind: str, secret: str, ttl_seconds: int) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "type": kind,
        "iat": now,
        "exp": now + timedelta(seconds=ttl_seconds),
        "jti": uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=config.JWT_ALGORITHM)

def _decode(token: str, kind: str, secret: str) -> Dict[str, Any]:
    claims = jwt.decode(token, secret, algorithms=[config.JWT_ALGORITHM], options={"require": ["exp", "sub"]})
    if claims.get("type") != kind:
        raise jwt.InvalidTokenError(f"expected a {kind} token")
    return claims

def create_access_token(user_id: str, username: str) -> str:
    return _encode(user_id, username, ACCESS, config.JWT_SECRET, config.ACCESS_TOKEN_TTL_SECONDS)

def create_refresh_token(user_id: str, username: str) -> str:
    return _encode(user_id, username, REFRESH, config.JWT_REFRESH_SECRET, config.REFRESH_TOKEN_TTL_SECONDS)

def decode_access_token(token: str) -> Dict[str, Any]:
    """Retourne les claims; lève jwt.PyJWTError si signature/expiration/type invalide."""
    return _decode(token, ACCESS, config.JWT_SECRET)

def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, REFRESH, config.JWT_REFRESH_SECRET)
