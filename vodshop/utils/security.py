from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Request

from vodshop.auth.tokens import decode_access_token
from vodshop.errors import Unauthorized
from vodshop.users import repository as users_repository


@dataclass(frozen=True)
class Identity:
    """Identité authentifiée transmise par valeur aux cas d'usage (id + claims minimaux)."""
    id: str
    username: str = ""


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None

def get_current_user(request: Request) -> Identity:
    """
    Vérifie le Bearer token et recharge l'utilisateur.
    - 401 si absent, invalide/expiré, ou si l'utilisateur n'existe plus.
    """
    token = _bearer_token(request)
    if not token:
        raise Unauthorized("Not authorized, no token")

    try:
        claims = decode_access_token(token)
    except jwt.PyJWTError:
        raise Unauthorized("Not authorized, token failed")

    user = users_repository.get_user_by_id(claims.get("sub"))
    if not user:
        raise Unauthorized("User not found")
    return Identity(id=str(user["id"]), username=user.get("username") or "")

def require_user(user: Identity = Depends(get_current_user)) -> Identity:
    return user
