"""Cas d'usage Auth: inscription, connexion, rafraîchissement et déconnexion.
Les mots de passe sont hachés avec bcrypt; les jetons sont émis par vodshop.auth.tokens.
"""
from typing import Any, Dict, Optional
import logging

import bcrypt
import jwt

from vodshop.errors import BadRequest, Forbidden, Unauthorized
from vodshop.infra.documents import is_unique_violation
from vodshop.users import repository as users_repository
from .tokens import create_access_token, create_refresh_token, decode_refresh_token

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")

def check_password(password: str, hashed: Optional[str]) -> bool:
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Hash stocké illisible
        return False

# --- Cas d’usage Auth exposés ---

def register(username: str, password: str, dob: Optional[str] = None, address: Optional[str] = None) -> Dict[str, Any]:
    """Inscription:
    - Refuse un username déjà pris (vérification + contrainte unique côté store)
    - Stocke uniquement le hash bcrypt
    """
    username = (username or "").strip()
    if users_repository.get_user_by_username(username):
        raise BadRequest("Username already taken")
    try:
        user = users_repository.create_user(username, hash_password(password), dob=dob, address=address)
    except Exception as e:
        if is_unique_violation(e):
            raise BadRequest("Username already taken")
        raise
    logger.info("auth.register user_id=%s", user.get("id"))
    return users_repository.public_user(user)

def login(username: str, password: str) -> Dict[str, Any]:
    """Connexion:
    - Vérifie le hash bcrypt
    - Émet access + refresh token et mémorise le refresh token sur l'utilisateur
    """
    user = users_repository.get_user_by_username((username or "").strip())
    if not user or not check_password(password, user.get("password")):
        raise Unauthorized("Invalid credentials")

    user_id = str(user["id"])
    access_token = create_access_token(user_id, user.get("username") or "")
    refresh_token = create_refresh_token(user_id, user.get("username") or "")
    users_repository.set_refresh_token(user_id, refresh_token)
    return {
        "accessToken": access_token,
        "refreshToken": refresh_token,
        "user": users_repository.public_user(user),
    }

def refresh(token: Optional[str]) -> Dict[str, Any]:
    """Rafraîchissement:
    - 401 si le token est absent
    - 403 si le token n'appartient à aucun utilisateur, est expiré ou ne correspond pas
    """
    if not token:
        raise Unauthorized("Refresh token required")
    user = users_repository.get_user_by_refresh_token(token)
    if not user:
        raise Forbidden("Invalid refresh token")
    try:
        claims = decode_refresh_token(token)
    except jwt.PyJWTError:
        raise Forbidden("Invalid refresh token")
    if str(claims.get("sub")) != str(user.get("id")):
        raise Forbidden("Invalid refresh token")
    return {"accessToken": create_access_token(str(user["id"]), user.get("username") or "")}

def logout(token: Optional[str]) -> None:
    """Déconnexion: oublie le refresh token stocké (no-op si inconnu)."""
    if not token:
        return
    user = users_repository.get_user_by_refresh_token(token)
    if user:
        users_repository.set_refresh_token(str(user["id"]), None)
