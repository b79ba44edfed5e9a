"""Couche d'accès aux données (Supabase) pour le domaine Utilisateurs.
Table users: id, username (unique), password (hash bcrypt), dob, address,
watchlist (JSON: ids de contenus), refresh_token, created_at, updated_at, version.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from vodshop.infra import documents

TABLE = "users"

PRIVATE_FIELDS = ("password", "refresh_token")

def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    if not user_id:
        return None
    return documents.find_by_id(TABLE, user_id)

def get_user_by_username(username: str) -> Optional[Dict[str, Any]]:
    if not username:
        return None
    return documents.find_one(TABLE, username=username)

def get_user_by_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    return documents.find_one(TABLE, refresh_token=token)

def create_user(username: str, password_hash: str, dob: Optional[str] = None, address: Optional[str] = None) -> Dict[str, Any]:
    """Insère un utilisateur (watchlist vide, version 1). La contrainte unique sur username peut lever APIError 23505."""
    now = datetime.now(timezone.utc).isoformat()
    return documents.insert_one(TABLE, {
        "username": username,
        "password": password_hash,
        "dob": dob,
        "address": address,
        "watchlist": [],
        "refresh_token": None,
        "created_at": now,
        "updated_at": now,
        "version": 1,
    })

def set_refresh_token(user_id: str, token: Optional[str]) -> None:
    """Remplace le refresh token stocké (login/refresh/logout). Dernière écriture gagnante."""
    (
        documents.collection(TABLE)
        .update({"refresh_token": token, "updated_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", user_id)
        .execute()
    )

def update_watchlist(user: Dict[str, Any], watchlist: List[str]) -> Dict[str, Any]:
    return documents.update_versioned(TABLE, user, {
        "watchlist": watchlist,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    })

def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Vue publique d'un utilisateur (sans hash ni refresh token)."""
    return {
        "id": user.get("id"),
        "username": user.get("username"),
        "dob": user.get("dob"),
        "address": user.get("address"),
        "watchlist": list(user.get("watchlist") or []),
    }
