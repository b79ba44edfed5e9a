from typing import Any, Dict, List

from vodshop.content import repository as content_repository
from vodshop.errors import AlreadyInWatchlist, Conflict, UserNotFound, VersionConflict
from vodshop.users import repository as users_repository
from vodshop.utils.security import Identity
from vodshop.utils.validators import validate_object_id

WATCHLIST_CONFLICT = "Conflict: Watchlist was updated elsewhere. Please try again."

def _load_user(user: Identity) -> Dict[str, Any]:
    doc = users_repository.get_user_by_id(user.id)
    if not doc:
        raise UserNotFound()
    return doc

def _save(doc: Dict[str, Any], watchlist: List[str]) -> List[str]:
    try:
        saved = users_repository.update_watchlist(doc, watchlist)
    except VersionConflict:
        raise Conflict(WATCHLIST_CONFLICT)
    return list(saved.get("watchlist") or watchlist)

def get_watchlist(user: Identity) -> Dict[str, Any]:
    """Watchlist peuplée avec les documents de contenu (les références orphelines sont ignorées)."""
    ids = [str(i) for i in (_load_user(user).get("watchlist") or [])]
    contents = content_repository.get_contents_map(ids)
    return {"watchlist": [contents[i] for i in ids if i in contents]}

def add(user: Identity, content_id: str) -> Dict[str, Any]:
    content_id = validate_object_id(content_id, "content id")
    doc = _load_user(user)
    watchlist = [str(i) for i in (doc.get("watchlist") or [])]
    if content_id in watchlist:
        raise AlreadyInWatchlist()
    watchlist.append(content_id)
    return {"message": "Content added to watchlist", "watchlist": _save(doc, watchlist)}

def remove(user: Identity, content_id: str) -> Dict[str, Any]:
    content_id = validate_object_id(content_id, "content id")
    doc = _load_user(user)
    watchlist = [str(i) for i in (doc.get("watchlist") or []) if str(i) != content_id]
    return {"message": "Content removed from watchlist", "watchlist": _save(doc, watchlist)}
