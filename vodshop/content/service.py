"""Cas d'usage du catalogue: consultation (filtres simples) et engagement (likes, commentaires, critiques).
Chaque mutation suit « lire, modifier en mémoire, réécrire » avec contrôle de version.
"""
from datetime import datetime, timezone
from math import ceil
from typing import Any, Dict, List, Optional
import logging

from vodshop.errors import (
    AlreadyLiked,
    BadRequest,
    Conflict,
    ContentNotFound,
    NotLiked,
    ReviewsNotAllowed,
    VersionConflict,
)
from vodshop.utils.security import Identity
from vodshop.utils.validators import validate_object_id
from . import repository
from .models import CATEGORIES, Category, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SORTABLE_FIELDS

logger = logging.getLogger(__name__)

CONTENT_CONFLICT = "Conflict: Content was updated elsewhere. Please try again."

def _validate_category(category: str) -> str:
    value = (category or "").strip().lower()
    if value not in CATEGORIES:
        raise BadRequest(f"Invalid category (expected one of: {', '.join(CATEGORIES)})")
    return value

def _load(content_id: str) -> Dict[str, Any]:
    content = repository.get_content(validate_object_id(content_id, "content id"))
    if not content:
        raise ContentNotFound()
    return content

def _save(content: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return repository.update_engagement(content, changes)
    except VersionConflict:
        raise Conflict(CONTENT_CONFLICT)

def _entry(user: Identity, text: str) -> Dict[str, Any]:
    return {"user_id": user.id, "text": text, "created_at": datetime.now(timezone.utc).isoformat()}

# --- Consultation ---

def list_all() -> List[Dict[str, Any]]:
    return repository.list_content()

def list_by_category(category: str) -> List[Dict[str, Any]]:
    return repository.list_by_category(_validate_category(category))

def get_by_id(content_id: str) -> Dict[str, Any]:
    return _load(content_id)

def search(q: Optional[str]) -> List[Dict[str, Any]]:
    if not q or not q.strip():
        raise BadRequest("Search query is required")
    return repository.search_content(q.strip())

def sorted_content(
    category: str,
    q: Optional[str] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Filtre (category | all) + recherche + tri + pagination.
    - sort inconnu => tri par défaut created_at desc
    - page >= 1, 1 <= limit <= MAX_PAGE_SIZE (valeurs invalides => défauts)
    """
    cat = None if (category or "").lower() == "all" else _validate_category(category)

    sort_field = (sort or "").strip()
    if sort_field in SORTABLE_FIELDS:
        desc = (order or "").lower() == "desc"
    else:
        sort_field, desc = "created_at", True

    page_num = max(1, _to_int(page, 1))
    limit_num = min(MAX_PAGE_SIZE, max(1, _to_int(limit, DEFAULT_PAGE_SIZE)))
    offset = (page_num - 1) * limit_num

    items, total = repository.sorted_page(
        category=cat,
        q=(q or "").strip() or None,
        sort=sort_field,
        desc=desc,
        offset=offset,
        limit=limit_num,
    )
    return {
        "meta": {"total": total, "page": page_num, "limit": limit_num, "totalPages": ceil(total / limit_num)},
        "items": items,
    }

def _to_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default

# --- Engagement ---

def like(user: Identity, content_id: str) -> Dict[str, Any]:
    content = _load(content_id)
    likes = [str(u) for u in (content.get("likes") or [])]
    if user.id in likes:
        raise AlreadyLiked()
    likes.append(user.id)
    saved = _save(content, {"likes": likes})
    return {"message": "Content liked", "likes": saved.get("likes", likes)}

def unlike(user: Identity, content_id: str) -> Dict[str, Any]:
    content = _load(content_id)
    likes = [str(u) for u in (content.get("likes") or [])]
    if user.id not in likes:
        raise NotLiked()
    likes = [u for u in likes if u != user.id]
    saved = _save(content, {"likes": likes})
    return {"message": "Content unliked", "likes": saved.get("likes", likes)}

def add_comment(user: Identity, content_id: str, text: str) -> Dict[str, Any]:
    content = _load(content_id)
    comments = list(content.get("comments") or [])
    comments.append(_entry(user, text))
    saved = _save(content, {"comments": comments})
    return {"message": "Comment added", "comments": saved.get("comments", comments)}

def get_comments(content_id: str) -> Dict[str, Any]:
    content = _load(content_id)
    return {"comments": list(content.get("comments") or [])}

def add_review(user: Identity, content_id: str, text: str) -> Dict[str, Any]:
    content = _load(content_id)
    if content.get("category") != Category.MOVIE.value:
        raise ReviewsNotAllowed()
    reviews = list(content.get("reviews") or [])
    reviews.append(_entry(user, text))
    saved = _save(content, {"reviews": reviews})
    return {"message": "Review added", "reviews": saved.get("reviews", reviews)}

def get_reviews(content_id: str) -> Dict[str, Any]:
    content = _load(content_id)
    if content.get("category") != Category.MOVIE.value:
        raise BadRequest("No reviews for this content")
    return {"reviews": list(content.get("reviews") or [])}
