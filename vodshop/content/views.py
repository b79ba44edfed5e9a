"""Endpoints du catalogue (/api/content).
- Consultation publique: liste, catégorie, recherche, tri paginé, détail.
- Engagement authentifié: like/unlike, commentaires, critiques (films uniquement).
L'ordre de déclaration compte: /search et /sorted/... avant /{content_id}.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from vodshop.utils.security import Identity, require_user
from . import service as content_service
from .models import TextBody

router = APIRouter(prefix="/api/content", tags=["Content API"])

@router.get("")
def list_content():
    return content_service.list_all()

@router.get("/search")
def search_content(q: Optional[str] = None):
    return content_service.search(q)

@router.get("/sorted/{category}")
def sorted_content(
    category: str,
    q: Optional[str] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
):
    return content_service.sorted_content(category, q=q, sort=sort, order=order, page=page, limit=limit)

@router.get("/category/{category}")
def content_by_category(category: str):
    return content_service.list_by_category(category)

@router.get("/{content_id}")
def content_by_id(content_id: str):
    return content_service.get_by_id(content_id)

@router.post("/{content_id}/like")
def like_content(content_id: str, user: Identity = Depends(require_user)):
    return content_service.like(user, content_id)

@router.delete("/{content_id}/like")
def unlike_content(content_id: str, user: Identity = Depends(require_user)):
    return content_service.unlike(user, content_id)

@router.post("/{content_id}/comment")
def comment_content(content_id: str, body: TextBody, user: Identity = Depends(require_user)):
    return content_service.add_comment(user, content_id, body.text)

@router.get("/{content_id}/comments")
def content_comments(content_id: str):
    return content_service.get_comments(content_id)

@router.post("/{content_id}/review")
def review_content(content_id: str, body: TextBody, user: Identity = Depends(require_user)):
    return content_service.add_review(user, content_id, body.text)

@router.get("/{content_id}/reviews")
def content_reviews(content_id: str):
    return content_service.get_reviews(content_id)
