from fastapi import APIRouter, Depends

from vodshop.utils.security import Identity, require_user
from . import service as watchlist_service

router = APIRouter(prefix="/api/watchlist", tags=["Watchlist API"])

@router.get("")
def get_watchlist(user: Identity = Depends(require_user)):
    return watchlist_service.get_watchlist(user)

@router.post("/{content_id}")
def add_to_watchlist(content_id: str, user: Identity = Depends(require_user)):
    return watchlist_service.add(user, content_id)

@router.delete("/{content_id}")
def remove_from_watchlist(content_id: str, user: Identity = Depends(require_user)):
    return watchlist_service.remove(user, content_id)
