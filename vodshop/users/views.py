from fastapi import APIRouter, Depends

from vodshop.errors import UserNotFound
from vodshop.utils.security import Identity, require_user
from . import repository as users_repository

api_router = APIRouter(prefix="/api/user", tags=["Users API"])

@api_router.get("/profile")
def api_profile(user: Identity = Depends(require_user)):
    """Profil de l'utilisateur courant (sans hash ni refresh token)."""
    doc = users_repository.get_user_by_id(user.id)
    if not doc:
        raise UserNotFound()
    return users_repository.public_user(doc)
