from fastapi import APIRouter, Depends

from vodshop.utils.security import Identity, require_user
from . import repository as orders_repository

router = APIRouter(prefix="/api/orders", tags=["Orders API"])

@router.get("")
def list_orders(user: Identity = Depends(require_user)):
    """Historique des commandes de l'utilisateur courant, plus récentes d'abord."""
    return orders_repository.list_user_orders(user.id)
