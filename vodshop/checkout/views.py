from fastapi import APIRouter, Depends

from vodshop.utils.rate_limit import optional_rate_limit
from vodshop.utils.security import Identity, require_user
from . import service as checkout_service

router = APIRouter(prefix="/api/checkout", tags=["Checkout API"])

# module vodshop.checkout.views
@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def checkout(user: Identity = Depends(require_user)):
    """
    Crée la commande à partir du panier courant.
    - 400 panier vide, 409 conflit de version (à resoumettre), 500 erreur interne
    """
    return checkout_service.checkout(user)
