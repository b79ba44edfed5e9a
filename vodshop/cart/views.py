from fastapi import APIRouter, Depends

from vodshop.utils.security import Identity, require_user
from . import service as cart_service
from .models import AddItemRequest

router = APIRouter(prefix="/api/cart", tags=["Cart API"])

@router.get("")
def get_cart(user: Identity = Depends(require_user)):
    return cart_service.get_cart(user)

@router.post("")
def add_to_cart(body: AddItemRequest, user: Identity = Depends(require_user)):
    """Ajoute {contentId, kind: rent|buy, price}; 400 si doublon (contentId, kind)."""
    return cart_service.add_item(user, body.content_id, body.kind, body.price)

@router.delete("")
def clear_cart(user: Identity = Depends(require_user)):
    cart_service.clear(user.id)
    return {"message": "Cart cleared"}

@router.delete("/{item_id}")
def remove_from_cart(item_id: str, user: Identity = Depends(require_user)):
    return cart_service.remove_item(user, item_id)
