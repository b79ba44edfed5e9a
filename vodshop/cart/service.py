"""
Cas d'usage 'cart': un panier par utilisateur, créé paresseusement au premier ajout.
Toutes les écritures sont versionnées: une écriture concurrente est signalée (409), jamais fusionnée.
"""
from typing import Any, Dict, List, Optional
import logging

from vodshop.content import repository as content_repository
from vodshop.errors import (
    CartNotFound,
    Conflict,
    ContentNotFound,
    DuplicateItem,
    ItemNotFound,
    VersionConflict,
)
from vodshop.infra.documents import is_unique_violation
from vodshop.utils.security import Identity
from vodshop.utils.validators import validate_object_id
from . import repository
from .models import Kind, find_duplicate, index_of, make_item

logger = logging.getLogger(__name__)

def _summary(content: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": content.get("id"),
        "title": content.get("title"),
        "category": content.get("category"),
        "price": content.get("price"),
        "thumbnail": content.get("thumbnail"),
    }

def _present(cart: Dict[str, Any], populate: bool = True) -> Dict[str, Any]:
    """Forme JSON du panier; items enrichis d'un résumé du contenu si demandé."""
    items = [dict(it) for it in (cart.get("items") or [])]
    if populate and items:
        contents = content_repository.get_contents_map(str(it.get("content_id")) for it in items)
        for it in items:
            content = contents.get(str(it.get("content_id")))
            it["content"] = _summary(content) if content else None
    return {
        "id": cart.get("id"),
        "user_id": cart.get("user_id"),
        "items": items,
        "version": cart.get("version"),
    }

def _save(cart: Dict[str, Any], items: List[Dict[str, Any]]) -> Dict[str, Any]:
    try:
        return repository.save_items(cart, items)
    except VersionConflict:
        raise Conflict()

def load_cart(user_id: str) -> Optional[Dict[str, Any]]:
    """Document panier brut (ou None). Utilisé par le checkout et le webhook de paiement."""
    return repository.get_cart_by_user(user_id)

def get_cart(user: Identity) -> Dict[str, Any]:
    """Panier courant; panier vide transitoire (non persisté) si l'utilisateur n'en a pas encore."""
    cart = repository.get_cart_by_user(user.id)
    if not cart:
        return {"id": None, "user_id": user.id, "items": [], "version": None}
    return _present(cart)

def add_item(user: Identity, content_id: str, kind: Kind, price: float) -> Dict[str, Any]:
    """
    Ajoute une ligne (content_id, kind, prix fourni par l'appelant).
    - 400 DuplicateItem si le couple (content_id, kind) est déjà présent
    - 404 si le contenu n'existe pas
    - 409 si le panier a changé entre lecture et écriture
    """
    content_id = validate_object_id(content_id, "content id")
    if not content_repository.get_content(content_id):
        raise ContentNotFound()

    item = make_item(content_id, kind, price)
    cart = repository.get_cart_by_user(user.id)
    if not cart:
        try:
            created = repository.create_cart(user.id, [item])
        except Exception as e:
            if is_unique_violation(e):
                raise Conflict()
            raise
        logger.info("cart.created user_id=%s cart_id=%s", user.id, created.get("id"))
        return _present(created)

    items = list(cart.get("items") or [])
    if find_duplicate(items, content_id, kind):
        raise DuplicateItem()
    items.append(item)
    return _present(_save(cart, items))

def remove_item(user: Identity, item_id: str) -> Dict[str, Any]:
    cart = repository.get_cart_by_user(user.id)
    if not cart:
        raise CartNotFound()
    items = list(cart.get("items") or [])
    index = index_of(items, str(item_id))
    if index == -1:
        raise ItemNotFound()
    items.pop(index)
    return {"message": "Item removed successfully", "cart": _present(_save(cart, items))}

def clear(user_id: str, cart: Optional[Dict[str, Any]] = None) -> None:
    """
    Vide la liste d'items (le document panier est conservé). Idempotent.
    - `cart`: document déjà lu par l'appelant; sa version sert de garde (409 si périmée).
    """
    if cart is None:
        cart = repository.get_cart_by_user(user_id)
    if not cart or not cart.get("items"):
        return
    _save(cart, [])

def remove_items(user_id: str, item_ids: List[str]) -> int:
    """
    Retire du panier courant les lignes listées (rejeu d'un vidage interrompu).
    Les lignes ajoutées depuis l'instantané sont conservées. Retourne le nombre de lignes retirées.
    """
    wanted = {str(i) for i in item_ids if i}
    cart = repository.get_cart_by_user(user_id)
    if not cart or not wanted:
        return 0
    items = list(cart.get("items") or [])
    kept = [it for it in items if str(it.get("id")) not in wanted]
    removed = len(items) - len(kept)
    if removed:
        _save(cart, kept)
    return removed
