"""
Accès aux données pour la feature 'cart'.
Table carts: id, user_id (unique: un panier par utilisateur), items (JSON), version.
"""
from typing import Any, Dict, List, Optional

from vodshop.infra import documents

TABLE = "carts"

# module vodshop.cart.repository
def get_cart_by_user(user_id: str) -> Optional[Dict[str, Any]]:
    if not user_id:
        return None
    return documents.find_one(TABLE, user_id=user_id)

def create_cart(user_id: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Création paresseuse au premier ajout. Deux créations concurrentes => violation d'unicité sur user_id."""
    return documents.insert_one(TABLE, {"user_id": user_id, "items": items, "version": 1})

def save_items(cart: Dict[str, Any], items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Réécrit la liste d'items si la version lue est toujours la version courante."""
    return documents.update_versioned(TABLE, cart, {"items": items})
