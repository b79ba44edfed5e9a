"""
Logique panier -> Stripe pure (pas d'appel Stripe, pas de DB).
"""
from typing import Any, Dict, List, Optional

from vodshop.errors import BadRequest

# module vodshop.payments.cart
def price_of(item: Dict[str, Any]) -> float:
    try:
        return float(item.get("price") or 0)
    except (TypeError, ValueError):
        return 0.0

def to_line_items(lines: List[Dict[str, Any]], currency: str = "usd") -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe à partir de lignes {name, price}.
    - unit_amount en plus petite unité monétaire (centimes), quantité fixée à 1
    - 400 si aucune ligne n'est fournie
    """
    if not lines:
        raise BadRequest("No items to checkout")
    line_items: List[Dict[str, Any]] = []
    for line in lines:
        line_items.append({
            "quantity": 1,
            "price_data": {
                "currency": currency,
                "unit_amount": int(round(price_of(line) * 100)),
                "product_data": {"name": line.get("name") or "Item"},
            },
        })
    return line_items

def make_metadata(user_id: str, cart_version: Optional[int] = None) -> Dict[str, str]:
    """
    Métadonnées de session (valeurs str exigées par Stripe).
    - user_id: jeton de corrélation, relu par le webhook
    - cart_version: version du panier à la création de la session (détection de dérive)
    """
    meta = {"user_id": str(user_id)}
    if cart_version is not None:
        meta["cart_version"] = str(cart_version)
    return meta
