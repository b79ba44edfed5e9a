"""
Accès aux données pour la feature 'orders' (table orders).
Colonnes: id, user_id, items (JSON), total, status, cart_cleared, payment_intent_id (unique),
amount_total, currency, created_at, version.

Une commande est un instantané: seule la marque `cart_cleared` (journal de compensation
entre « commande créée » et « panier vidé ») évolue après création.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from vodshop.infra import documents
from .models import OrderStatus

TABLE = "orders"

# module vodshop.orders.repository
def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

def insert_order(*, user_id: str, items: List[Dict[str, Any]], total: float, status: OrderStatus) -> Dict[str, Any]:
    return documents.insert_one(TABLE, {
        "user_id": user_id,
        "items": items,
        "total": total,
        "status": OrderStatus(status).value,
        "cart_cleared": False,
        "created_at": _now(),
        "version": 1,
    })

def insert_paid_order(
    *,
    user_id: str,
    items: List[Dict[str, Any]],
    total: float,
    payment_intent_id: Optional[str],
    amount_total: Optional[int],
    currency: Optional[str],
) -> Optional[Dict[str, Any]]:
    """
    Commande payée issue du webhook.
    - Idempotente sur payment_intent_id: retourne None si ce paiement a déjà produit une commande.
    """
    doc = {
        "user_id": user_id,
        "items": items,
        "total": total,
        "status": OrderStatus.PAID.value,
        "cart_cleared": False,
        "payment_intent_id": payment_intent_id,
        "amount_total": amount_total,
        "currency": currency,
        "created_at": _now(),
        "version": 1,
    }
    if not payment_intent_id:
        return documents.insert_one(TABLE, doc)
    return documents.insert_unique(TABLE, doc, on_conflict="payment_intent_id")

def mark_cart_cleared(order: Dict[str, Any]) -> Dict[str, Any]:
    return documents.update_versioned(TABLE, order, {"cart_cleared": True})

def mark_aborted(order: Dict[str, Any]) -> Dict[str, Any]:
    return documents.update_versioned(TABLE, order, {"status": OrderStatus.ABORTED.value})

def list_user_orders(user_id: str) -> List[Dict[str, Any]]:
    res = (
        documents.collection(TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return res.data or []

def list_pending_clear(limit: int = 100) -> List[Dict[str, Any]]:
    """Commandes (completed/paid) dont le vidage du panier n'a pas été confirmé. Les 'aborted' sont exclues."""
    res = (
        documents.collection(TABLE)
        .select("*")
        .eq("cart_cleared", False)
        .in_("status", [OrderStatus.COMPLETED.value, OrderStatus.PAID.value])
        .order("created_at", desc=False)
        .limit(limit)
        .execute()
    )
    return res.data or []

def get_by_payment_intent(payment_intent_id: str) -> Optional[Dict[str, Any]]:
    if not payment_intent_id:
        return None
    return documents.find_one(TABLE, payment_intent_id=payment_intent_id)

def delete_order(order: Dict[str, Any]) -> None:
    """Action compensatoire: retire une commande dont le vidage de panier a échoué."""
    documents.collection(TABLE).delete().eq("id", str(order.get("id"))).execute()
