"""
Lecture des champs utiles d'un événement checkout.session.completed.
"""
from typing import Any, Dict, Optional

# module vodshop.payments.metadata
def session_object(event: Dict[str, Any]) -> Dict[str, Any]:
    data = (event or {}).get("data") or {}
    return data.get("object") or {}

def correlation_token(session: Dict[str, Any]) -> Optional[str]:
    """client_reference_id, sinon metadata.user_id."""
    meta = session.get("metadata") or {}
    return session.get("client_reference_id") or meta.get("user_id") or None

def cart_version(session: Dict[str, Any]) -> Optional[int]:
    raw = (session.get("metadata") or {}).get("cart_version")
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None

def extract_payment(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extrait {user_id, cart_version, payment_intent_id, amount_total, currency} d'un event webhook.
    Tolérant: champ absent => None.
    """
    session = session_object(event)
    intent = session.get("payment_intent")
    if isinstance(intent, dict):
        intent = intent.get("id")
    return {
        "user_id": correlation_token(session),
        "cart_version": cart_version(session),
        "payment_intent_id": intent,
        "amount_total": session.get("amount_total"),
        "currency": session.get("currency"),
    }
