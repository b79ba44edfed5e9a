"""
Cas d'usage 'payments': session Checkout hébergée, webhook de confirmation, lecture de session.
"""
from typing import Any, Dict, List, Optional
import logging

import stripe

from vodshop import config
from vodshop.cart import service as cart_service
from vodshop.checkout import service as checkout_service
from vodshop.content import repository as content_repository
from vodshop.errors import AppError, BadRequest, InternalError, MissingCorrelation, PaymentProviderError
from vodshop.utils.security import Identity
from . import cart as payments_cart
from . import metadata as payments_metadata
from .stripe_client import StripeGateway

logger = logging.getLogger(__name__)

COMPLETED_EVENT = "checkout.session.completed"

def _content_ref(item: Dict[str, Any]) -> Any:
    return item.get("contentId") if "contentId" in item else item.get("content_id")

def lines_from_body(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Lignes {name, price} depuis le corps de requête.
    - contentId peuplé ({title, ...}) => titre direct
    - contentId sous forme d'identifiant => titre relu dans le catalogue
    """
    ids = [str(_content_ref(it)) for it in items if isinstance(_content_ref(it), str)]
    contents = content_repository.get_contents_map(ids) if ids else {}
    lines = []
    for it in items:
        ref = _content_ref(it)
        if isinstance(ref, dict):
            name = ref.get("title")
        else:
            name = (contents.get(str(ref)) or {}).get("title")
        lines.append({"name": name or "Item", "price": it.get("price")})
    return lines

def create_checkout_session(
    gateway: StripeGateway,
    user: Identity,
    items: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Prépare la session Stripe pour l'utilisateur authentifié.
    - items fournis: utilisés tels quels; sinon panier courant de l'utilisateur
    - jeton de corrélation = identité authentifiée (client_reference_id + metadata.user_id)
    - 500 "Stripe checkout failed" (erreur brute en detail) si le fournisseur échoue
    """
    cart = cart_service.load_cart(user.id)
    if items:
        lines = lines_from_body(items)
    else:
        lines = checkout_service.payment_lines(list((cart or {}).get("items") or []))

    line_items = payments_cart.to_line_items(lines, gateway.currency)
    metadata = payments_cart.make_metadata(user.id, (cart or {}).get("version"))
    try:
        session = gateway.create_session(
            payment_method_types=["card"],
            mode="payment",
            line_items=line_items,
            success_url=config.CHECKOUT_SUCCESS_URL,
            cancel_url=config.CHECKOUT_CANCEL_URL,
            client_reference_id=user.id,
            metadata=metadata,
        )
    except Exception as e:
        logger.exception("payments.create_session failed user_id=%s", user.id)
        raise PaymentProviderError(detail=str(e))
    logger.info("payments.session created user_id=%s session_id=%s lines=%s", user.id, session.get("id"), len(line_items))
    return {"url": session.get("url")}

def handle_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Webhook: seul checkout.session.completed est traité, le reste est acquitté.
    - 400 MissingCorrelation sans jeton (le fournisseur ne doit pas réessayer)
    - 500 sur toute erreur de création de commande / vidage (le fournisseur réessaie)
    """
    event_type = (event or {}).get("type")
    if event_type != COMPLETED_EVENT:
        logger.info("payments.webhook ignored type=%s", event_type)
        return {"received": True}

    payment = payments_metadata.extract_payment(event)
    user_id = payment["user_id"]
    if not user_id:
        logger.warning("payments.webhook missing correlation event_id=%s", event.get("id"))
        raise MissingCorrelation()

    try:
        order = checkout_service.fulfill_payment(
            user_id=user_id,
            payment_intent_id=payment["payment_intent_id"],
            amount_total=payment["amount_total"],
            currency=payment["currency"],
            expected_cart_version=payment["cart_version"],
        )
    except Exception as e:
        logger.exception("payments.webhook order creation failed user_id=%s", user_id)
        raise InternalError("Failed to create order", detail=str(e))
    return {"received": True, "orderId": (order or {}).get("id")}

def get_payment_details(gateway: StripeGateway, session_id: Optional[str]) -> Dict[str, Any]:
    if not session_id:
        raise BadRequest("session_id is required")
    try:
        return gateway.retrieve_session(session_id)
    except stripe.StripeError as e:
        raise PaymentProviderError(message=str(e) or "Unknown error", detail=str(e) or "Unknown error")
    except AppError:
        raise
    except Exception as e:
        logger.exception("payments.retrieve_session failed session_id=%s", session_id)
        raise PaymentProviderError(message=str(e) or "Unknown error", detail=str(e) or "Unknown error")
