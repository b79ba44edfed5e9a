import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from vodshop.utils.rate_limit import optional_rate_limit
from vodshop.utils.security import Identity, require_user
from . import service as payments_service
from .stripe_client import StripeGateway, get_payment_gateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/stripe", tags=["Stripe API"])


class CheckoutSessionRequest(BaseModel):
    # lignes au format panier peuplé: {contentId: {title,...} | id, price}
    items: Optional[List[Dict[str, Any]]] = None
    # ignoré: la corrélation vient toujours de l'identité authentifiée
    userId: Optional[str] = None


# module vodshop.payments.views
@router.post("/create-checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(
    body: CheckoutSessionRequest,
    user: Identity = Depends(require_user),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    """
    Crée une session Checkout hébergée et renvoie {url}.
    - 500 "Stripe checkout failed" si le fournisseur refuse
    """
    if body.userId and body.userId != user.id:
        logger.warning("payments.session userId mismatch body=%s identity=%s", body.userId, user.id)
    return payments_service.create_checkout_session(gateway, user, body.items)

@router.get("/payment-details")
def payment_details(session_id: Optional[str] = None, gateway: StripeGateway = Depends(get_payment_gateway)):
    return payments_service.get_payment_details(gateway, session_id)

@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request, gateway: StripeGateway = Depends(get_payment_gateway)):
    """
    Webhook fournisseur (checkout.session.completed).
    - Corps brut nécessaire à la vérification de signature
    - 200 {"received": true}, 400 payload/corrélation invalides, 500 échec de création (réessai)
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    event = gateway.parse_event(payload, sig_header)
    return await run_in_threadpool(payments_service.handle_event, event)
