"""
Adaptateur Stripe: une instance construite au démarrage, injectée dans les vues.
La clé API est passée à chaque appel (aucun état global dans le module stripe).
"""
import json
from typing import Any, Dict, Optional

import stripe
from fastapi import Request

from vodshop import config
from vodshop.errors import BadRequest

# module vodshop.payments.stripe_client
class StripeGateway:
    def __init__(self, api_key: str, webhook_secret: str = "", currency: str = "usd") -> None:
        self.api_key = api_key or ""
        self.webhook_secret = webhook_secret or ""
        self.currency = (currency or "usd").lower()

    @classmethod
    def from_config(cls) -> "StripeGateway":
        return cls(
            api_key=config.STRIPE_SECRET_KEY,
            webhook_secret=config.STRIPE_WEBHOOK_SECRET,
            currency=config.STRIPE_CURRENCY,
        )

    def create_session(self, **params: Any) -> Dict[str, Any]:
        """
        Crée une session Checkout hébergée.
        Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
        """
        session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        return dict(session)

    def retrieve_session(self, session_id: str) -> Dict[str, Any]:
        session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        return dict(session)

    def parse_event(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Décode un événement webhook.
        - Secret configuré: signature vérifiée via Webhook.construct_event (400 si invalide)
        - Sinon: JSON brut, sans vérification
        """
        if self.webhook_secret:
            try:
                return stripe.Webhook.construct_event(payload, sig_header or "", self.webhook_secret)
            except stripe.SignatureVerificationError:
                raise BadRequest("Invalid signature")
            except ValueError:
                raise BadRequest("Invalid payload")
        try:
            event = json.loads(payload or b"{}")
        except ValueError:
            raise BadRequest("Invalid payload")
        if not isinstance(event, dict):
            raise BadRequest("Invalid payload")
        return event

def get_payment_gateway(request: Request) -> StripeGateway:
    """Dépendance FastAPI: passerelle posée sur app.state par le lifespan."""
    gateway = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        gateway = StripeGateway.from_config()
        request.app.state.payment_gateway = gateway
    return gateway
