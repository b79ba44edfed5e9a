"""
Module 'payments' (feature-first): passerelle Stripe, conversion panier -> line_items,
lecture des métadonnées de session et webhook de confirmation.
"""
from .stripe_client import StripeGateway, get_payment_gateway

__all__ = ["StripeGateway", "get_payment_gateway"]
