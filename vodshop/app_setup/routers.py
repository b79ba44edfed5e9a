"""
Registre central des routers (/api/... et /health).
"""
from fastapi import FastAPI

from vodshop.auth.views import api_router as auth_api_router
from vodshop.users.views import api_router as users_api_router
from vodshop.content import views as content_views
from vodshop.cart import views as cart_views
from vodshop.checkout import views as checkout_views
from vodshop.orders import views as orders_views
from vodshop.payments import views as payments_views
from vodshop.watchlist import views as watchlist_views
from vodshop.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # Identité
    app.include_router(auth_api_router)
    app.include_router(users_api_router)
    # Catalogue
    app.include_router(content_views.router)
    app.include_router(watchlist_views.router)
    # Achat
    app.include_router(cart_views.router)
    app.include_router(checkout_views.router)
    app.include_router(orders_views.router)
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
