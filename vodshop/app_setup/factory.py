"""
Factory d'application pour les entrypoints (vodshop.asgi, tests).
"""
from fastapi import FastAPI

from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares (CORS, TrustedHost, en-têtes de sécurité)
      - gestionnaires d'exceptions
      - tous les routers API et health
    """
    app = FastAPI(title="vodshop", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
