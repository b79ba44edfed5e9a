"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Construit la passerelle de paiement (app.state.payment_gateway) depuis la config.
- Initialise FastAPILimiter (Redis); désactivé proprement si Redis est indisponible.
- Rejoue optionnellement les vidages de panier interrompus.
Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - RECOVER_PENDING_CLEARS_ON_STARTUP=1: lance checkout.recover_pending_clears au démarrage
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter
from starlette.concurrency import run_in_threadpool

from vodshop import config
from vodshop.checkout import service as checkout_service
from vodshop.payments.stripe_client import StripeGateway

async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        r = aioredis.from_url(config.RATE_LIMIT_REDIS_URL, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        app.state.rate_limit_enabled = False
        logger.warning("Rate limiting disabled due to init error: %s", e)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    if getattr(app.state, "payment_gateway", None) is None:
        app.state.payment_gateway = StripeGateway.from_config()
    if not config.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY not set: checkout sessions will fail")

    await _init_rate_limiter(app, logger)

    if config.RECOVER_PENDING_CLEARS_ON_STARTUP:
        try:
            repaired = await run_in_threadpool(checkout_service.recover_pending_clears)
            logger.info("Pending cart clears recovered: %s", repaired)
        except Exception as e:
            logger.warning("Pending cart clear recovery failed: %s", e)

    yield

    if app.state.rate_limit_enabled:
        await FastAPILimiter.close()
