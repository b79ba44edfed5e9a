from typing import Any, Dict
from fastapi import HTTPException, Request, Response
import hashlib
import logging

logger = logging.getLogger(__name__)

def _client_key(req: Request) -> str:
    # Priorité: Bearer (hashé) puis IP
    auth = req.headers.get("Authorization", "")
    path = req.url.path
    if auth.startswith("Bearer "):
        h = hashlib.sha256(auth[7:].encode("utf-8")).hexdigest()[:16]
        return f"user:{h}:{path}"
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{path}"

def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance de rate limiting « best-effort ».
    - Désactivée si le lifespan n'a pas pu initialiser FastAPILimiter (app.state.rate_limit_enabled False).
    - 429 propagé tel quel; toute autre erreur du limiter laisse passer la requête.
    """
    async def _dep(request: Request, response: Response):
        if getattr(request.app.state, "rate_limit_enabled", False) is not True:
            return

        try:
            from fastapi_limiter.depends import RateLimiter

            async def _identifier(req: Request) -> str:
                return _client_key(req)
            return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
        except HTTPException:
            raise
        except Exception as e:
            logger.warning("rate_limit skipped path=%s error=%s", request.url.path, e)
            return
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    try:
        from fastapi_limiter import FastAPILimiter
        ready = getattr(FastAPILimiter, "redis", None) is not None
    except Exception:
        ready = False
    return {
        "enabled": bool(enabled) if enabled is not None else None,
        "ready": ready,
        "backend": "redis" if ready else None,
    }
