from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from vodshop.health.service import health_store_info
from vodshop.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/store")
def health_store():
    info = health_store_info()
    return JSONResponse(info, status_code=200 if info["connect_ok"] else 503)

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
