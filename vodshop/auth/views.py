from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from vodshop.utils.rate_limit import optional_rate_limit
from vodshop.utils.validators import validate_password_strength, validate_username
from . import service as auth_service

# --- API Router (/api/auth) ---

api_router = APIRouter(prefix="/api/auth", tags=["Auth API"])

class RegisterRequest(BaseModel):
    username: str
    password: str = Field(min_length=8, max_length=72)
    dob: Optional[date] = None
    address: Optional[str] = Field(default=None, max_length=500)

    @field_validator("username")
    def username_format(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("password")
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)

class LoginRequest(BaseModel):
    username: str
    password: str

class TokenRequest(BaseModel):
    token: Optional[str] = None
    refreshToken: Optional[str] = None

    def value(self) -> Optional[str]:
        return self.token or self.refreshToken

@api_router.post("/register", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_register(req: RegisterRequest):
    """Inscription (API JSON): hash bcrypt + création du document utilisateur."""
    auth_service.register(
        req.username,
        req.password,
        dob=req.dob.isoformat() if req.dob else None,
        address=req.address,
    )
    return {"message": "User registered successfully"}

@api_router.post("/login", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_login(req: LoginRequest):
    """Connexion: retourne {accessToken, refreshToken, user}; 401 si identifiants invalides."""
    return auth_service.login(req.username, req.password)

@api_router.post("/refresh", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def api_refresh(req: TokenRequest):
    return auth_service.refresh(req.value())

@api_router.post("/logout")
def api_logout(req: TokenRequest):
    auth_service.logout(req.value())
    return {"message": "Logged out successfully"}
