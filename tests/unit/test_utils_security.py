from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from vodshop.app_setup.exceptions import register_exception_handlers
from vodshop.auth.tokens import create_access_token, create_refresh_token
from vodshop.utils.security import Identity, require_user

def _make_app():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/me")
    def me(user: Identity = Depends(require_user)):
        return {"id": user.id, "username": user.username}

    return app

def test_missing_token():
    r = TestClient(_make_app()).get("/me")
    assert r.status_code == 401
    assert r.json() == {"message": "Not authorized, no token"}

def test_invalid_token():
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json()["message"] == "Not authorized, token failed"

def test_refresh_token_is_not_an_access_token(store, user):
    token = create_refresh_token(user.id, user.username)
    r = TestClient(_make_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401

def test_valid_token_yields_identity(store, user):
    token = create_access_token(user.id, user.username)
    r = TestClient(_make_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == {"id": user.id, "username": "alice"}

def test_deleted_user(store):
    token = create_access_token("3f0c6a4e-0000-4000-8000-000000000000", "ghost")
    r = TestClient(_make_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == "User not found"
