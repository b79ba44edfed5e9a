import copy
import os
from typing import Any, Dict, Generator, List, Optional
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

# Pas de Redis en tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from vodshop.app import app as fastapi_app
from vodshop.errors import VersionConflict
from vodshop.payments.stripe_client import StripeGateway, get_payment_gateway
from vodshop.utils.security import Identity, require_user

USER_ID = "3f0c6a4e-8a0b-4a53-9d7e-1c2b3a4d5e6f"
MOVIE_ID = "6b1f2e3d-4c5b-4a69-8a7b-0c1d2e3f4a5b"
VIDEO_ID = "7c2a3b4d-5e6f-4a70-9b8c-1d2e3f4a5b6c"
LIVE_ID = "8d3b4c5e-6f7a-4b81-8c9d-2e3f4a5b6c7d"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeStore:
    """
    Store documents en mémoire, mêmes signatures que vodshop.infra.documents.
    - copies profondes à l'écriture et à la lecture (comme un aller-retour réseau)
    - contrôle de version et contraintes d'unicité (carts.user_id, users.username, orders.payment_intent_id)
    """

    UNIQUE = {"carts": ("user_id",), "users": ("username",), "orders": ("payment_intent_id",)}

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def seed(self, table: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        row = copy.deepcopy(doc)
        row.setdefault("id", str(uuid4()))
        row.setdefault("version", 1)
        self.rows(table).append(row)
        return copy.deepcopy(row)

    def get(self, table: str, doc_id: str) -> Optional[Dict[str, Any]]:
        for row in self.rows(table):
            if str(row.get("id")) == str(doc_id):
                return copy.deepcopy(row)
        return None

    def find_one(self, table: str, **filters: Any) -> Optional[Dict[str, Any]]:
        for row in self.rows(table):
            if all(row.get(k) == v for k, v in filters.items()):
                return copy.deepcopy(row)
        return None

    def find_by_id(self, table: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return self.get(table, doc_id)

    def find_many_by_ids(self, table: str, ids) -> List[Dict[str, Any]]:
        wanted = {str(i) for i in ids if i}
        return [copy.deepcopy(r) for r in self.rows(table) if str(r.get("id")) in wanted]

    def _violates_unique(self, table: str, doc: Dict[str, Any]) -> bool:
        for column in self.UNIQUE.get(table, ()):
            value = doc.get(column)
            if value is not None and any(r.get(column) == value for r in self.rows(table)):
                return True
        return False

    def insert_one(self, table: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        if self._violates_unique(table, doc):
            raise APIError({"code": "23505", "message": "duplicate key value violates unique constraint"})
        return self.seed(table, doc)

    def insert_unique(self, table: str, doc: Dict[str, Any], on_conflict: str) -> Optional[Dict[str, Any]]:
        if any(r.get(on_conflict) == doc.get(on_conflict) for r in self.rows(table)):
            return None
        return self.seed(table, doc)

    def update_versioned(self, table: str, doc: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
        version = int(doc.get("version") or 0)
        for row in self.rows(table):
            if str(row.get("id")) == str(doc.get("id")) and row.get("version") == version:
                row.update(copy.deepcopy(changes))
                row["version"] = version + 1
                return copy.deepcopy(row)
        raise VersionConflict(table, str(doc.get("id")), version)

    def delete(self, table: str, doc_id: str) -> None:
        self.tables[table] = [r for r in self.rows(table) if str(r.get("id")) != str(doc_id)]

    def bump(self, table: str, doc_id: str, **changes: Any) -> None:
        """Écriture concurrente simulée (autre requête)."""
        for row in self.rows(table):
            if str(row.get("id")) == str(doc_id):
                row.update(changes)
                row["version"] = int(row.get("version") or 0) + 1


class FakeGateway(StripeGateway):
    """Passerelle sans réseau: enregistre les sessions créées, parse les events en JSON brut."""

    def __init__(self) -> None:
        super().__init__(api_key="sk_test_fake", webhook_secret="", currency="usd")
        self.sessions: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None

    def create_session(self, **params: Any) -> Dict[str, Any]:
        if self.fail_with:
            raise self.fail_with
        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.sessions.append(params)
        return {"id": session_id, "url": f"https://checkout.stripe.test/{session_id}"}

    def retrieve_session(self, session_id: str) -> Dict[str, Any]:
        if self.fail_with:
            raise self.fail_with
        return {"id": session_id, "payment_status": "paid", "amount_total": 3000, "currency": "usd"}


@pytest.fixture()
def store(monkeypatch) -> FakeStore:
    fake = FakeStore()
    monkeypatch.setattr("vodshop.infra.supabase_client.get_supabase", lambda: MagicMock())
    for name in ("find_one", "find_by_id", "find_many_by_ids", "insert_one", "insert_unique", "update_versioned"):
        monkeypatch.setattr(f"vodshop.infra.documents.{name}", getattr(fake, name))

    # Fonctions bâties directement sur le query builder
    monkeypatch.setattr(
        "vodshop.orders.repository.list_user_orders",
        lambda user_id: [o for o in fake.find_many_by_ids("orders", [r["id"] for r in fake.rows("orders")]) if o["user_id"] == user_id],
    )
    monkeypatch.setattr(
        "vodshop.orders.repository.list_pending_clear",
        lambda limit=100: [
            copy.deepcopy(o) for o in fake.rows("orders")
            if not o.get("cart_cleared") and o.get("status") in ("completed", "paid")
        ][:limit],
    )
    monkeypatch.setattr("vodshop.orders.repository.delete_order", lambda order: fake.delete("orders", order["id"]))

    def _set_refresh_token(user_id, token):
        for row in fake.rows("users"):
            if str(row["id"]) == str(user_id):
                row["refresh_token"] = token
    monkeypatch.setattr("vodshop.users.repository.set_refresh_token", _set_refresh_token)
    return fake

@pytest.fixture()
def catalog(store: FakeStore) -> Dict[str, Dict[str, Any]]:
    return {
        "movie": store.seed("content", {"id": MOVIE_ID, "title": "The Long Take", "category": "movie", "price": 10.0,
                                        "likes": [], "comments": [], "reviews": []}),
        "video": store.seed("content", {"id": VIDEO_ID, "title": "Behind the Scenes", "category": "video", "price": 20.0,
                                        "likes": [], "comments": [], "reviews": []}),
        "live": store.seed("content", {"id": LIVE_ID, "title": "Opening Night", "category": "live", "price": 5.5,
                                       "likes": [], "comments": [], "reviews": []}),
    }

@pytest.fixture()
def user(store: FakeStore) -> Identity:
    store.seed("users", {"id": USER_ID, "username": "alice", "password": "x", "watchlist": []})
    return Identity(id=USER_ID, username="alice")

@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app, store, user, gateway) -> Generator[TestClient, None, None]:
    """Client API authentifié (require_user surchargé) avec passerelle de paiement factice."""
    app.dependency_overrides[require_user] = lambda: user
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(require_user, None)
        app.dependency_overrides.pop(get_payment_gateway, None)

@pytest.fixture()
def anonymous_client(app, store) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
