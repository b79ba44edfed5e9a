import pytest

from vodshop.cart import service as cart_service
from vodshop.cart.models import Kind
from vodshop.checkout import service as checkout_service
from vodshop.checkout.service import ClearPolicy
from vodshop.errors import Conflict, EmptyCart, InternalError
from tests.conftest import MOVIE_ID, VIDEO_ID

def _fill(user):
    cart_service.add_item(user, MOVIE_ID, Kind.BUY, 10)
    cart_service.add_item(user, VIDEO_ID, Kind.RENT, 20)

def test_compute_total_is_a_plain_sum():
    assert checkout_service.compute_total([{"price": 10}, {"price": 20}]) == 30
    assert checkout_service.compute_total([{"price": 0.1}, {"price": 0.2}]) == 0.1 + 0.2
    assert checkout_service.compute_total([]) == 0

def test_compute_total_keeps_sub_cent_prices():
    assert checkout_service.compute_total([{"price": 0.004}, {"price": 0.004}]) == 0.004 + 0.004

@pytest.mark.parametrize("price", [None, "n/a"])
def test_compute_total_rejects_unreadable_price(price):
    with pytest.raises((TypeError, ValueError)):
        checkout_service.compute_total([{"price": 10}, {"price": price}])

def test_checkout_with_unreadable_price_is_an_internal_error(store, user, catalog):
    _fill(user)
    store.rows("carts")[0]["items"][0]["price"] = "n/a"

    with pytest.raises(InternalError) as exc:
        checkout_service.checkout(user, ClearPolicy.IMMEDIATE)
    assert exc.value.message == "Error during checkout"
    assert store.rows("orders") == []

def test_resolve_policy(monkeypatch):
    monkeypatch.setattr("vodshop.config.CHECKOUT_CLEAR_POLICY", "deferred")
    assert checkout_service.resolve_policy() is ClearPolicy.DEFERRED
    assert checkout_service.resolve_policy("IMMEDIATE") is ClearPolicy.IMMEDIATE
    assert checkout_service.resolve_policy("sometimes") is ClearPolicy.IMMEDIATE

@pytest.mark.parametrize("policy", [ClearPolicy.IMMEDIATE, ClearPolicy.DEFERRED])
def test_checkout_without_cart_creates_no_order(store, user, policy):
    with pytest.raises(EmptyCart):
        checkout_service.checkout(user, policy)
    assert store.rows("orders") == []

def test_checkout_with_emptied_cart_creates_no_order(store, user, catalog):
    cart_service.add_item(user, MOVIE_ID, Kind.BUY, 10)
    cart_service.clear(user.id)

    with pytest.raises(EmptyCart):
        checkout_service.checkout(user, ClearPolicy.IMMEDIATE)
    assert store.rows("orders") == []

def test_immediate_checkout_snapshots_then_clears(store, user, catalog):
    _fill(user)
    items_before = [(it["content_id"], it["kind"], it["price"]) for it in store.rows("carts")[0]["items"]]

    res = checkout_service.checkout(user, ClearPolicy.IMMEDIATE)

    order = res["order"]
    assert res["message"] == "Checkout complete"
    assert order["total"] == 30
    assert order["status"] == "completed"
    assert order["cart_cleared"] is True
    assert [(it["content_id"], it["kind"], it["price"]) for it in order["items"]] == items_before
    assert store.rows("carts")[0]["items"] == []

def test_deferred_checkout_leaves_cart_untouched(store, user, catalog):
    _fill(user)
    cart_before = store.rows("carts")[0]["items"][:]

    order = checkout_service.checkout(user, ClearPolicy.DEFERRED)["order"]

    assert order["status"] == "pending"
    assert order["cart_cleared"] is False
    assert store.rows("carts")[0]["items"] == cart_before

def test_cart_changed_during_checkout_is_a_conflict(store, user, catalog, monkeypatch):
    _fill(user)
    real_insert = checkout_service.orders_repository.insert_order

    def _insert_then_concurrent_add(**kwargs):
        order = real_insert(**kwargs)
        store.bump("carts", store.rows("carts")[0]["id"])
        return order

    monkeypatch.setattr("vodshop.orders.repository.insert_order", _insert_then_concurrent_add)

    with pytest.raises(Conflict) as exc:
        checkout_service.checkout(user, ClearPolicy.IMMEDIATE)

    assert exc.value.status_code == 409
    assert exc.value.message == "Conflict: Cart or order was updated elsewhere. Please try again."
    # commande compensée, panier intact: l'appelant peut resoumettre
    assert store.rows("orders") == []
    assert len(store.rows("carts")[0]["items"]) == 2

def test_unexpected_store_failure(store, user, catalog, monkeypatch):
    _fill(user)

    def _boom(**kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr("vodshop.orders.repository.insert_order", _boom)

    with pytest.raises(InternalError) as exc:
        checkout_service.checkout(user, ClearPolicy.IMMEDIATE)
    assert exc.value.message == "Error during checkout"
    assert exc.value.detail == "connection reset"

def test_recover_pending_clears_replays_interrupted_checkout(store, user, catalog, monkeypatch):
    _fill(user)
    # crash simulé entre la création de la commande et le vidage (le rejeu passe par remove_items)
    monkeypatch.setattr(
        "vodshop.cart.service.clear",
        lambda user_id, cart=None: (_ for _ in ()).throw(RuntimeError("process killed")),
    )
    with pytest.raises(InternalError):
        checkout_service.checkout(user, ClearPolicy.IMMEDIATE)

    assert len(store.rows("orders")) == 1
    assert store.rows("orders")[0]["cart_cleared"] is False
    assert len(store.rows("carts")[0]["items"]) == 2

    assert checkout_service.recover_pending_clears() == 1
    assert store.rows("carts")[0]["items"] == []
    assert store.rows("orders")[0]["cart_cleared"] is True
    assert checkout_service.recover_pending_clears() == 0

def test_failed_compensation_is_never_replayed(store, user, catalog, monkeypatch):
    _fill(user)
    real_insert = checkout_service.orders_repository.insert_order
    calls = {"n": 0}

    def _insert_then_concurrent_add(**kwargs):
        order = real_insert(**kwargs)
        calls["n"] += 1
        if calls["n"] == 1:
            store.bump("carts", store.rows("carts")[0]["id"])
        return order

    def _delete_down(order):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr("vodshop.orders.repository.insert_order", _insert_then_concurrent_add)
    monkeypatch.setattr("vodshop.orders.repository.delete_order", _delete_down)

    with pytest.raises(Conflict):
        checkout_service.checkout(user, ClearPolicy.IMMEDIATE)
    assert [o["status"] for o in store.rows("orders")] == ["aborted"]

    # le client resoumet comme indiqué par le 409
    checkout_service.checkout(user, ClearPolicy.IMMEDIATE)

    assert checkout_service.recover_pending_clears() == 0
    completed = [o for o in store.rows("orders") if o["status"] == "completed"]
    assert len(completed) == 1
    assert completed[0]["total"] == 30
    assert completed[0]["cart_cleared"] is True
