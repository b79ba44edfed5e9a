"""
Cas d'usage 'checkout': transforme le panier courant en commande.

Deux politiques exclusives par déploiement (config.CHECKOUT_CLEAR_POLICY):
- immediate: commande 'completed', panier vidé dans la même requête
- deferred: commande 'pending', panier vidé plus tard par le webhook de paiement

Commande et vidage du panier sont deux écritures indépendantes. Journal de
compensation: la commande est écrite avec cart_cleared=False, puis le panier est
vidé, puis la commande est marquée. Un crash entre les deux laisse une commande
non marquée que recover_pending_clears() sait rejouer. Sur conflit, la commande
est supprimée, ou à défaut passée 'aborted' (jamais rejouée).
"""
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from vodshop import config
from vodshop.cart import service as cart_service
from vodshop.content import repository as content_repository
from vodshop.errors import AppError, Conflict, EmptyCart, InternalError, VersionConflict
from vodshop.orders import repository as orders_repository
from vodshop.orders.models import OrderStatus
from vodshop.utils.security import Identity

logger = logging.getLogger(__name__)


class ClearPolicy(str, Enum):
    IMMEDIATE = "immediate"
    DEFERRED = "deferred"


def resolve_policy(value: Optional[str] = None) -> ClearPolicy:
    """Politique explicite, sinon celle de la config; valeur inconnue => immediate."""
    raw = value if value is not None else config.CHECKOUT_CLEAR_POLICY
    try:
        return ClearPolicy(str(raw or "").strip().lower())
    except ValueError:
        logger.warning("checkout.policy unknown value=%s, falling back to immediate", raw)
        return ClearPolicy.IMMEDIATE

def compute_total(items: List[Dict[str, Any]]) -> float:
    """Somme exacte des prix stockés, sans arrondi. Un prix illisible lève (=> 500 au checkout)."""
    return sum(float(it["price"]) for it in items or [])

def snapshot_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Copie structurelle des lignes du panier (la commande ne partage rien avec lui)."""
    return [
        {
            "id": it.get("id"),
            "content_id": it.get("content_id"),
            "kind": it.get("kind"),
            "price": it.get("price"),
        }
        for it in items or []
    ]

def _item_ids(order: Dict[str, Any]) -> List[str]:
    # commandes checkout: "id"; commandes payées: "item_id"
    ids = []
    for it in order.get("items") or []:
        item_id = it.get("item_id") or it.get("id")
        if item_id:
            ids.append(str(item_id))
    return ids

def _compensate(order: Dict[str, Any]) -> None:
    """
    Annule une commande dont le vidage n'a pas eu lieu.
    Suppression d'abord; si elle échoue, la commande passe 'aborted' pour que
    recover_pending_clears ne la prenne jamais pour un achat validé.
    """
    try:
        orders_repository.delete_order(order)
        logger.info("checkout.compensated order_id=%s", order.get("id"))
        return
    except Exception:
        logger.exception("checkout.compensate delete failed order_id=%s", order.get("id"))
    try:
        orders_repository.mark_aborted(order)
        logger.warning("checkout.compensated as aborted order_id=%s", order.get("id"))
    except Exception:
        logger.exception("checkout.compensate abort failed order_id=%s", order.get("id"))

def _mark_cleared(order: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return orders_repository.mark_cart_cleared(order)
    except Exception:
        # panier déjà vidé: seule la marque manque, recover_pending_clears la posera
        logger.exception("checkout.mark_cleared failed order_id=%s", order.get("id"))
        return order

def checkout(user: Identity, policy: Optional[ClearPolicy] = None) -> Dict[str, Any]:
    """
    CartPresent -> Snapshotted -> (Cleared | AwaitingPayment).
    - 400 EmptyCart si pas de panier ou panier vide (aucune commande créée)
    - 409 Conflict si le panier a changé entre la lecture et le vidage (jamais rejoué)
    - 500 "Error during checkout" pour toute autre erreur
    """
    policy = policy or resolve_policy()
    cart = cart_service.load_cart(user.id)
    if not cart or not cart.get("items"):
        raise EmptyCart()

    items = snapshot_items(cart["items"])
    status = OrderStatus.COMPLETED if policy is ClearPolicy.IMMEDIATE else OrderStatus.PENDING

    order = None
    cleared = False
    try:
        total = compute_total(items)
        order = orders_repository.insert_order(user_id=user.id, items=items, total=total, status=status)
        logger.info(
            "checkout.created user_id=%s order_id=%s total=%s policy=%s",
            user.id, order.get("id"), total, policy.value,
        )
        if policy is ClearPolicy.IMMEDIATE:
            # la version lue à l'étape 1 garde le vidage: tout ajout concurrent => 409
            cart_service.clear(user.id, cart=cart)
            cleared = True
            order = _mark_cleared(order)
    except (Conflict, VersionConflict):
        if order is not None and not cleared:
            _compensate(order)
        raise Conflict()
    except AppError:
        raise
    except Exception as e:
        logger.exception("checkout failed user_id=%s", user.id)
        raise InternalError("Error during checkout", detail=str(e))

    return {"message": "Checkout complete", "order": order}

def fulfill_payment(
    *,
    user_id: str,
    payment_intent_id: Optional[str],
    amount_total: Optional[int],
    currency: Optional[str],
    expected_cart_version: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """
    Confirmation de paiement (webhook): commande 'paid' dérivée du panier COURANT, puis vidage.
    - Idempotent sur payment_intent_id: une redélivrance ne crée pas de seconde commande,
      elle termine seulement un vidage resté en suspens. Retourne None dans ce cas.
    - Les erreurs remontent: l'appelant répond 500 pour provoquer un nouvel envoi.
    """
    existing = orders_repository.get_by_payment_intent(payment_intent_id) if payment_intent_id else None
    if existing:
        logger.info("payments.webhook duplicate payment_intent=%s order_id=%s", payment_intent_id, existing.get("id"))
        if not existing.get("cart_cleared"):
            _replay_clear(existing)
        return None

    cart = cart_service.load_cart(user_id)
    cart_items = list((cart or {}).get("items") or [])
    if expected_cart_version is not None and cart and cart.get("version") != expected_cart_version:
        logger.warning(
            "payments.webhook cart changed since session user_id=%s expected_version=%s current_version=%s",
            user_id, expected_cart_version, cart.get("version"),
        )
    if not cart_items:
        logger.warning("payments.webhook empty cart at confirmation user_id=%s", user_id)

    lines = payment_lines(cart_items)
    order = orders_repository.insert_paid_order(
        user_id=user_id,
        items=lines,
        total=compute_total(lines),
        payment_intent_id=payment_intent_id,
        amount_total=amount_total,
        currency=currency,
    )
    if order is None:
        # course entre deux livraisons simultanées: l'autre a créé la commande
        logger.info("payments.webhook concurrent duplicate payment_intent=%s", payment_intent_id)
        return None

    try:
        cart_service.clear(user_id, cart=cart)
    except Conflict:
        # le panier a bougé: on retire seulement les lignes payées
        cart_service.remove_items(user_id, _item_ids(order))
    try:
        order = orders_repository.mark_cart_cleared(order)
    except VersionConflict:
        raise Conflict()
    logger.info("payments.webhook order_id=%s user_id=%s items=%s", order.get("id"), user_id, len(lines))
    return order

def payment_lines(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Lignes de commande payée {name, price} (+ item_id pour rejouer le vidage)."""
    contents = content_repository.get_contents_map(str(it.get("content_id")) for it in items)
    lines = []
    for it in items:
        content = contents.get(str(it.get("content_id"))) or {}
        lines.append({
            "name": content.get("title") or "Item",
            "price": it.get("price"),
            "item_id": it.get("id"),
        })
    return lines

def _replay_clear(order: Dict[str, Any]) -> None:
    try:
        cart_service.remove_items(str(order.get("user_id")), _item_ids(order))
        orders_repository.mark_cart_cleared(order)
    except VersionConflict:
        raise Conflict()

def recover_pending_clears(limit: int = 100) -> int:
    """
    Rejoue le vidage des commandes completed/paid restées avec cart_cleared=False.
    Seules les lignes de la commande sont retirées; les ajouts postérieurs restent dans le panier.
    Retourne le nombre de commandes réparées.
    """
    repaired = 0
    for order in orders_repository.list_pending_clear(limit=limit):
        try:
            _replay_clear(order)
            repaired += 1
        except Exception:
            logger.exception("checkout.recover failed order_id=%s", order.get("id"))
    if repaired:
        logger.info("checkout.recover repaired=%s", repaired)
    return repaired
