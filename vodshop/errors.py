"""
Exceptions métier du backend.

Chaque exception porte un message lisible et un code HTTP fixe; le handler
enregistré dans vodshop.app_setup.exceptions les convertit en JSON
{"message": ..., "error": ...}. Les services lèvent ces exceptions, les vues
les laissent remonter.
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base de la taxonomie d'erreurs (NotFound, BadRequest, Conflict, ...)."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.detail:
            body["error"] = self.detail
        return body


# --- 400 ---

class BadRequest(AppError):
    status_code = 400
    default_message = "Bad request"

class InvalidIdentifier(BadRequest):
    default_message = "Invalid id format"

class DuplicateItem(BadRequest):
    default_message = "Item already in cart"

class EmptyCart(BadRequest):
    default_message = "Cart is empty"

class AlreadyLiked(BadRequest):
    default_message = "Already liked"

class NotLiked(BadRequest):
    default_message = "Content not liked yet"

class ReviewsNotAllowed(BadRequest):
    default_message = "Reviews only allowed for movies"

class AlreadyInWatchlist(BadRequest):
    default_message = "Content already in watchlist"

class MissingCorrelation(BadRequest):
    default_message = "Missing client_reference_id"


# --- 401 / 403 ---

class Unauthorized(AppError):
    status_code = 401
    default_message = "Not authorized"

class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


# --- 404 ---

class NotFound(AppError):
    status_code = 404
    default_message = "Not found"

class UserNotFound(NotFound):
    default_message = "User not found"

class ContentNotFound(NotFound):
    default_message = "Content not found"

class CartNotFound(NotFound):
    default_message = "Cart not found"

class ItemNotFound(NotFound):
    default_message = "Item not found in cart"


# --- 409 ---

class Conflict(AppError):
    status_code = 409
    default_message = "Conflict: Cart or order was updated elsewhere. Please try again."


# --- 5xx ---

class PaymentProviderError(AppError):
    status_code = 500
    default_message = "Stripe checkout failed"

class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"


class VersionConflict(Exception):
    """Levée par le store quand la version lue d'un document a changé (écriture perdue)."""

    def __init__(self, table: str, doc_id: str, version: int) -> None:
        self.table = table
        self.doc_id = doc_id
        self.version = version
        super().__init__(f"{table}:{doc_id} version {version} is stale")
