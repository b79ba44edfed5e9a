"""
Logique panier pure (pas de DB): types, construction et recherche de lignes.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Kind(str, Enum):
    RENT = "rent"
    BUY = "buy"


class AddItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_id: str = Field(alias="contentId")
    kind: Kind
    price: float = Field(ge=0)


# module vodshop.cart.models
def make_item(content_id: str, kind: Kind, price: float) -> Dict[str, Any]:
    """Ligne de panier: référence contenu, type d'acquisition, prix figé au moment de l'ajout."""
    return {
        "id": str(uuid4()),
        "content_id": content_id,
        "kind": Kind(kind).value,
        "price": float(price),
    }

def find_duplicate(items: List[Dict[str, Any]], content_id: str, kind: Kind) -> Optional[Dict[str, Any]]:
    """Ligne portant déjà le couple (content_id, kind), ou None."""
    kind_value = Kind(kind).value
    for it in items or []:
        if str(it.get("content_id")) == content_id and it.get("kind") == kind_value:
            return it
    return None

def index_of(items: List[Dict[str, Any]], item_id: str) -> int:
    for i, it in enumerate(items or []):
        if str(it.get("id")) == item_id:
            return i
    return -1
