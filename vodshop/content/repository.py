"""
Accès aux données du catalogue (table content).
Colonnes: id, title, description, category, price, url, thumbnail,
likes (JSON: ids utilisateurs), comments (JSON), reviews (JSON), created_at, version.
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple
import re

from vodshop.infra import documents

TABLE = "content"

# Caractères réservés de la syntaxe or=(...) de PostgREST
_RESERVED = re.compile(r"[,()*%\\\"]")

# module vodshop.content.repository
def _pattern(q: str) -> str:
    return "%" + _RESERVED.sub(" ", q).strip() + "%"

def _search_filter(q: str, columns: Iterable[str]) -> str:
    pattern = _pattern(q)
    return ",".join(f"{col}.ilike.{pattern}" for col in columns)

def get_content(content_id: str) -> Optional[Dict[str, Any]]:
    return documents.find_by_id(TABLE, content_id)

def get_contents_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne {id: contenu} pour hydrater panier / watchlist."""
    return {str(c.get("id")): c for c in documents.find_many_by_ids(TABLE, ids)}

def list_content() -> List[Dict[str, Any]]:
    res = documents.collection(TABLE).select("*").order("created_at", desc=True).execute()
    return res.data or []

def list_by_category(category: str) -> List[Dict[str, Any]]:
    res = (
        documents.collection(TABLE)
        .select("*")
        .eq("category", category)
        .order("created_at", desc=True)
        .execute()
    )
    return res.data or []

def search_content(q: str) -> List[Dict[str, Any]]:
    """Recherche insensible à la casse sur title, description et category."""
    res = (
        documents.collection(TABLE)
        .select("*")
        .or_(_search_filter(q, ("title", "description", "category")))
        .execute()
    )
    return res.data or []

def sorted_page(
    *,
    category: Optional[str],
    q: Optional[str],
    sort: str,
    desc: bool,
    offset: int,
    limit: int,
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Filtre + recherche + tri + pagination en une requête (count exact).
    Retour: (items de la page, total correspondant au filtre)
    """
    query = documents.collection(TABLE).select("*", count="exact")
    if category:
        query = query.eq("category", category)
    if q:
        query = query.or_(_search_filter(q, ("title", "description")))
    res = query.order(sort, desc=desc).range(offset, offset + limit - 1).execute()
    items = res.data or []
    total = res.count if res.count is not None else len(items)
    return items, int(total)

def update_engagement(content: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Écriture versionnée des sous-champs likes / comments / reviews."""
    return documents.update_versioned(TABLE, content, changes)
