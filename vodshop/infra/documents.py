"""
Accès « document » aux tables Supabase (users, content, carts, orders).

Chaque ligne est traitée comme un document: colonnes scalaires + colonnes JSON
pour les tableaux embarqués (items, likes, comments, ...). Toutes les
écritures de mise à jour passent par update_versioned: la colonne `version`
sert de jeton de concurrence optimiste.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

from postgrest.exceptions import APIError

from vodshop.errors import VersionConflict
from vodshop.infra import supabase_client

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

# module vodshop.infra.documents
def collection(name: str):
    return supabase_client.get_supabase().table(name)

def find_one(table: str, **filters: Any) -> Optional[Dict[str, Any]]:
    """Premier document correspondant aux filtres d'égalité, ou None."""
    query = collection(table).select("*")
    for column, value in filters.items():
        query = query.eq(column, value)
    res = query.limit(1).execute()
    rows = res.data or []
    return rows[0] if rows else None

def find_by_id(table: str, doc_id: str) -> Optional[Dict[str, Any]]:
    return find_one(table, id=doc_id)

def find_many_by_ids(table: str, ids: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Documents dont l'id est dans `ids` (ordre non garanti).
    - Retourne [] si ids vide.
    """
    id_list = [str(i) for i in ids if i]
    if not id_list:
        return []
    res = collection(table).select("*").in_("id", id_list).execute()
    return res.data or []

def insert_one(table: str, doc: Dict[str, Any]) -> Dict[str, Any]:
    """Insère un document et retourne la ligne persistée (id généré inclus)."""
    res = collection(table).insert(doc).execute()
    rows = res.data or []
    if not rows:
        raise RuntimeError(f"insert into {table} returned no row")
    return rows[0]

def insert_unique(table: str, doc: Dict[str, Any], on_conflict: str) -> Optional[Dict[str, Any]]:
    """
    Insertion idempotente sur une colonne unique.
    - Retourne la ligne créée, ou None si un document portant la même clé existe déjà.
    """
    res = (
        collection(table)
        .upsert(doc, on_conflict=on_conflict, ignore_duplicates=True)
        .execute()
    )
    rows = res.data or []
    return rows[0] if rows else None

def update_versioned(table: str, doc: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Écrit `changes` sur le document si sa version n'a pas bougé depuis la lecture.
    - Filtre sur id ET version, incrémente version.
    - Aucune ligne touchée => VersionConflict (écriture concurrente détectée, jamais fusionnée).
    """
    doc_id = str(doc.get("id"))
    version = int(doc.get("version") or 0)
    payload = dict(changes)
    payload["version"] = version + 1
    res = (
        collection(table)
        .update(payload)
        .eq("id", doc_id)
        .eq("version", version)
        .execute()
    )
    rows = res.data or []
    if not rows:
        logger.warning("documents.update_versioned conflict table=%s id=%s version=%s", table, doc_id, version)
        raise VersionConflict(table, doc_id, version)
    return rows[0]

def is_unique_violation(exc: Exception) -> bool:
    """True si l'erreur PostgREST correspond à une violation de contrainte unique."""
    if isinstance(exc, APIError):
        return str(getattr(exc, "code", "") or "") == UNIQUE_VIOLATION
    return UNIQUE_VIOLATION in str(exc)
