from typing import Optional
from supabase import create_client, Client
from vodshop.config import SUPABASE_URL, SUPABASE_SERVICE_KEY

_supabase: Optional[Client] = None

def get_supabase() -> Client:
    """
    Client Supabase côté serveur (clé service).
    Les utilisateurs n'accèdent jamais au store directement: l'API est l'unique client.
    """
    global _supabase
    if not SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant pour get_supabase()")
    if _supabase is None:
        _supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _supabase
