# vodshop.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, JWT, Stripe), CORS/hosts
- Fournit les URLs de redirection du checkout et la politique de vidage du panier
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

# Supabase: URL et clé service (le backend est le seul client du store)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Jetons de session: secrets distincts pour access et refresh
JWT_SECRET = _clean_env(os.getenv("JWT_SECRET") or "change-me-access")
JWT_REFRESH_SECRET = _clean_env(os.getenv("JWT_REFRESH_SECRET") or "change-me-refresh")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TTL_SECONDS = _int_env("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
REFRESH_TOKEN_TTL_SECONDS = _int_env("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60)

# Stripe: clé privée, secret webhook (optionnel) et devise des line_items
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_CURRENCY = _clean_env(os.getenv("STRIPE_CURRENCY") or "usd").lower()

# Pages de succès/annulation du checkout hébergé
CHECKOUT_SUCCESS_URL = os.getenv(
    "CHECKOUT_SUCCESS_URL", "http://localhost:5173/success?session_id={CHECKOUT_SESSION_ID}"
)
CHECKOUT_CANCEL_URL = os.getenv("CHECKOUT_CANCEL_URL", "http://localhost:5173/cancel")

# Politique de vidage du panier au checkout: "immediate" ou "deferred" (après webhook)
CHECKOUT_CLEAR_POLICY = _clean_env(os.getenv("CHECKOUT_CLEAR_POLICY") or "immediate").lower()

# Sécurité / CORS
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Rate limiting (fastapi-limiter / Redis)
RATE_LIMIT_REDIS_URL = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")

# Rejoue au démarrage les vidages de panier interrompus (commandes cart_cleared=False)
RECOVER_PENDING_CLEARS_ON_STARTUP = (os.getenv("RECOVER_PENDING_CLEARS_ON_STARTUP", "false").lower() in ("1", "true", "yes"))

# Serveur de dev (python -m vodshop); en production, uvicorn/gunicorn importent vodshop.asgi:app
HOST = _clean_env(os.getenv("HOST") or "0.0.0.0")
PORT = _int_env("PORT", 8000)
LOG_LEVEL = _clean_env(os.getenv("LOG_LEVEL") or "info").lower()
UVICORN_RELOAD = (os.getenv("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"))
