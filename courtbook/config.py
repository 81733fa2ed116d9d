# courtbook.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du service de réservation.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Razorpay)
- Expose les paramètres métier: horaires d'ouverture, durée de session, tarifs, TTL des réservations
- Sécurité: CORS/hosts, clé d'administration pour les opérations de maintenance
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    """Lit un entier depuis l'environnement; retombe sur la valeur par défaut si absent ou invalide."""
    raw = _clean_env(os.getenv(name) or "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default

# Supabase: URL et clé service-role
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Razorpay: clé publique (transmise au SDK client), secret API (signature callback), secret webhook
RAZORPAY_KEY_ID = _clean_env(os.getenv("RAZORPAY_KEY_ID") or "")
RAZORPAY_KEY_SECRET = _clean_env(os.getenv("RAZORPAY_KEY_SECRET") or "")
RAZORPAY_WEBHOOK_SECRET = _clean_env(os.getenv("RAZORPAY_WEBHOOK_SECRET") or "")
RAZORPAY_API_URL = _clean_env(os.getenv("RAZORPAY_API_URL") or "https://api.razorpay.com/v1").rstrip("/")

# Appels sortants vers la passerelle: délai borné et une seule relance au plus
GATEWAY_TIMEOUT_SECONDS = float(_clean_env(os.getenv("GATEWAY_TIMEOUT_SECONDS") or "") or 10)
GATEWAY_MAX_RETRIES = min(_int_env("GATEWAY_MAX_RETRIES", 1), 1)

# Terrain unique (pool de ressources)
COURT_ID = _clean_env(os.getenv("COURT_ID") or "00000000-0000-0000-0000-000000000001")
COURT_NAME = _clean_env(os.getenv("COURT_NAME") or "TerraKort")
COURT_TIMEZONE = _clean_env(os.getenv("COURT_TIMEZONE") or "Asia/Kolkata")

# Fenêtre d'ouverture (minutes depuis minuit) et durée de session
OPENING_MINUTE = _int_env("OPENING_HOUR", 6) * 60
CLOSING_MINUTE = _int_env("CLOSING_HOUR", 23) * 60
SLOT_MINUTES = _int_env("SLOT_MINUTES", 60)

# Tarifs en unités mineures (paise) par minute, plancher de facturation, devise
SPORTS = ("padel", "pickleball")
PRICE_PER_MINUTE = {
    "padel": _int_env("PRICE_PER_MINUTE_PADEL", 700),
    "pickleball": _int_env("PRICE_PER_MINUTE_PICKLEBALL", 500),
}
MINIMUM_CHARGE = _int_env("MINIMUM_CHARGE", 1000)
CURRENCY = _clean_env(os.getenv("CURRENCY") or "INR")

# Réservations en attente de paiement: durée de vie et fréquence du balayage (0 = désactivé)
RESERVATION_TTL_MINUTES = _int_env("RESERVATION_TTL_MINUTES", 15)
RESERVATION_SWEEP_INTERVAL_SECONDS = _int_env("RESERVATION_SWEEP_INTERVAL_SECONDS", 60)

# Administration (balayage manuel): vide => verrouillé sauf en DEBUG
ADMIN_API_KEY = _clean_env(os.getenv("ADMIN_API_KEY") or "")
DEBUG = (os.getenv("DEBUG", "false").lower() == "true")

# CORS (dev) / hôtes
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
