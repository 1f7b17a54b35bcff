# storefront.config
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend checkout.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise les secrets/URLs (Supabase, Stripe)
- Expose une structure Settings immuable, injectée dans l'app par la factory
  (app.state.settings) puis passée explicitement aux services
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_list(name: str, default: str) -> List[str]:
    return [p.strip() for p in os.getenv(name, default).split(",") if p.strip()]

def _env_float(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name, "")) or default)
    except ValueError:
        return default

def _normalize_supabase_url(url: str) -> str:
    # SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
    if url and not url.startswith("http"):
        url = "https://" + url
    return url.rstrip("/")


@dataclass(frozen=True)
class Settings:
    # Supabase (auth, tables, rpc)
    supabase_url: str = ""
    supabase_service_key: str = ""
    orders_table: str = "orders"

    # Stripe Checkout
    stripe_secret_key: str = ""
    currency: str = "inr"
    shipping_countries: List[str] = field(default_factory=lambda: ["IN"])
    guest_email: str = "guest@kbeauty.com"

    # Redirections après paiement (relatives à l'origine de la requête)
    base_url: str = "http://localhost:8000"
    checkout_success_path: str = "/payment-success?session_id={CHECKOUT_SESSION_ID}"
    checkout_cancel_path: str = "/cart?canceled=true"

    # Délais imposés par l'appelant (secondes)
    checkout_timeout: float = 10.0
    verify_timeout: float = 5.0

    # HTTP
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    allowed_hosts: List[str] = field(default_factory=lambda: ["*"])
    hsts_enabled: bool = False

    @property
    def payments_configured(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)


def load_settings() -> Settings:
    """
    Construit Settings depuis l'environnement.
    - SUPABASE_SERVICE_ROLE_KEY est accepté comme alias de SUPABASE_SERVICE_KEY
    - SHIPPING_COUNTRIES / CORS_ORIGINS / ALLOWED_HOSTS: listes séparées par des virgules
    """
    supabase_url = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
    return Settings(
        supabase_url=_normalize_supabase_url(supabase_url),
        supabase_service_key=_clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or ""),
        orders_table=_clean_env(os.getenv("ORDERS_TABLE") or "orders"),
        stripe_secret_key=_clean_env(os.getenv("STRIPE_SECRET_KEY") or ""),
        currency=_clean_env(os.getenv("PAYMENT_CURRENCY") or "inr").lower(),
        shipping_countries=[c.upper() for c in _env_list("SHIPPING_COUNTRIES", "IN")],
        guest_email=_clean_env(os.getenv("GUEST_EMAIL") or "guest@kbeauty.com"),
        base_url=_clean_env(os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/"),
        checkout_success_path=os.getenv("CHECKOUT_SUCCESS_PATH", "/payment-success?session_id={CHECKOUT_SESSION_ID}"),
        checkout_cancel_path=os.getenv("CHECKOUT_CANCEL_PATH", "/cart?canceled=true"),
        checkout_timeout=_env_float("CHECKOUT_TIMEOUT_SECONDS", 10.0),
        verify_timeout=_env_float("VERIFY_TIMEOUT_SECONDS", 5.0),
        cors_origins=_env_list("CORS_ORIGINS", "*"),
        allowed_hosts=_env_list("ALLOWED_HOSTS", "*"),
        hsts_enabled=(os.getenv("HSTS_ENABLED") or os.getenv("COOKIE_SECURE", "false")).lower() == "true",
    )

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings du process (chargés une seule fois)."""
    return load_settings()
