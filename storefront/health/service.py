"""Sondes de santé des dépendances externes (Supabase, Stripe)."""
import logging
from typing import Any, Dict
from storefront.config import Settings
import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

def health_supabase_info(settings: Settings) -> Dict[str, Any]:
    info: Dict[str, Any] = {"configured": settings.supabase_configured, "reachable": False}
    if not settings.supabase_configured:
        return info
    try:
        supabase_client.get_service_supabase(settings).table(settings.orders_table).select("id").limit(1).execute()
        info["reachable"] = True
    except Exception as e:
        logger.warning("health.supabase probe failed: %s", e)
        info["error"] = type(e).__name__
    return info

def health_stripe_info(settings: Settings) -> Dict[str, Any]:
    # Pas d'appel réseau: la présence et le mode de la clé suffisent
    key = settings.stripe_secret_key
    mode = None
    if key.startswith("sk_live_") or key.startswith("rk_live_"):
        mode = "live"
    elif key:
        mode = "test"
    return {"configured": settings.payments_configured, "mode": mode, "currency": settings.currency}
