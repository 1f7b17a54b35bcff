from functools import lru_cache
from typing import Optional
from supabase import create_client, Client
from storefront.config import Settings, get_settings

@lru_cache(maxsize=4)
def _client(url: str, key: str) -> Client:
    return create_client(url, key)

def get_service_supabase(settings: Optional[Settings] = None) -> Client:
    """
    Client service-role (bypass RLS).
    Utilisé côté serveur pour les commandes, la résolution d'identité et les notifications:
    les gestionnaires checkout/verify ne s'exécutent pas au nom d'un utilisateur.
    """
    settings = settings or get_settings()
    if not settings.supabase_configured:
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
    return _client(settings.supabase_url, settings.supabase_service_key)
