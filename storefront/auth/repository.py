from typing import Any, Dict, Optional
import storefront.infra.supabase_client as supabase_client
from storefront.config import Settings

# --- Auth (supabase.auth.*) ---

def get_user_from_access_token(access_token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Récupère et normalise l’utilisateur depuis supabase.auth.get_user(access_token).
    - Client service-role: la validation du JWT est faite par GoTrue.
    - Retour: {id, email, user_metadata} ou {} si le token ne correspond à personne.
    - Les erreurs réseau/token invalide sont propagées à l'appelant.
    """
    res = supabase_client.get_service_supabase(settings).auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}
