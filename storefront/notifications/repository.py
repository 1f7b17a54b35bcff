import logging
from typing import Any, Dict
import storefront.infra.supabase_client as supabase_client
from storefront.config import Settings

logger = logging.getLogger(__name__)

def create_notification(params: Dict[str, Any], settings: Settings) -> bool:
    """Appel RPC create_notification (service-role). True si l'appel a abouti."""
    try:
        supabase_client.get_service_supabase(settings).rpc("create_notification", params).execute()
        return True
    except Exception:
        logger.exception("notifications.repository.create_notification failed user_id=%s", params.get("target_user_id"))
        return False
