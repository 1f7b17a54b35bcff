"""Lecture des commandes (table settings.orders_table). Erreurs -> valeurs neutres."""
import logging
from typing import List, Optional
import storefront.infra.supabase_client as supabase_client
from storefront.config import Settings

logger = logging.getLogger(__name__)

ORDER_COLUMNS = (
    "id, user_id, order_number, line_items, total_amount, status, shipping_address, "
    "customer_details, payment_session_id, created_at, updated_at"
)

def list_user_orders(user_id: str, settings: Settings, limit: int = 50) -> List[dict]:
    """
    Commandes de l'utilisateur, les plus récentes d'abord.
    - En cas d'erreur: liste vide
    """
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase(settings)
            .table(settings.orders_table)
            .select(ORDER_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_user_orders failed user_id=%s", user_id)
        return []

def get_order_by_session(session_id: str, settings: Settings) -> Optional[dict]:
    if not session_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase(settings)
            .table(settings.orders_table)
            .select(ORDER_COLUMNS)
            .eq("payment_session_id", session_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.get_order_by_session failed session_id=%s", session_id)
        return None
