"""Notifications applicatives émises par le backend (cloche côté storefront)."""
import logging
from typing import Any, Dict, Optional

from storefront.config import Settings
from storefront.notifications import repository

logger = logging.getLogger(__name__)

PAYMENT_CONFIRMED = "payment_confirmed"

def notify_payment_confirmed(order: Optional[Dict[str, Any]], settings: Settings) -> bool:
    """
    Notifie le client qu'un paiement a été confirmé.
    - Ignoré pour une commande invité (user_id null) ou inconnue.
    - Best-effort: un échec est journalisé par le repository, jamais propagé.
    """
    user_id = (order or {}).get("user_id")
    if not user_id:
        return False
    order_number = order.get("order_number") or ""
    params = {
        "target_user_id": user_id,
        "target_user_role": "customer",
        "notification_title": "Payment confirmed",
        "notification_message": f"Your payment for order {order_number} has been received",
        "notification_type_param": PAYMENT_CONFIRMED,
        "notification_metadata": {
            "order_id": order.get("id"),
            "order_number": order_number,
            "session_id": order.get("payment_session_id"),
        },
    }
    sent = repository.create_notification(params, settings)
    if sent:
        logger.info("notifications.payment_confirmed user_id=%s order_number=%s", user_id, order_number)
    return sent
