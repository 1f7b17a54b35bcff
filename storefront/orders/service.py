"""Couche service des commandes (lecture: compte client, page de confirmation)."""
from typing import Any, Dict, List, Optional
from storefront.config import Settings
from storefront.orders import repository

# Champs personnels retirés de la vue publique (accès par session_id seul)
PRIVATE_FIELDS = ("customer_details", "shipping_address", "user_id")

def list_orders_for_user(user_id: str, settings: Settings, limit: int = 50) -> List[Dict[str, Any]]:
    return repository.list_user_orders(user_id, settings, limit=limit)

def get_public_order(session_id: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """Commande miroir d'une session Stripe, sans les données personnelles."""
    order = repository.get_order_by_session(session_id, settings)
    if not order:
        return None
    return {k: v for k, v in order.items() if k not in PRIVATE_FIELDS}
