"""
Logique panier pure (pas de Stripe, pas de DB).
"""
import secrets
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence

from .errors import InvalidRequest
from .models import CartLineItem

# module storefront.payments.cart
def validate_items(items: Optional[Sequence[CartLineItem]]) -> List[CartLineItem]:
    """
    Valide le snapshot de panier envoyé par le client.
    - Soulève InvalidRequest si la liste est vide.
    - Soulève InvalidRequest si une ligne a une quantité <= 0, un prix négatif ou pas de product_id.
    - Aucune ligne n'est ignorée silencieusement.
    """
    if not items:
        raise InvalidRequest("No items provided for checkout")
    for it in items:
        if not (it.product_id or "").strip():
            raise InvalidRequest("Every item needs a product_id")
        if it.quantity <= 0:
            raise InvalidRequest(f"Invalid quantity for product {it.product_id}")
        if it.unit_price < 0:
            raise InvalidRequest(f"Invalid price for product {it.product_id}")
    return list(items)

def compute_total(items: Sequence[CartLineItem]) -> Decimal:
    """Somme des unit_price * quantity (affichage/audit, pas le montant facturé)."""
    return sum((it.line_total for it in items), Decimal("0"))

def to_minor_units(amount: Decimal) -> int:
    """Montant -> plus petite unité monétaire (paise/centimes), arrondi à l'entier le plus proche."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def to_line_items(items: Sequence[CartLineItem], currency: str) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe (price_data) à partir du panier.
    - unit_amount en unités mineures, product_data.name/images et metadata.product_id.
    - La somme de ces lignes est le montant réellement débité.
    """
    line_items: List[Dict[str, Any]] = []
    for it in items:
        line_items.append({
            "quantity": it.quantity,
            "price_data": {
                "currency": currency,
                "unit_amount": to_minor_units(it.unit_price),
                "product_data": {
                    "name": it.name,
                    "images": [it.image_url] if it.image_url else [],
                    "metadata": {"product_id": it.product_id},
                },
            },
        })
    return line_items

def make_metadata(user_id: Optional[str], items: Sequence[CartLineItem]) -> Dict[str, str]:
    """Métadonnées de session (Stripe n'accepte que des chaînes)."""
    return {
        "user_id": user_id or "guest",
        "total_items": str(len(items)),
    }

def make_order_number(now_ms: Optional[int] = None) -> str:
    """Numéro lisible ORD-<epoch ms>-<hex>; le suffixe évite les collisions sans compteur partagé."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"ORD-{now_ms}-{secrets.token_hex(2).upper()}"
