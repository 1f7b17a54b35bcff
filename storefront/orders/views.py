# module storefront.orders.views
"""Endpoints de lecture des commandes.
- GET /api/v1/orders: commandes de l'utilisateur authentifié (bearer requis).
- GET /api/v1/orders/session/{session_id}: commande d'une session Stripe (page de confirmation).
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.config import Settings
from storefront.orders import service as orders_service
from storefront.utils.security import get_settings, require_user

router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

@router.get("")
def my_orders(
    limit: int = Query(default=50, ge=1, le=200),
    user: Dict[str, Any] = Depends(require_user),
    settings: Settings = Depends(get_settings),
):
    return {"orders": orders_service.list_orders_for_user(user["id"], settings, limit=limit)}

@router.get("/session/{session_id}")
def order_by_session(session_id: str, settings: Settings = Depends(get_settings)):
    order = orders_service.get_public_order(session_id, settings)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
