"""
Module 'payments' (feature-first): point d'entrée public.
Réunit logique panier, client Stripe, repository BD, identité et cas d'usage checkout/verify.
"""

from .cart import validate_items, compute_total, to_minor_units, to_line_items, make_metadata, make_order_number
from .errors import (
    CheckoutError,
    InvalidRequest,
    ConfigurationError,
    GatewayError,
    GatewayTimeout,
    PersistenceError,
)
from .stripe_client import require_stripe, create_session, get_session
from .repository import insert_pending_order, update_order_by_session
from .service import create_checkout_session, verify_payment

__all__ = [
    # cart
    "validate_items",
    "compute_total",
    "to_minor_units",
    "to_line_items",
    "make_metadata",
    "make_order_number",
    # errors
    "CheckoutError",
    "InvalidRequest",
    "ConfigurationError",
    "GatewayError",
    "GatewayTimeout",
    "PersistenceError",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    # repository
    "insert_pending_order",
    "update_order_by_session",
    # services
    "create_checkout_session",
    "verify_payment",
]
