"""
Adaptateur Stripe: centralise les appels et la traduction des erreurs Stripe.
- La clé API est passée par requête (api_key=...), jamais posée globalement sur le module.
- Les objets Stripe sont convertis en dict avant de quitter ce module.
"""
import logging
from typing import Any, Dict, List, Optional

import stripe

from storefront.config import Settings
from .errors import ConfigurationError, GatewayError

logger = logging.getLogger(__name__)

# module storefront.payments.stripe_client
def require_stripe(settings: Settings) -> str:
    """
    Retourne la clé secrète Stripe prête à l’emploi.
    - ConfigurationError si STRIPE_SECRET_KEY est absent (aucun appel Stripe n'est tenté).
    """
    if not settings.stripe_secret_key:
        logger.error("STRIPE_SECRET_KEY not configured")
        raise ConfigurationError("STRIPE_SECRET_KEY manquant")
    return settings.stripe_secret_key

def _to_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if hasattr(obj, "to_dict_recursive"):
        return obj.to_dict_recursive()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)

def translate_error(e: stripe.StripeError) -> Exception:
    """
    Traduit une erreur Stripe vers la taxonomie checkout.
    - AuthenticationError/PermissionError: clé invalide -> ConfigurationError (message générique côté client)
    - InvalidRequestError/CardError: rejet métier -> 400/402 avec le message Stripe (destiné à l'utilisateur)
    - Le reste (réseau, rate limit, API): 502 générique
    """
    if isinstance(e, (stripe.AuthenticationError, stripe.PermissionError)):
        return ConfigurationError(f"Stripe credentials rejected: {e.user_message}")
    if isinstance(e, stripe.CardError):
        return GatewayError(e.user_message, status_code=402)
    if isinstance(e, stripe.InvalidRequestError):
        return GatewayError(e.user_message, status_code=400)
    return GatewayError()

def find_customer_id(email: str, settings: Settings) -> Optional[str]:
    """
    Recherche best-effort d'un client Stripe par email.
    - Retourne l'id du premier client trouvé, sinon None.
    - Les erreurs Stripe sont journalisées et ignorées (Stripe créera le client implicitement).
    """
    if not email:
        return None
    try:
        customers = stripe.Customer.list(email=email, limit=1, api_key=require_stripe(settings))
        data = _to_dict(customers).get("data") or []
        return data[0].get("id") if data else None
    except stripe.StripeError:
        logger.warning("payments.stripe_client.find_customer_id failed email=%s", email, exc_info=True)
        return None

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    settings: Settings,
    customer_id: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout hébergée.
    - mode payment, carte, adresse de facturation obligatoire
    - collecte de l'adresse de livraison limitée à settings.shipping_countries
    - customer si un client Stripe existe, sinon customer_email pré-rempli
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    api_key = require_stripe(settings)
    params: Dict[str, Any] = {
        "line_items": line_items,
        "mode": "payment",
        "payment_method_types": ["card"],
        "shipping_address_collection": {"allowed_countries": list(settings.shipping_countries)},
        "billing_address_collection": "required",
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }
    if customer_id:
        params["customer"] = customer_id
    elif customer_email:
        params["customer_email"] = customer_email
    try:
        session = stripe.checkout.Session.create(api_key=api_key, **params)
    except stripe.StripeError as e:
        logger.warning("payments.stripe_client.create_session rejected: %s", e)
        raise translate_error(e) from e
    return _to_dict(session)

def get_session(session_id: str, settings: Settings) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout (line_items et customer développés).
    Retour: dict session incluant "payment_status", "customer_details", "amount_total", etc.
    """
    api_key = require_stripe(settings)
    try:
        session = stripe.checkout.Session.retrieve(
            session_id,
            expand=["line_items", "customer"],
            api_key=api_key,
        )
    except stripe.StripeError as e:
        logger.warning("payments.stripe_client.get_session failed session_id=%s: %s", session_id, e)
        raise translate_error(e) from e
    return _to_dict(session)
