"""
Cas d'usage 'payments': orchestre identité, panier, Stripe, repository.
Règle de propagation:
- les étapes Stripe font foi: leur échec est fatal pour la requête;
- les étapes base de données sont auxiliaires: leur échec est journalisé et
  signalé dans l'issue (PartialFailure / order_updated=False), jamais levé.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from storefront.config import Settings
from storefront.notifications import service as notifications_service
from storefront.orders import repository as orders_repository
from . import cart as cart_logic
from . import identity as identity_logic
from . import repository
from . import stripe_client
from .errors import GatewayError, InvalidRequest, PersistenceError
from .models import (
    Accepted,
    CheckoutOutcome,
    CheckoutRequest,
    OrderStatus,
    PartialFailure,
    VerificationOutcome,
    VerificationResult,
    classify_payment_status,
)

logger = logging.getLogger(__name__)

def redirect_urls(origin: Optional[str], settings: Settings) -> Tuple[str, str]:
    """URLs de succès/annulation relatives à l'origine de la requête (BASE_URL sinon)."""
    base = (origin or "").strip().rstrip("/")
    # Origin: null (iframe sandboxé, file://) n'est pas une URL utilisable
    if not base or base.lower() == "null":
        base = settings.base_url
    return f"{base}{settings.checkout_success_path}", f"{base}{settings.checkout_cancel_path}"

def create_checkout_session(
    body: CheckoutRequest,
    *,
    settings: Settings,
    access_token: Optional[str] = None,
    origin: Optional[str] = None,
) -> CheckoutOutcome:
    """
    Crée la session Stripe Checkout puis la commande 'pending' correspondante.
    Étapes:
      1) Vérifier la configuration Stripe (ConfigurationError)
      2) Valider le panier (InvalidRequest, aucun appel Stripe/DB)
      3) Résoudre l'identité (authentifié > email fourni > invité)
      4) Rechercher un client Stripe existant (best-effort)
      5) Créer la session Stripe (GatewayError si rejet)
      6) Insérer la commande 'pending' (échec -> PartialFailure, la session reste utilisable)
    """
    stripe_client.require_stripe(settings)
    items = cart_logic.validate_items(body.items)
    logger.info("checkout.create items=%s", len(items))

    identity = identity_logic.resolve_identity(body, access_token, settings)
    email = identity_logic.effective_email(identity, settings)
    guest = identity_logic.is_guest(identity)
    logger.info("checkout.create identity=%s email=%s", identity.kind, email)

    customer_id = None if guest else stripe_client.find_customer_id(email, settings)
    if customer_id:
        logger.info("checkout.create existing customer=%s", customer_id)

    total_amount = cart_logic.compute_total(items)
    success_url, cancel_url = redirect_urls(origin, settings)
    session = stripe_client.create_session(
        line_items=cart_logic.to_line_items(items, settings.currency),
        success_url=success_url,
        cancel_url=cancel_url,
        metadata=cart_logic.make_metadata(identity.user_id, items),
        settings=settings,
        customer_id=customer_id,
        customer_email=None if guest else email,
    )
    session_id = session.get("id")
    url = session.get("url")
    if not session_id or not url:
        raise GatewayError("Payment session could not be created")
    logger.info("checkout.create session=%s total=%s", session_id, total_amount)

    order = build_pending_order(body, items_total=total_amount, user_id=identity.user_id, session_id=session_id)
    try:
        row = repository.insert_pending_order(order, settings)
    except PersistenceError as e:
        logger.error("checkout.create order not recorded (non-blocking) session=%s: %s", session_id, e)
        return PartialFailure(url=url, session_id=session_id, reason=str(e))
    logger.info("checkout.create order=%s number=%s", row.get("id"), order["order_number"])
    return Accepted(url=url, session_id=session_id, order=row)

def build_pending_order(
    body: CheckoutRequest,
    *,
    items_total: Decimal,
    user_id: Optional[str],
    session_id: str,
) -> Dict[str, Any]:
    customer_details = None
    if body.customer_info and (body.customer_info.email or body.customer_info.name):
        customer_details = {
            "email": str(body.customer_info.email) if body.customer_info.email else None,
            "name": body.customer_info.name,
        }
    return {
        "user_id": user_id,
        "order_number": cart_logic.make_order_number(),
        "line_items": [it.as_order_item() for it in body.items],
        "total_amount": float(items_total),
        "status": OrderStatus.PENDING.value,
        "shipping_address": body.shipping_address,
        "customer_details": customer_details,
        "payment_session_id": session_id,
    }

def build_order_update(session: Dict[str, Any], status: OrderStatus) -> Dict[str, Any]:
    """Champs écrits par la vérification: statut, coordonnées client et livraison si présentes."""
    data: Dict[str, Any] = {
        "status": status.value,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    details = session.get("customer_details")
    if details:
        data["customer_details"] = {
            "email": details.get("email"),
            "name": details.get("name"),
            "phone": details.get("phone"),
        }
    # Versions récentes de l'API: collected_information.shipping_details
    shipping = session.get("shipping_details") or (session.get("collected_information") or {}).get("shipping_details")
    if shipping:
        data["shipping_address"] = {
            "name": shipping.get("name"),
            "address": shipping.get("address"),
        }
    return data

def _reference(value: Any) -> Optional[str]:
    # payment_intent peut être un id ou un objet développé
    if isinstance(value, dict):
        return value.get("id")
    return value

def to_verification_result(session: Dict[str, Any], session_id: str) -> VerificationResult:
    return VerificationResult(
        session_id=session.get("id") or session_id,
        payment_status=session.get("payment_status"),
        customer_email=(session.get("customer_details") or {}).get("email"),
        amount_total=session.get("amount_total"),
        currency=session.get("currency"),
        payment_intent=_reference(session.get("payment_intent")),
        created=session.get("created"),
    )

def verify_payment(session_id: Optional[str], *, settings: Settings) -> VerificationOutcome:
    """
    Vérifie une session Stripe et répercute son issue sur la commande locale.
    - InvalidRequest si session_id absent, ConfigurationError si Stripe non configuré.
    - Classification idempotente: une commande déjà réglée dans l'autre état n'est pas modifiée,
      réappliquer le même état est un no-op.
    - Le résultat est renvoyé même si la commande est introuvable ou si l'écriture échoue.
    """
    sid = (session_id or "").strip()
    if not sid:
        raise InvalidRequest("Session ID is required")
    stripe_client.require_stripe(settings)

    session = stripe_client.get_session(sid, settings)
    result = to_verification_result(session, sid)
    target = classify_payment_status(result.payment_status)
    logger.info("checkout.verify session=%s payment_status=%s -> %s", sid, result.payment_status, target.value)

    outcome = VerificationOutcome(result=result, order_status=target)
    existing = orders_repository.get_order_by_session(sid, settings)
    current = (existing or {}).get("status")
    settled = {s.value for s in OrderStatus if s.is_terminal}
    if current in settled and current != target.value:
        logger.warning(
            "checkout.verify order already settled session=%s status=%s gateway=%s; left unchanged",
            sid, current, result.payment_status,
        )
        outcome.order = existing
        return outcome

    try:
        rows = repository.update_order_by_session(
            sid,
            build_order_update(session, target),
            settings,
            only_statuses=(OrderStatus.PENDING.value, target.value),
        )
    except PersistenceError as e:
        logger.error("checkout.verify order update failed (non-blocking) session=%s: %s", sid, e)
        outcome.order = existing
        return outcome

    if not rows:
        logger.warning("checkout.verify no matching order for session=%s", sid)
        outcome.order = existing
        return outcome

    outcome.order = rows[0]
    outcome.order_updated = True
    logger.info("checkout.verify order=%s status=%s", outcome.order.get("id"), target.value)
    # Notification sur la seule transition pending -> paid observée (statut inconnu: pas d'envoi)
    if target is OrderStatus.PAID and current == OrderStatus.PENDING.value:
        notifications_service.notify_payment_confirmed(outcome.order, settings)
    return outcome
