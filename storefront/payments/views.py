# module storefront.payments.views
"""Endpoints du checkout.
- POST /create-checkout: panier -> session Stripe hébergée + commande 'pending' (rate-limité).
- POST|GET /verify-payment: retour de Stripe -> statut de paiement + mise à jour de la commande.
Le bearer token est optionnel et n'est consommé que par create-checkout (identité).
"""
import asyncio
import functools
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from storefront.config import Settings
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import bearer_token, get_settings
from storefront.payments import service as payments_service
from storefront.payments.errors import CheckoutError, GatewayTimeout
from storefront.payments.models import (
    CheckoutRequest,
    CheckoutResponse,
    PartialFailure,
    VerificationResult,
    VerifyRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

async def _run_with_timeout(timeout: float, fn, *args, **kwargs):
    """Exécute un cas d'usage bloquant (SDK Stripe/Supabase) dans l'executor avec un délai max.
    Au-delà du délai la requête répond 504; l'appel en cours se termine en arrière-plan.
    """
    loop = asyncio.get_running_loop()
    call = functools.partial(fn, *args, **kwargs)
    try:
        return await asyncio.wait_for(loop.run_in_executor(None, call), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("payments.%s timed out after %ss", getattr(fn, "__name__", "call"), timeout)
        raise GatewayTimeout()

@router.post(
    "/create-checkout",
    response_model=CheckoutResponse,
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60))],
)
async def create_checkout(request: Request, body: CheckoutRequest, settings: Settings = Depends(get_settings)):
    """
    Crée une session Checkout Stripe pour le panier (invité ou authentifié).
    - Entrée JSON: {"items": [{product_id, name, unit_price|price, quantity, image_url?}], "customer_info"?, "shipping_address"?}
    - Sortie: {"url", "session_id"}
    - Un échec d'écriture de la commande locale ne bloque pas le paiement (journalisé).
    - Erreurs: 400 panier invalide, 503 Stripe non configuré, 502/400 rejet Stripe, 504 délai dépassé.
    """
    try:
        outcome = await _run_with_timeout(
            settings.checkout_timeout,
            payments_service.create_checkout_session,
            body,
            settings=settings,
            access_token=bearer_token(request),
            origin=request.headers.get("origin"),
        )
    except CheckoutError:
        raise
    except Exception:
        logger.exception("Erreur create_checkout")
        raise HTTPException(status_code=500, detail="Payment processing failed")

    if isinstance(outcome, PartialFailure):
        logger.warning(
            "payments.create_checkout session=%s returned without local order: %s",
            outcome.session_id, outcome.reason,
        )
    return CheckoutResponse(url=outcome.url, session_id=outcome.session_id)

@router.post("/verify-payment", response_model=VerificationResult)
async def verify_payment(body: VerifyRequest, settings: Settings = Depends(get_settings)):
    """
    Vérifie la session Stripe au retour du client et met à jour la commande.
    - Entrée JSON: {"session_id": "cs_..."}
    - Sortie: {session_id, payment_status (valeur Stripe telle quelle), customer_email, amount_total, currency, payment_intent, created}
    - La réponse est renvoyée même si la commande locale est introuvable.
    """
    return await _verify(body.session_id, settings)

@router.get("/verify-payment", response_model=VerificationResult)
async def verify_payment_get(session_id: Optional[str] = None, settings: Settings = Depends(get_settings)):
    """Variante GET: session_id en query (lien de retour Stripe). Délègue à la même logique."""
    return await _verify(session_id, settings)

async def _verify(session_id: Optional[str], settings: Settings) -> VerificationResult:
    try:
        outcome = await _run_with_timeout(
            settings.verify_timeout,
            payments_service.verify_payment,
            session_id,
            settings=settings,
        )
    except CheckoutError:
        raise
    except Exception:
        logger.exception("Erreur verify_payment")
        raise HTTPException(status_code=500, detail="Payment verification failed")

    if not outcome.order_updated:
        logger.info("payments.verify_payment session=%s order not updated", outcome.result.session_id)
    return outcome.result
