"""
Taxonomie d'erreurs du checkout.
- Chaque erreur porte un status HTTP et un message public (ce que voit le client).
- Le handler applicatif (app_setup.exceptions) rend toute CheckoutError en {"error": message}.
- PersistenceError n'est jamais rendue au client: elle dégrade un succès en PartialFailure.
"""
from typing import Optional


class CheckoutError(Exception):
    status_code: int = 500
    default_message: str = "Payment processing failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message


class InvalidRequest(CheckoutError):
    status_code = 400
    default_message = "Invalid request"


class ConfigurationError(CheckoutError):
    """Identifiants manquants: la cause reste dans les logs, le client reçoit un message générique."""
    status_code = 503
    default_message = "Payment service unavailable. Please contact support."

    @property
    def public_message(self) -> str:
        return self.default_message


class GatewayError(CheckoutError):
    status_code = 502
    default_message = "Payment provider rejected the request"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class GatewayTimeout(CheckoutError):
    status_code = 504
    default_message = "Payment provider did not respond in time. Please try again."


class PersistenceError(CheckoutError):
    default_message = "Order bookkeeping failed"
