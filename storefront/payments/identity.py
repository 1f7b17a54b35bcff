"""
Résolution de l'identité client pour le checkout.
Ordre de priorité: utilisateur authentifié (bearer valide) > email fourni > invité.
Un token invalide n'est jamais bloquant: on journalise et on passe à la variante suivante.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from storefront.auth import repository as auth_repository
from storefront.config import Settings
from .models import CheckoutRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: str
    email: Optional[str]
    kind: str = "authenticated"


@dataclass(frozen=True)
class ContactIdentity:
    email: str
    kind: str = "contact"

    @property
    def user_id(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class GuestIdentity:
    email: str
    kind: str = "guest"

    @property
    def user_id(self) -> Optional[str]:
        return None


Identity = Union[AuthenticatedIdentity, ContactIdentity, GuestIdentity]
Resolver = Callable[[], Optional[Identity]]


def _from_token(access_token: Optional[str], settings: Settings) -> Optional[AuthenticatedIdentity]:
    if not access_token:
        return None
    try:
        user = auth_repository.get_user_from_access_token(access_token, settings)
    except Exception as e:
        logger.info("checkout.identity token rejected, falling back to guest checkout: %s", e)
        return None
    if not user.get("id"):
        logger.info("checkout.identity token resolved to no user, falling back to guest checkout")
        return None
    return AuthenticatedIdentity(user_id=str(user["id"]), email=user.get("email"))

def _from_contact(body: CheckoutRequest) -> Optional[ContactIdentity]:
    email = (body.customer_info.email if body.customer_info else None) or ""
    return ContactIdentity(email=str(email)) if email else None

def resolve_identity(body: CheckoutRequest, access_token: Optional[str], settings: Settings) -> Identity:
    """Première variante résolue dans l'ordre; GuestIdentity en dernier recours."""
    resolvers: List[Resolver] = [
        lambda: _from_token(access_token, settings),
        lambda: _from_contact(body),
    ]
    for resolve in resolvers:
        identity = resolve()
        if identity is not None:
            # Un utilisateur authentifié sans email garde l'email de contact éventuel
            if isinstance(identity, AuthenticatedIdentity) and not identity.email:
                contact = _from_contact(body)
                if contact:
                    identity = AuthenticatedIdentity(user_id=identity.user_id, email=contact.email)
            return identity
    return GuestIdentity(email=settings.guest_email)

def effective_email(identity: Identity, settings: Settings) -> str:
    return identity.email or settings.guest_email

def is_guest(identity: Identity) -> bool:
    return isinstance(identity, GuestIdentity)
