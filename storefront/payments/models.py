"""
Types du checkout: corps de requêtes/réponses (pydantic) et issues des cas d'usage.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator


class CartLineItem(BaseModel):
    product_id: str
    name: str
    # Le client historique envoie "price"
    unit_price: Decimal = Field(validation_alias=AliasChoices("unit_price", "price"))
    quantity: int
    image_url: Optional[str] = None

    @field_validator("product_id", mode="before")
    def product_id_as_str(cls, v: Any) -> str:
        return str(v) if v is not None else v

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def as_order_item(self) -> Dict[str, Any]:
        """Snapshot JSON-compatible stocké dans orders.line_items."""
        item: Dict[str, Any] = {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": float(self.unit_price),
            "quantity": self.quantity,
        }
        if self.image_url:
            item["image_url"] = self.image_url
        return item


class CustomerInfo(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None


class CheckoutRequest(BaseModel):
    items: List[CartLineItem] = Field(default_factory=list)
    customer_info: Optional[CustomerInfo] = None
    shipping_address: Optional[Any] = None


class CheckoutResponse(BaseModel):
    url: str
    session_id: str


class VerifyRequest(BaseModel):
    session_id: Optional[str] = None


class VerificationResult(BaseModel):
    session_id: str
    payment_status: Optional[str] = None
    customer_email: Optional[str] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None
    payment_intent: Optional[str] = None
    created: Optional[int] = None


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


PAID_EQUIVALENTS = frozenset({"paid", "succeeded", "no_payment_required"})

def classify_payment_status(payment_status: Optional[str]) -> OrderStatus:
    """Statut gateway -> statut local. Tout ce qui n'est pas payé est 'failed'."""
    if (payment_status or "").strip().lower() in PAID_EQUIVALENTS:
        return OrderStatus.PAID
    return OrderStatus.FAILED


# --- Issues des cas d'usage ---

@dataclass
class Accepted:
    url: str
    session_id: str
    order: Dict[str, Any] = field(default_factory=dict)
    order_recorded: bool = True


@dataclass
class PartialFailure:
    """La session de paiement existe (url utilisable) mais la commande locale n'a pas été écrite."""
    url: str
    session_id: str
    reason: str = ""
    order_recorded: bool = False


CheckoutOutcome = Union[Accepted, PartialFailure]


@dataclass
class VerificationOutcome:
    result: VerificationResult
    order_status: OrderStatus
    order_updated: bool = False
    order: Optional[Dict[str, Any]] = None
