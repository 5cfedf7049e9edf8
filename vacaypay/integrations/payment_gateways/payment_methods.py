"""
Payment method resolution for charge payloads.

VacayPay accepts either a Stripe card token or raw card fields. Which one an
adapter sends is chosen by configuration through a resolver; both produce the
payload fragment for the charge, and the tokenizing resolver can short-circuit
the charge with the tokenization failure.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

from .base import CreditCard, PaymentResult, PaymentSource

if TYPE_CHECKING:
    from .vacaypay_adapter import VacayPayAdapter


@dataclass
class ResolvedPaymentMethod:
    """Charge payload fields, or the failure that stops the charge."""
    fields: Dict[str, Any] = field(default_factory=dict)
    failure: Optional[PaymentResult] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


class PaymentMethodResolver(Protocol):
    name: str

    def resolve(self, gateway: "VacayPayAdapter", payment_method: PaymentSource) -> ResolvedPaymentMethod:
        ...


class StripeTokenResolver:
    """Vault the card with Stripe first and charge the returned token."""

    name = "tokenize"

    def resolve(self, gateway: "VacayPayAdapter", payment_method: PaymentSource) -> ResolvedPaymentMethod:
        if isinstance(payment_method, str):
            return ResolvedPaymentMethod(fields={"cardToken": payment_method})

        token_response = gateway.tokenize(payment_method)
        if not token_response.success:
            return ResolvedPaymentMethod(failure=token_response)

        return ResolvedPaymentMethod(fields={"cardToken": token_response.authorization})


class InlineCardResolver:
    """Send card fields directly unless a token was supplied."""

    name = "inline"

    def resolve(self, gateway: "VacayPayAdapter", payment_method: PaymentSource) -> ResolvedPaymentMethod:
        if isinstance(payment_method, str):
            return ResolvedPaymentMethod(fields={"cardToken": payment_method})
        return ResolvedPaymentMethod(fields={"card": self.card_fields(payment_method)})

    @staticmethod
    def card_fields(card: CreditCard) -> Dict[str, str]:
        fields: Dict[str, str] = {}
        if card.name:
            fields["name"] = card.name
        fields["number"] = card.digits
        if card.verification_value:
            fields["cvv"] = str(card.verification_value)
        fields["expiryYear"] = f"{card.full_year:04d}"
        fields["expiryMonth"] = f"{int(card.month):02d}"
        return fields


RESOLVERS = {
    StripeTokenResolver.name: StripeTokenResolver,
    InlineCardResolver.name: InlineCardResolver,
}


def resolver_for_mode(mode: str) -> PaymentMethodResolver:
    try:
        return RESOLVERS[mode.lower()]()
    except KeyError:
        raise ValueError(f"Unsupported payment method mode: {mode}") from None
