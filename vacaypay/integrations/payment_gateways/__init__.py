"""
Payment gateway integration modules

Provides the VacayPay adapter behind the generic gateway interface,
with consistent result and error handling.
"""

from .base import (
    BillingAddress,
    ChargeOptions,
    CreditCard,
    GatewayConfigurationError,
    PaymentError,
    PaymentGateway,
    PaymentGatewayFactory,
    PaymentGatewayType,
    PaymentResult,
    ResponseError,
    StandardErrorCode,
    UnsupportedActionError,
)
from .payment_methods import InlineCardResolver, PaymentMethodResolver, StripeTokenResolver
from .vacaypay_adapter import VacayPayAdapter

PaymentGatewayFactory.register_gateway(PaymentGatewayType.VACAYPAY, VacayPayAdapter)

__all__ = [
    "BillingAddress",
    "ChargeOptions",
    "CreditCard",
    "GatewayConfigurationError",
    "InlineCardResolver",
    "PaymentError",
    "PaymentGateway",
    "PaymentGatewayFactory",
    "PaymentGatewayType",
    "PaymentMethodResolver",
    "PaymentResult",
    "ResponseError",
    "StandardErrorCode",
    "StripeTokenResolver",
    "UnsupportedActionError",
    "VacayPayAdapter",
]
