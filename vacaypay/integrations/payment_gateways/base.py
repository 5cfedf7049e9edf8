"""
Payment Gateway Base Classes and Interfaces

Defines the contract and shared behaviour for payment gateway adapters:
the verb set every gateway exposes, the normalized result type, the
standardized error codes and the gateway factory.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class PaymentGatewayType(str, Enum):
    """Supported payment gateway types."""
    VACAYPAY = "vacaypay"


class StandardErrorCode(str, Enum):
    """
    Provider-agnostic decline and error categories.

    Callers branch on these without knowing a processor's own vocabulary.
    """
    INCORRECT_NUMBER = "incorrect_number"
    INVALID_NUMBER = "invalid_number"
    INVALID_EXPIRY_DATE = "invalid_expiry_date"
    INVALID_CVC = "invalid_cvc"
    EXPIRED_CARD = "expired_card"
    INCORRECT_CVC = "incorrect_cvc"
    INCORRECT_ZIP = "incorrect_zip"
    INCORRECT_PIN = "incorrect_pin"
    CARD_DECLINED = "card_declined"
    PROCESSING_ERROR = "processing_error"
    CALL_ISSUER = "call_issuer"
    TEST_MODE_LIVE_CARD = "test_mode_live_card"


@dataclass
class CreditCard:
    """Card details as supplied by the caller."""
    number: str
    month: int
    year: int
    verification_value: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def digits(self) -> str:
        """Card number without spaces, dashes or other separators."""
        return re.sub(r"\D", "", str(self.number))

    @property
    def full_year(self) -> int:
        year = int(self.year)
        return year + 2000 if year < 100 else year


@dataclass
class BillingAddress:
    """Billing address; every field is optional."""
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None


@dataclass
class ChargeOptions:
    """Per-call options for purchase, authorize, capture, refund and void."""
    currency: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    external_payment_reference: Optional[str] = None
    external_booking_reference: Optional[str] = None
    accessing_ip: Optional[str] = None
    billing_address: Optional[BillingAddress] = None
    send_email_confirmation: bool = False
    reason: Optional[str] = None


PaymentSource = Union[CreditCard, str]


@dataclass
class PaymentResult:
    """
    Normalized result of a gateway operation.

    Attributes:
        success: Whether the provider accepted the request
        message: Human readable outcome, never empty
        params: Raw parsed provider response, kept for inspection
        authorization: Provider reference for follow-up capture/refund/void
        error_code: StandardErrorCode value, or the raw provider code when unmapped
        test: Whether the gateway runs in test mode
    """
    success: bool
    message: str
    params: Dict[str, Any] = field(default_factory=dict)
    authorization: Optional[str] = None
    error_code: Optional[str] = None
    test: bool = False


class PaymentError(Exception):
    """Payment gateway specific errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(message)
        self.error_message = message
        self.error_code = error_code
        self.provider = provider


class GatewayConfigurationError(PaymentError):
    """Raised when a gateway is built without the credentials it needs."""


class UnsupportedActionError(PaymentError):
    """Raised for an action the gateway has no endpoint for."""


class ResponseError(PaymentError):
    """
    Raised by the transport for non-2xx responses and connection failures.

    ``body`` holds the response text when the provider answered, and is
    None when no response was received.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(
            message,
            error_code=str(status_code) if status_code is not None else None,
            provider=provider,
        )
        self.status_code = status_code
        self.body = body


class PaymentGateway(ABC):
    """Abstract base class for payment gateway adapters."""

    display_name: str = ""
    default_currency: str = "USD"
    supported_countries: List[str] = []
    supported_cardtypes: List[str] = []

    def __init__(self, test: bool = False):
        """Initialize the payment gateway."""
        self.test = test
        self.gateway_type = self._get_gateway_type()

    @abstractmethod
    def _get_gateway_type(self) -> PaymentGatewayType:
        """Return the gateway type identifier."""
        pass

    @abstractmethod
    def tokenize(self, card: CreditCard) -> PaymentResult:
        """Exchange card details for a reusable token."""
        pass

    @abstractmethod
    def purchase(
        self,
        money: int,
        payment_method: PaymentSource,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        """
        Authorize and capture in one step.

        Args:
            money: Amount in minor units (cents)
            payment_method: Card details or an existing token
            options: Customer, address and currency options

        Returns:
            PaymentResult whose authorization references the payment
        """
        pass

    @abstractmethod
    def authorize(
        self,
        money: int,
        payment_method: PaymentSource,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        """Reserve funds without capturing them."""
        pass

    @abstractmethod
    def capture(
        self,
        money: int,
        authorization: str,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        """Capture a previously authorized payment."""
        pass

    @abstractmethod
    def refund(
        self,
        money: int,
        authorization: str,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        """Refund a captured payment, fully or partially."""
        pass

    @abstractmethod
    def void(
        self,
        authorization: str,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        """Cancel a payment."""
        pass

    def supports_scrubbing(self) -> bool:
        return False

    def scrub(self, transcript: str) -> str:
        raise NotImplementedError("Transcript scrubbing not implemented for this gateway")

    def amount(self, money: int) -> str:
        """Format minor units as a major-unit decimal string, e.g. 10000 -> '100.00'."""
        if money is None:
            raise ValueError("money is required")
        if isinstance(money, (float, Decimal)):
            raise TypeError("money must be an integer amount in minor units")
        return f"{Decimal(int(money)) / 100:.2f}"

    def currency(self, options: Optional[ChargeOptions] = None) -> str:
        if options is not None and options.currency:
            return options.currency.upper()
        return self.default_currency


class PaymentGatewayFactory:
    """Factory for creating payment gateway instances."""

    _gateways: Dict[PaymentGatewayType, type] = {}

    @classmethod
    def register_gateway(
        cls,
        gateway_type: PaymentGatewayType,
        gateway_class: type
    ):
        """Register a payment gateway implementation."""
        cls._gateways[gateway_type] = gateway_class

    @classmethod
    def create_gateway(
        cls,
        gateway_type: PaymentGatewayType,
        **config
    ) -> PaymentGateway:
        """Create a payment gateway instance."""
        if gateway_type not in cls._gateways:
            raise ValueError(f"Unsupported gateway type: {gateway_type}")

        gateway_class = cls._gateways[gateway_type]
        return gateway_class(**config)

    @classmethod
    def get_supported_gateways(cls) -> List[PaymentGatewayType]:
        """Get list of registered gateway types."""
        return list(cls._gateways.keys())
