"""
VacayPay Payment Gateway Adapter

Maps the gateway verbs onto the VacayPay (procuro.io) REST API. Card custody
can be delegated to Stripe: in tokenize mode the card is first exchanged for
a Stripe token with the merchant's publishable key, and only the token is
sent to VacayPay.
"""

import json
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

from vacaypay.core.config import Settings, get_settings
from vacaypay.core.logging import get_logger

from .accounts import AccountSession, is_unresolved
from .base import (
    ChargeOptions,
    CreditCard,
    GatewayConfigurationError,
    PaymentGateway,
    PaymentGatewayType,
    PaymentResult,
    PaymentSource,
    ResponseError,
    StandardErrorCode,
    UnsupportedActionError,
)
from .form_encoding import encode_form
from .payment_methods import PaymentMethodResolver, ResolvedPaymentMethod, resolver_for_mode
from .responses import AccountDetails, StripeTokenResponse, VacayPayResponse
from .scrubbing import scrub
from .transport import HttpTransport

logger = get_logger(__name__)

PROVIDER = "vacaypay"
SUCCESS_MESSAGE = "Succeeded"
GENERIC_FAILURE_MESSAGE = "The request failed."
# appCode whose appMessage is meant for display
APP_CODE_DISPLAY_MESSAGE = 4

STANDARD_ERROR_CODE_MAPPING = {
    "incorrect_number": StandardErrorCode.INCORRECT_NUMBER,
    "invalid_number": StandardErrorCode.INVALID_NUMBER,
    "invalid_expiry_month": StandardErrorCode.INVALID_EXPIRY_DATE,
    "invalid_expiry_year": StandardErrorCode.INVALID_EXPIRY_DATE,
    "invalid_cvc": StandardErrorCode.INVALID_CVC,
    "expired_card": StandardErrorCode.EXPIRED_CARD,
    "incorrect_cvc": StandardErrorCode.INCORRECT_CVC,
    "incorrect_zip": StandardErrorCode.INCORRECT_ZIP,
    "card_declined": StandardErrorCode.CARD_DECLINED,
    "call_issuer": StandardErrorCode.CALL_ISSUER,
    "processing_error": StandardErrorCode.PROCESSING_ERROR,
    "incorrect_pin": StandardErrorCode.INCORRECT_PIN,
    "test_mode_live_card": StandardErrorCode.TEST_MODE_LIVE_CARD,
}

ProviderResponse = Union[VacayPayResponse, StripeTokenResponse]


class VacayPayAdapter(PaymentGateway):
    """
    VacayPay payment gateway adapter.

    The adapter needs an API key plus either the account UUID or the payment
    strategy UUID. With only the strategy, the account UUID is looked up
    before the first VacayPay call and cached on ``session``; lookup failures
    are ignored so that the payment call itself reports the real error.

    Not safe for concurrent use: the lazy lookup reads and then writes the
    session without locking. Share one adapter across threads only behind
    external synchronization.
    """

    LIVE_URL = "https://www.procuro.io/api/v1/"
    TOKENIZE_URL = "https://api.stripe.com/v1/"

    display_name = "VacayPay"
    default_currency = "USD"
    supported_countries = ["AU", "CA", "GB", "US", "BE", "DK", "FI", "FR", "DE", "NL", "NO", "ES", "IT", "IE"]
    supported_cardtypes = ["visa", "master", "american_express", "discover", "jcb", "diners_club", "maestro"]

    def __init__(
        self,
        api_key: str,
        account_uuid: Optional[str] = None,
        payment_strategy_uuid: Optional[str] = None,
        publishable_key: Optional[str] = None,
        payment_method_mode: str = "tokenize",
        payment_method_resolver: Optional[PaymentMethodResolver] = None,
        live_url: Optional[str] = None,
        tokenize_url: Optional[str] = None,
        default_currency: Optional[str] = None,
        transport: Optional[HttpTransport] = None,
        timeout_seconds: float = 30,
        test: bool = False,
    ):
        """
        Initialize VacayPay adapter.

        Args:
            api_key: VacayPay API key, sent as X-Auth-Token
            account_uuid: Account payments are routed to
            payment_strategy_uuid: Strategy used to look up the account UUID
            publishable_key: Stripe publishable key for tokenization
            payment_method_mode: 'tokenize' or 'inline'
            payment_method_resolver: Overrides payment_method_mode
            transport: HTTP transport; an httpx-backed one is built by default
            test: Mark results as test transactions

        Raises:
            GatewayConfigurationError: If credentials are missing
        """
        if is_unresolved(api_key):
            raise GatewayConfigurationError("api_key is required", provider=PROVIDER)
        if is_unresolved(account_uuid) and is_unresolved(payment_strategy_uuid):
            raise GatewayConfigurationError(
                "Either account_uuid or payment_strategy_uuid is required",
                provider=PROVIDER,
            )

        super().__init__(test=test)
        self.api_key = api_key
        self.session = AccountSession(
            payment_strategy_uuid=payment_strategy_uuid,
            account_uuid=account_uuid,
            publishable_key=publishable_key,
        )
        self.payment_method_resolver = payment_method_resolver or resolver_for_mode(payment_method_mode)
        self.live_url = live_url or self.LIVE_URL
        self.tokenize_url = tokenize_url or self.TOKENIZE_URL
        if default_currency:
            self.default_currency = default_currency.upper()
        self._owns_transport = transport is None
        self.transport = transport or HttpTransport(timeout_seconds=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "VacayPayAdapter":
        """Build an adapter from ``VACAYPAY_*`` settings; keyword overrides win."""
        settings = settings or get_settings()
        config = {
            "api_key": settings.api_key,
            "account_uuid": settings.account_uuid,
            "payment_strategy_uuid": settings.payment_strategy_uuid,
            "publishable_key": settings.publishable_key,
            "payment_method_mode": settings.payment_method_mode,
            "live_url": settings.live_url,
            "tokenize_url": settings.tokenize_url,
            "default_currency": settings.default_currency,
            "timeout_seconds": settings.timeout_seconds,
            "test": settings.test_mode,
        }
        config.update(overrides)
        return cls(**config)

    def _get_gateway_type(self) -> PaymentGatewayType:
        """Return the gateway type identifier."""
        return PaymentGatewayType.VACAYPAY

    def close(self) -> None:
        """Close the HTTP transport if this adapter created it."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> "VacayPayAdapter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def account_uuid(self) -> Optional[str]:
        return self.session.account_uuid

    @property
    def publishable_key(self) -> Optional[str]:
        return self.session.publishable_key

    # =========================================================================
    # Verbs
    # =========================================================================

    def tokenize(self, card: CreditCard) -> PaymentResult:
        self.fetch_publishable_key_if_empty()

        card_params = {
            "number": card.digits,
            "cvc": card.verification_value,
            "exp_month": f"{int(card.month):02d}",
            "exp_year": f"{card.full_year % 100:02d}",
        }
        return self.commit("tokenize", {"card": card_params})

    def purchase(
        self,
        money: int,
        payment_method: PaymentSource,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        return self._charge("charge", money, payment_method, options)

    def authorize(
        self,
        money: int,
        payment_method: PaymentSource,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        return self._charge("authorize", money, payment_method, options, authorize=True)

    def capture(
        self,
        money: int,
        authorization: str,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        post = {"paymentUuid": authorization, "amount": self.amount(money)}
        return self.commit("capture", post)

    def refund(
        self,
        money: int,
        authorization: str,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        post = {"paymentUuid": authorization, "amount": self.amount(money)}
        if options is not None and options.reason:
            post["reason"] = options.reason
        return self.commit("refund", post)

    def void(
        self,
        authorization: str,
        options: Optional[ChargeOptions] = None,
    ) -> PaymentResult:
        return self.commit("void", {"paymentUuid": authorization})

    def supports_scrubbing(self) -> bool:
        return True

    def scrub(self, transcript: str) -> str:
        return scrub(transcript)

    def _charge(
        self,
        action: str,
        money: int,
        payment_method: PaymentSource,
        options: Optional[ChargeOptions],
        **extra: Any
    ) -> PaymentResult:
        options = options or ChargeOptions()

        resolved = self.payment_method_resolver.resolve(self, payment_method)
        if not resolved.succeeded:
            logger.info(
                "vacaypay_charge_skipped",
                action=action,
                reason="tokenization_failed",
                error_code=resolved.failure.error_code,
            )
            return resolved.failure

        post: Dict[str, Any] = {}
        self.add_payment_method(post, resolved)
        self.add_invoice(post, money, options)
        self.add_address(post, options)
        self.add_customer_data(post, options)
        self.add_settings(post, options)
        post.update(extra)

        return self.commit(action, post)

    # =========================================================================
    # Payload builders
    # =========================================================================

    def add_payment_method(self, post: Dict[str, Any], resolved: ResolvedPaymentMethod) -> None:
        post.update(resolved.fields)

    def add_invoice(self, post: Dict[str, Any], money: int, options: ChargeOptions) -> None:
        post["amount"] = self.amount(money)
        post["currency"] = self.currency(options)

    def add_address(self, post: Dict[str, Any], options: ChargeOptions) -> None:
        address = options.billing_address
        if address is None:
            return

        fields = {
            "billingLine1": address.address1,
            "billingLine2": address.address2,
            "billingPostcode": address.zip,
            "billingRegion": address.state,
            "billingCity": address.city,
            "billingCountry": address.country,
        }
        # Omitted rather than null so VacayPay keeps what it already has
        post.update({key: value for key, value in fields.items() if value})

    def add_customer_data(self, post: Dict[str, Any], options: ChargeOptions) -> None:
        post["email"] = options.email or ""
        post["firstName"] = options.first_name or ""
        post["lastName"] = options.last_name or ""
        post["description"] = options.description or ""
        post["externalPaymentReference"] = options.external_payment_reference or ""
        post["externalBookingReference"] = options.external_booking_reference or ""
        post["notes"] = options.notes or ""
        post["metadata"] = options.metadata or {}
        if options.accessing_ip:
            post["accessingIp"] = options.accessing_ip

    def add_settings(self, post: Dict[str, Any], options: ChargeOptions) -> None:
        post["sendEmailConfirmation"] = bool(options.send_email_confirmation)

    # =========================================================================
    # Account resolution
    # =========================================================================

    def resolve_account_if_empty(self) -> None:
        """Look up the account UUID once; a no-op after it is known."""
        if self.session.account_resolved:
            return

        details = self.fetch_account_details()
        if details is not None:
            self.session.apply(details)

    def fetch_publishable_key_if_empty(self) -> None:
        if self.session.publishable_key_resolved:
            return

        details = self.fetch_account_details()
        if details is not None:
            self.session.apply(details)

    def fetch_account_details(self) -> Optional[AccountDetails]:
        """
        Fetch account details from VacayPay.

        Returns None on any failure. This is not the authentication step:
        bad credentials surface as a 401 on the following payment call.
        """
        if self.session.account_resolved:
            action = "account_details"
        elif not is_unresolved(self.session.payment_strategy_uuid):
            action = "strategy_details"
        else:
            logger.warning("vacaypay_account_lookup_skipped", reason="no_account_reference")
            return None

        url = self.endpoint_for(action, {})
        try:
            raw_response = self.transport.get(url, self.headers(action))
            response = self.parse(raw_response)
            envelope = VacayPayResponse.model_validate(response)
            details = AccountDetails.model_validate(response.get("data") or {})
        except (ResponseError, ValueError) as e:
            logger.warning("vacaypay_account_lookup_failed", action=action, error=str(e))
            return None

        if not envelope.succeeded:
            logger.warning(
                "vacaypay_account_lookup_failed",
                action=action,
                app_code=envelope.app_code,
            )
            return None

        return details

    # =========================================================================
    # Request plumbing
    # =========================================================================

    def headers(self, action: str) -> Dict[str, str]:
        if action == "tokenize":
            return {
                "Authorization": f"Bearer {self.session.publishable_key or ''}",
                "Content-Type": "application/x-www-form-urlencoded",
            }
        return {
            "X-Auth-Token": str(self.api_key),
            "Content-Type": "application/json",
        }

    def endpoint_for(self, action: str, parameters: Dict[str, Any]) -> str:
        """
        Resolve the URL for ``action``.

        Raises:
            UnsupportedActionError: If the action has no endpoint
        """
        account_url = f"{self.live_url}vacay-pay/accounts/{self.session.routing_account}"
        payments_url = f"{account_url}/payments"

        if action in ("charge", "authorize"):
            return payments_url
        if action == "capture":
            return f"{payments_url}/{self._path_segment(parameters.get('paymentUuid'))}/capture"
        if action in ("refund", "void"):
            return f"{payments_url}/{self._path_segment(parameters.get('paymentUuid'))}/refund"
        if action == "account_details":
            return account_url
        if action == "strategy_details":
            strategy = self._path_segment(self.session.payment_strategy_uuid)
            return f"{self.live_url}vacay-pay/payment-strategies/{strategy}"
        if action == "tokenize":
            return f"{self.tokenize_url}tokens"

        raise UnsupportedActionError(
            f"Cannot commit without a valid endpoint: {action!r}",
            provider=PROVIDER,
        )

    @staticmethod
    def _path_segment(value: Any) -> str:
        return quote(str(value or ""), safe="")

    def post_data(self, action: str, parameters: Dict[str, Any]) -> Optional[str]:
        if action == "tokenize":
            return encode_form(parameters)
        return json.dumps(parameters)

    @staticmethod
    def parse(body: Optional[str]) -> Dict[str, Any]:
        """
        Parse a JSON body into a dict; an empty body parses to ``{}``.

        Raises:
            ValueError: If the body is not a JSON object
        """
        if body is None or not body.strip():
            return {}
        parsed = json.loads(body)
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
        return parsed

    def commit(self, action: str, parameters: Dict[str, Any]) -> PaymentResult:
        if action != "tokenize":
            self.resolve_account_if_empty()

        url = self.endpoint_for(action, parameters)
        logger.debug("vacaypay_request", action=action, url=url)

        http_error: Optional[ResponseError] = None
        try:
            raw_response = self.transport.post(url, self.post_data(action, parameters), self.headers(action))
        except ResponseError as e:
            if e.body is None:
                return self._failure(action, e.error_message, {}, StandardErrorCode.PROCESSING_ERROR)
            http_error = e
            raw_response = e.body

        try:
            response = self.parse(raw_response)
            model = self.response_model(action, response)
        except ValueError:
            api_name = "Stripe" if action == "tokenize" else "VacayPay"
            message = (
                f"Invalid response received from the {api_name} API. "
                f"The raw response was: {raw_response[:200]}"
            )
            return self._failure(action, message, {"raw_response": raw_response}, StandardErrorCode.PROCESSING_ERROR)

        succeeded = http_error is None and model.succeeded
        default_message = http_error.error_message if http_error else None
        default_code = http_error.error_code if http_error else None

        result = PaymentResult(
            success=succeeded,
            message=self.message_from(action, succeeded, model, default_message),
            params=response,
            authorization=self.authorization_from(action, model),
            error_code=self.error_code_from(action, succeeded, model, default_code),
            test=self.test,
        )
        logger.info(
            "vacaypay_response",
            action=action,
            success=result.success,
            error_code=result.error_code,
        )
        return result

    def _failure(self, action: str, message: str, params: Dict[str, Any], error_code: Any) -> PaymentResult:
        logger.warning("vacaypay_request_failed", action=action, error_code=error_code)
        return PaymentResult(
            success=False,
            message=message,
            params=params,
            error_code=error_code,
            test=self.test,
        )

    # =========================================================================
    # Response normalization
    # =========================================================================

    @staticmethod
    def response_model(action: str, response: Dict[str, Any]) -> ProviderResponse:
        if action == "tokenize":
            return StripeTokenResponse.model_validate(response)
        return VacayPayResponse.model_validate(response)

    @staticmethod
    def message_from(
        action: str,
        succeeded: bool,
        response: ProviderResponse,
        default: Optional[str] = None,
    ) -> str:
        if succeeded:
            return SUCCESS_MESSAGE

        if isinstance(response, StripeTokenResponse):
            if response.error is not None and response.error.message:
                return response.error.message
            return default or GENERIC_FAILURE_MESSAGE

        if response.data is not None and response.data.message:
            return str(response.data.message)
        if response.app_code == APP_CODE_DISPLAY_MESSAGE and response.app_message:
            return response.app_message
        if response.errors:
            return ", ".join(response.errors)
        return response.app_message or default or GENERIC_FAILURE_MESSAGE

    @staticmethod
    def authorization_from(action: str, response: ProviderResponse) -> Optional[str]:
        if isinstance(response, StripeTokenResponse):
            return response.id
        if response.data is None:
            return None
        return response.data.payment_uuid

    @staticmethod
    def error_code_from(
        action: str,
        succeeded: bool,
        response: ProviderResponse,
        default: Optional[str] = None,
    ) -> Optional[str]:
        if succeeded:
            return None

        if isinstance(response, StripeTokenResponse):
            error = response.error
            if error is None:
                return default
            decline_code = error.decline_code if error.code == "card_declined" else None
            return (
                STANDARD_ERROR_CODE_MAPPING.get(decline_code)
                or STANDARD_ERROR_CODE_MAPPING.get(error.code)
                or decline_code
                or error.code
                or default
            )

        if response.data is not None and response.data.code:
            return STANDARD_ERROR_CODE_MAPPING.get(response.data.code, response.data.code)
        if response.app_code is not None:
            return str(response.app_code)
        return default
