"""
Shared test configuration and fixtures for the VacayPay adapter test suite.

Provider traffic is served by ``httpx.MockTransport``; every request the
adapter makes is recorded on the ``provider`` fixture.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from vacaypay.core.config import clear_settings_cache
from vacaypay.integrations.payment_gateways import (
    BillingAddress,
    ChargeOptions,
    CreditCard,
    VacayPayAdapter,
)
from vacaypay.integrations.payment_gateways.transport import HttpTransport

API_KEY = "SGD0qydBXp58i0n5QHnTG38D-OOzvDu0KlVliOhZpyw"
ACCOUNT_UUID = "0b72d273-5caf-4a4d-aaf3-3c18267e213e"
STRATEGY_UUID = "2833dda1-b5da-4b16-9f52-8b53f4e7f884"
PUBLISHABLE_KEY = "pk_test_4eC39HqLyjWDarjtT1zdp7dc"
PAYMENT_UUID = "7f8228fe-090e-477f-a365-4dc5c5204ba2"
CARD_TOKEN = "tok_1Mv8YbLkdIwHu7ixBTjNpnvS"


def payment_data(payment_uuid: str = PAYMENT_UUID, **overrides: Any) -> Dict[str, Any]:
    data = {
        "paymentUuid": payment_uuid,
        "accountUuid": ACCOUNT_UUID,
        "amount": 100,
        "currency": "USD",
        "financial": {"currency": "GBP", "total": 74.66, "net": 72.29, "fees": 2.37},
        "refundedAmount": 0,
        "status": "succeeded",
        "refunded": False,
        "captured": True,
        "paymentReference": "F364DB96",
        "externalPaymentReference": "",
        "externalBookingReference": "",
        "description": "Test Purchase",
        "email": "wow@example.com",
        "firstName": "Longbob",
        "lastName": "Longsen",
        "createdAt": "2016-08-19 09:34:13 UTC",
        "updatedAt": "2016-08-19 09:34:13 UTC",
        "meta": [],
    }
    data.update(overrides)
    return data


RESPONSES: Dict[str, Dict[str, Any]] = {
    "successful_purchase": {"appCode": 0, "appMessage": "", "meta": {}, "data": payment_data()},
    "successful_authorize": {"appCode": 0, "appMessage": "", "meta": {}, "data": payment_data(captured=False)},
    "successful_capture": {"appCode": 0, "appMessage": "", "meta": {}, "data": payment_data()},
    "successful_refund": {
        "appCode": 0,
        "appMessage": "",
        "meta": {},
        "data": payment_data("fbdff46c-893e-4498-8fe7-734903f40de2", refunded=True, refundedAmount=100),
    },
    "successful_void": {
        "appCode": 0,
        "appMessage": "",
        "meta": {},
        "data": payment_data("6cc5a2ab-41ab-47cb-b68f-b038188b4bab", refunded=True, captured=False),
    },
    "failed_purchase": {
        "appCode": 6,
        "appMessage": "The request failed for some reason, check the errors in meta",
        "meta": {"errors": ["Your card was declined."]},
        "data": {"code": "card_declined", "message": "Your card was declined."},
    },
    "failed_capture": {
        "appCode": 2,
        "appMessage": "Specified resource not found",
        "meta": {"resource": "vacay-pay/account/payment"},
        "data": {},
    },
    "failed_refund": {
        "appCode": 6,
        "appMessage": "The request failed for some reason, check the errors in meta",
        "meta": {
            "errors": ["Cannot refund a value less than 0, or higher than the amount refundable (100)."]
        },
        "data": {},
    },
    "unauthorized": {
        "appCode": 4,
        "appMessage": "Authentication failed, check your X-Auth-Token",
        "meta": {},
        "data": {},
    },
    "successful_strategy_details": {
        "appCode": 0,
        "appMessage": "",
        "meta": {},
        "data": {
            "strategyUuid": STRATEGY_UUID,
            "strategyType": "vacaypay",
            "accountUuid": ACCOUNT_UUID,
            "publishableKey": PUBLISHABLE_KEY,
            "accountRoute": f"/api/v1/vacay-pay/accounts/{ACCOUNT_UUID}",
            "paymentRoute": f"/api/v1/vacay-pay/accounts/{ACCOUNT_UUID}/payments",
        },
    },
    "successful_token": {
        "id": CARD_TOKEN,
        "object": "token",
        "card": {"id": "card_1Mv8YbLkdIwHu7ixkJ2GQWuv", "brand": "Visa", "last4": "4242"},
        "livemode": False,
        "type": "card",
    },
    "failed_token": {
        "error": {
            "code": "incorrect_number",
            "message": "Your card number is incorrect.",
            "param": "number",
            "type": "card_error",
        }
    },
    "declined_token": {
        "error": {
            "code": "card_declined",
            "decline_code": "expired_card",
            "message": "Your card has expired.",
            "type": "card_error",
        }
    },
}


class FakeProvider:
    """Route requests by method and URL path suffix to canned responses."""

    def __init__(self):
        self.routes: List[Tuple[str, str, int, Optional[str]]] = []
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path_suffix: str, body: Any, status_code: int = 200) -> None:
        text = body if isinstance(body, str) or body is None else json.dumps(body)
        self.routes.append((method, path_suffix, status_code, text))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, suffix, status_code, text in self.routes:
            if request.method == method and request.url.path.endswith(suffix):
                return httpx.Response(status_code, text=text or "")
        return httpx.Response(404, text=json.dumps(RESPONSES["failed_capture"]))

    def calls_to(self, path_fragment: str) -> List[httpx.Request]:
        return [request for request in self.requests if path_fragment in request.url.path]


@pytest.fixture(autouse=True)
def reset_settings_cache():
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def responses() -> Dict[str, Dict[str, Any]]:
    return RESPONSES


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def transport(provider) -> HttpTransport:
    return HttpTransport(client=httpx.Client(transport=httpx.MockTransport(provider)))


@pytest.fixture
def adapter(transport) -> VacayPayAdapter:
    """Adapter in tokenize mode with every identifier configured."""
    return VacayPayAdapter(
        api_key=API_KEY,
        account_uuid=ACCOUNT_UUID,
        publishable_key=PUBLISHABLE_KEY,
        transport=transport,
        test=True,
    )


@pytest.fixture
def inline_adapter(transport) -> VacayPayAdapter:
    """Adapter in inline-card mode configured with a payment strategy only."""
    return VacayPayAdapter(
        api_key=API_KEY,
        payment_strategy_uuid=STRATEGY_UUID,
        payment_method_mode="inline",
        transport=transport,
        test=True,
    )


@pytest.fixture
def credit_card() -> CreditCard:
    return CreditCard(
        number="4242424242424242",
        month=9,
        year=2027,
        verification_value="123",
        first_name="Longbob",
        last_name="Longsen",
    )


@pytest.fixture
def charge_options() -> ChargeOptions:
    return ChargeOptions(
        currency="USD",
        description="Test Purchase",
        email="wow@example.com",
        accessing_ip="127.0.0.1",
        first_name="Longbob",
        last_name="Longsen",
        send_email_confirmation=False,
        billing_address=BillingAddress(
            address1="456 My Street",
            city="Ottawa",
            state="ON",
            zip="K1C2N6",
            country="CA",
        ),
    )
