"""
Typed views over provider responses.

The raw parsed JSON is always kept by the caller; these models only give the
adapter explicit optional fields instead of ad hoc key probing. Every model
tolerates missing or oddly shaped sections so that parsing a failure body
never raises.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _mapping_or_none(value: Any) -> Any:
    # VacayPay sends [] for empty objects in some payloads
    return value if isinstance(value, dict) else None


def _text_or_none(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class VacayPayMeta(_ProviderModel):
    errors: Optional[List[Any]] = None

    @field_validator("errors", mode="before")
    @classmethod
    def list_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, list) else None


class VacayPayData(_ProviderModel):
    payment_uuid: Optional[str] = Field(default=None, alias="paymentUuid")
    code: Optional[str] = None
    message: Optional[str] = None

    @field_validator("payment_uuid", "code", "message", mode="before")
    @classmethod
    def text(cls, value: Any) -> Any:
        return _text_or_none(value)


class VacayPayResponse(_ProviderModel):
    """Envelope returned by every procuro.io endpoint."""

    app_code: Optional[int] = Field(default=None, alias="appCode")
    app_message: Optional[str] = Field(default=None, alias="appMessage")
    meta: Optional[VacayPayMeta] = None
    data: Optional[VacayPayData] = None

    @field_validator("app_code", mode="before")
    @classmethod
    def int_or_none(cls, value: Any) -> Any:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("app_message", mode="before")
    @classmethod
    def text(cls, value: Any) -> Any:
        return _text_or_none(value)

    @field_validator("meta", "data", mode="before")
    @classmethod
    def section(cls, value: Any) -> Any:
        return _mapping_or_none(value)

    @property
    def succeeded(self) -> bool:
        return self.app_code == 0

    @property
    def errors(self) -> List[str]:
        if self.meta is None or not self.meta.errors:
            return []
        return [str(error) for error in self.meta.errors if error is not None]


class StripeErrorDetail(_ProviderModel):
    code: Optional[str] = None
    decline_code: Optional[str] = None
    message: Optional[str] = None

    @field_validator("code", "decline_code", "message", mode="before")
    @classmethod
    def text(cls, value: Any) -> Any:
        return _text_or_none(value)


class StripeTokenResponse(_ProviderModel):
    """Response of the card-vaulting ``tokens`` endpoint."""

    id: Optional[str] = None
    error: Optional[StripeErrorDetail] = None

    @field_validator("id", mode="before")
    @classmethod
    def text(cls, value: Any) -> Any:
        return _text_or_none(value)

    @field_validator("error", mode="before")
    @classmethod
    def error_detail(cls, value: Any) -> Any:
        if value is None or isinstance(value, dict):
            return value
        return {"message": str(value)}

    @property
    def succeeded(self) -> bool:
        # Stripe signals failure by the presence of the key, not its value
        return "error" not in self.model_fields_set


class AccountDetails(_ProviderModel):
    """The ``data`` section of an account or payment-strategy lookup."""

    account_uuid: Optional[str] = Field(default=None, alias="accountUuid")
    publishable_key: Optional[str] = Field(default=None, alias="publishableKey")

    @field_validator("account_uuid", "publishable_key", mode="before")
    @classmethod
    def text(cls, value: Any) -> Any:
        return _text_or_none(value)
