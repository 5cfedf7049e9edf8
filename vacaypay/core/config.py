from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VACAYPAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: Optional[str] = Field(default=None, description="VacayPay API key sent as X-Auth-Token")
    account_uuid: Optional[str] = Field(default=None, description="VacayPay account UUID")
    payment_strategy_uuid: Optional[str] = Field(
        default=None,
        description="Payment strategy UUID used to look up the account UUID when it is not configured",
    )
    publishable_key: Optional[str] = Field(default=None, description="Stripe publishable key used for tokenization")

    live_url: str = Field(default="https://www.procuro.io/api/v1/")
    tokenize_url: str = Field(default="https://api.stripe.com/v1/")

    payment_method_mode: str = Field(
        default="tokenize",
        description="How card details reach VacayPay: 'tokenize' (Stripe token) or 'inline' (raw card fields)",
    )
    default_currency: str = Field(default="USD", min_length=3, max_length=3)
    timeout_seconds: float = Field(default=30, gt=0, description="Outbound HTTP timeout in seconds")
    test_mode: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @field_validator("payment_method_mode")
    @classmethod
    def validate_payment_method_mode(cls, value: str) -> str:
        allowed_modes = {"tokenize", "inline"}
        value = value.lower()
        if value not in allowed_modes:
            raise ValueError(f"payment_method_mode must be one of {sorted(allowed_modes)}, got '{value}'")
        return value

    @field_validator("live_url", "tokenize_url")
    @classmethod
    def ensure_trailing_slash(cls, value: str) -> str:
        # Endpoints are built by plain concatenation
        return value if value.endswith("/") else f"{value}/"

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def check_account_reference(self) -> "Settings":
        """
        Require an account reference whenever credentials are configured.

        The adapter can resolve the account UUID lazily from the payment
        strategy, but it needs at least one of the two to route requests.
        """
        if self.api_key and not (self.account_uuid or self.payment_strategy_uuid):
            raise ValueError(
                "When api_key is set, either account_uuid or payment_strategy_uuid is required"
            )
        return self


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: The cached settings instance
    """
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the cached settings instance.

    Useful for testing or when configuration needs to be reloaded.
    """
    get_settings.cache_clear()
