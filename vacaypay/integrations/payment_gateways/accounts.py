"""
Account identifiers resolved lazily from a payment strategy.

A merchant can be configured with only a payment strategy UUID; the account
UUID it routes payments to is then looked up on first use and kept on the
session for the lifetime of the adapter.
"""

from dataclasses import dataclass
from typing import Optional

from .responses import AccountDetails

PLACEHOLDER_VALUES = frozenset({"nil", "null", "none"})

# Substituted into URLs while the account is unknown so the provider answers
# 401 instead of a routing 404.
UNRESOLVED_ACCOUNT_SENTINEL = "0"


def is_unresolved(value: Optional[str]) -> bool:
    """True for None, empty strings and literal placeholders like 'nil'."""
    if value is None:
        return True
    value = str(value).strip()
    return not value or value.lower() in PLACEHOLDER_VALUES


@dataclass
class AccountSession:
    """
    Identifiers derived for one merchant configuration.

    ``account_uuid`` and ``publishable_key`` start out as configured and may be
    filled in by ``apply``. Values that are already resolved are never
    overwritten.
    """

    payment_strategy_uuid: Optional[str] = None
    account_uuid: Optional[str] = None
    publishable_key: Optional[str] = None

    @property
    def account_resolved(self) -> bool:
        return not is_unresolved(self.account_uuid)

    @property
    def publishable_key_resolved(self) -> bool:
        return not is_unresolved(self.publishable_key)

    @property
    def routing_account(self) -> str:
        if self.account_resolved:
            return str(self.account_uuid)
        return UNRESOLVED_ACCOUNT_SENTINEL

    def apply(self, details: AccountDetails) -> None:
        if not self.account_resolved and not is_unresolved(details.account_uuid):
            self.account_uuid = details.account_uuid
        if not self.publishable_key_resolved and not is_unresolved(details.publishable_key):
            self.publishable_key = details.publishable_key
