"""
In-memory repository adapter - Implements every domain repository port.

State lives in process memory and is lost on restart. One instance is
created at application startup and injected into each domain service;
tests build a fresh instance (or call ``reset()``) per test.

Atomicity: each method body runs without awaiting, so under the
single-threaded event loop a method's read-modify-write is never
interleaved with another coroutine. Records are copied on the way in
and out so callers cannot mutate stored state without saving it.
"""

import logging
from copy import deepcopy
from dataclasses import replace

from src.domain.models import Account, CreditBalance, LedgerEntry, Subscription, VerificationCode

logger = logging.getLogger(__name__)


class InMemoryRepository:
    """
    Implements the account, code, subscription and balance ports.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._account_ids_by_email: dict[str, str] = {}
        self._codes: dict[str, VerificationCode] = {}
        self._subscriptions: dict[str, Subscription] = {}
        self._balances: dict[str, CreditBalance] = {}
        self._entries: dict[str, list[LedgerEntry]] = {}

    def reset(self) -> None:
        """Drop all stored state."""
        self._accounts.clear()
        self._account_ids_by_email.clear()
        self._codes.clear()
        self._subscriptions.clear()
        self._balances.clear()
        self._entries.clear()
        logger.info("In-memory repository reset")

    # Accounts

    async def add_account(self, account: Account) -> bool:
        if account.email in self._account_ids_by_email:
            return False
        self._accounts[account.id] = replace(account)
        self._account_ids_by_email[account.email] = account.id
        return True

    async def get_account(self, account_id: str) -> Account | None:
        account = self._accounts.get(account_id)
        return replace(account) if account is not None else None

    async def find_account_by_email(self, email: str) -> Account | None:
        account_id = self._account_ids_by_email.get(email)
        if account_id is None:
            return None
        return replace(self._accounts[account_id])

    async def save_account(self, account: Account) -> None:
        if account.id not in self._accounts:
            raise KeyError(account.id)
        self._accounts[account.id] = replace(account)

    # Verification codes

    async def put_code(self, code: VerificationCode) -> None:
        self._codes[code.email] = code

    async def get_code(self, email: str) -> VerificationCode | None:
        return self._codes.get(email)

    async def delete_code(self, email: str) -> None:
        self._codes.pop(email, None)

    # Subscriptions

    async def add_subscription(self, subscription: Subscription) -> None:
        self._subscriptions[subscription.id] = deepcopy(subscription)

    async def get_subscription(self, subscription_id: str) -> Subscription | None:
        subscription = self._subscriptions.get(subscription_id)
        return deepcopy(subscription) if subscription is not None else None

    async def save_subscription(self, subscription: Subscription) -> None:
        if subscription.id not in self._subscriptions:
            raise KeyError(subscription.id)
        self._subscriptions[subscription.id] = deepcopy(subscription)

    async def list_subscriptions(self, account_id: str) -> list[Subscription]:
        return [deepcopy(s) for s in self._subscriptions.values() if s.account_id == account_id]

    # Credit balances

    async def get_balance(self, account_id: str) -> CreditBalance | None:
        balance = self._balances.get(account_id)
        return replace(balance) if balance is not None else None

    async def save_balance(self, balance: CreditBalance, entry: LedgerEntry) -> None:
        self._balances[balance.account_id] = replace(balance)
        self._entries.setdefault(balance.account_id, []).append(entry)

    async def list_entries(self, account_id: str, limit: int) -> list[LedgerEntry]:
        entries = list(reversed(self._entries.get(account_id, [])))
        return entries[:limit] if limit > 0 else entries
