"""
Shared fixtures for adversarial tests.

Provides accounts already placed in a given lifecycle state so
concurrency tests can start racing immediately.
"""

from collections.abc import Awaitable, Callable

import pytest

from src.domain.models import Account, CreditGrant
from src.domain.ledger import CreditLedger
from src.domain.subscription import SubscriptionActivator


@pytest.fixture
def funded_account(
    verified_account: Callable[..., Awaitable[Account]], ledger: CreditLedger
) -> Callable[..., Awaitable[Account]]:
    """Factory coroutine: a verified account holding the given grant."""

    async def _create(grant: CreditGrant, email: str = "jane@example.com") -> Account:
        account = await verified_account(email)
        await ledger.grant(account.id, grant)
        return account

    return _create


@pytest.fixture
def pending_subscription(
    verified_account: Callable[..., Awaitable[Account]], activator: SubscriptionActivator
):
    """Factory coroutine: a verified account subscribed with a boleto payment."""

    async def _create(email: str = "jane@example.com"):
        account = await verified_account(email)
        return await activator.activate(account.id, "inicial", "boleto")

    return _create
