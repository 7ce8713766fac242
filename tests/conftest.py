"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A fresh in-memory repository per test
- A recording notification sender
- Domain services wired the way the application wires them
- Factories for valid registration data and accounts in a given state
"""

from collections.abc import Awaitable, Callable

import pytest

from src.adapters.repository.memory import InMemoryRepository
from src.domain.ledger import CreditLedger
from src.domain.models import Account, RegistrationData
from src.domain.registration import AccountRegistry
from src.domain.subscription import SubscriptionActivator
from src.domain.verification import VerificationCodeStore

# 111.444.777-35: check digits 3 and 5
VALID_NATIONAL_ID = "11144477735"
VALID_PHONE = "(11) 98888-7777"

# Lowest bcrypt work factor keeps password hashing fast in tests
TEST_BCRYPT_COST = 4


class RecordingSender:
    """NotificationSender that keeps every delivered code in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_verification_code(self, email: str, code: str) -> None:
        self.sent.append((email, code))

    def last_code(self, email: str) -> str:
        return next(code for sent_to, code in reversed(self.sent) if sent_to == email)


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def code_store(repository: InMemoryRepository, sender: RecordingSender) -> VerificationCodeStore:
    return VerificationCodeStore(codes=repository, accounts=repository, sender=sender)


@pytest.fixture
def registry(repository: InMemoryRepository, code_store: VerificationCodeStore) -> AccountRegistry:
    return AccountRegistry(accounts=repository, codes=code_store, bcrypt_cost=TEST_BCRYPT_COST)


@pytest.fixture
def ledger(repository: InMemoryRepository) -> CreditLedger:
    return CreditLedger(balances=repository)


@pytest.fixture
def activator(
    registry: AccountRegistry, repository: InMemoryRepository, ledger: CreditLedger
) -> SubscriptionActivator:
    return SubscriptionActivator(registry=registry, subscriptions=repository, ledger=ledger)


@pytest.fixture
def make_registration() -> Callable[..., RegistrationData]:
    """Factory for valid registration data; keyword arguments override fields."""

    def _make(**overrides: object) -> RegistrationData:
        fields = {
            "full_name": "Jane Doe",
            "email": "jane@example.com",
            "national_id": VALID_NATIONAL_ID,
            "phone": VALID_PHONE,
            "password": "Secret1",
            "accepted_terms": True,
            "accepted_privacy": True,
        }
        fields.update(overrides)
        return RegistrationData(**fields)

    return _make


@pytest.fixture
def verified_account(
    registry: AccountRegistry,
    sender: RecordingSender,
    make_registration: Callable[..., RegistrationData],
) -> Callable[..., Awaitable[Account]]:
    """Factory coroutine: register an account and redeem its code."""

    async def _create(email: str = "jane@example.com") -> Account:
        await registry.register(make_registration(email=email))
        return await registry.verify_email(email, sender.last_code(email))

    return _create
