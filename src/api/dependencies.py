"""
FastAPI dependencies - Dependency injection factories.

Domain services are built once at startup (they own per-account locks
that must outlive a single request) and stored in app.state. The
Depends() factories below hand them to routes.
"""

from fastapi import Request
from starlette.datastructures import State

from src.adapters.notifications.console import ConsoleNotificationSender
from src.adapters.repository.memory import InMemoryRepository
from src.config.settings import Settings
from src.domain.ledger import CreditLedger
from src.domain.ports import NotificationSender
from src.domain.registration import AccountRegistry
from src.domain.subscription import SubscriptionActivator
from src.domain.verification import VerificationCodeStore


def init_services(
    state: State,
    settings: Settings,
    repository: InMemoryRepository | None = None,
    sender: NotificationSender | None = None,
) -> None:
    """
    Wire the repository, notification sender and domain services into app state.

    Args:
        state: Application state to populate
        settings: Application settings
        repository: Storage to use (a fresh in-memory store by default)
        sender: Notification sender (console logging by default)
    """
    repository = repository if repository is not None else InMemoryRepository()
    sender = sender if sender is not None else ConsoleNotificationSender()

    code_store = VerificationCodeStore(
        codes=repository,
        accounts=repository,
        sender=sender,
        code_ttl_seconds=settings.code_ttl_seconds,
    )
    registry = AccountRegistry(
        accounts=repository,
        codes=code_store,
        strong_passwords=settings.strong_passwords,
        bcrypt_cost=settings.bcrypt_cost,
    )
    ledger = CreditLedger(balances=repository, history_limit=settings.history_limit)

    state.repository = repository
    state.code_store = code_store
    state.registry = registry
    state.ledger = ledger
    state.activator = SubscriptionActivator(
        registry=registry, subscriptions=repository, ledger=ledger
    )


def get_code_store(request: Request) -> VerificationCodeStore:
    return request.app.state.code_store


def get_account_registry(request: Request) -> AccountRegistry:
    return request.app.state.registry


def get_credit_ledger(request: Request) -> CreditLedger:
    return request.app.state.ledger


def get_subscription_activator(request: Request) -> SubscriptionActivator:
    return request.app.state.activator
