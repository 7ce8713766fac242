"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.

Every port method is a coroutine: persistence and notification are the
I/O boundaries where domain operations may suspend.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import Account, CreditBalance, LedgerEntry, Subscription, VerificationCode


class LifecycleState(str, Enum):
    """
    Account lifecycle states.

    State Transitions (forward-only):
    - PENDING_VERIFICATION -> EMAIL_VERIFIED (verification code redeemed)
    - EMAIL_VERIFIED -> SUBSCRIBED (subscription record created)

    SUBSCRIBED is terminal. No transition returns to an earlier state.
    """

    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    EMAIL_VERIFIED = "EMAIL_VERIFIED"
    SUBSCRIBED = "SUBSCRIBED"

    @property
    def rank(self) -> int:
        return _STATE_ORDER.index(self)


_STATE_ORDER = [
    LifecycleState.PENDING_VERIFICATION,
    LifecycleState.EMAIL_VERIFIED,
    LifecycleState.SUBSCRIBED,
]


class PaymentMethod(str, Enum):
    """Payment methods accepted at subscription time."""

    CREDIT_CARD = "credit_card"
    PIX = "pix"
    BOLETO = "boleto"


class PaymentStatus(str, Enum):
    """
    Payment status of a subscription.

    Chosen deterministically from the payment method; pending statuses
    are settled later by an external confirmation signal or cancelled.
    """

    COMPLETED = "completed"
    PENDING_PIX = "pending_pix"
    PENDING_BOLETO = "pending_boleto"
    CANCELLED = "cancelled"


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    async def add_account(self, account: Account) -> bool:
        """
        Atomically insert a new account.

        Returns:
            True if stored, False if an account with the same email exists
        """
        ...

    async def get_account(self, account_id: str) -> Account | None: ...

    async def find_account_by_email(self, email: str) -> Account | None:
        """Exact, case-sensitive match on the stored email."""
        ...

    async def save_account(self, account: Account) -> None: ...


class VerificationCodeRepository(Protocol):
    """Port interface for verification code persistence (one code per email)."""

    async def put_code(self, code: VerificationCode) -> None:
        """Store a code, replacing any previous code for the same email."""
        ...

    async def get_code(self, email: str) -> VerificationCode | None: ...

    async def delete_code(self, email: str) -> None: ...


class SubscriptionRepository(Protocol):
    """Port interface for subscription persistence."""

    async def add_subscription(self, subscription: Subscription) -> None: ...

    async def get_subscription(self, subscription_id: str) -> Subscription | None: ...

    async def save_subscription(self, subscription: Subscription) -> None: ...

    async def list_subscriptions(self, account_id: str) -> list[Subscription]: ...


class CreditBalanceRepository(Protocol):
    """Port interface for credit balances and their ledger entries."""

    async def get_balance(self, account_id: str) -> CreditBalance | None: ...

    async def save_balance(self, balance: CreditBalance, entry: LedgerEntry) -> None:
        """
        Store a new balance together with the entry that produced it.

        Both writes happen in one step: a reader never sees the balance
        without its entry or the other way around.
        """
        ...

    async def list_entries(self, account_id: str, limit: int) -> list[LedgerEntry]:
        """Most recent first; a limit of 0 or less returns every entry."""
        ...


class NotificationSender(Protocol):
    """Port interface for verification code delivery."""

    async def send_verification_code(self, email: str, code: str) -> None:
        """
        Deliver a verification code to an email address.

        Args:
            email: Recipient email address
            code: 6-digit verification code
        """
        ...
