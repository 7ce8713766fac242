"""
Domain entities - plain dataclasses owned by the lifecycle services.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .ports import LifecycleState, PaymentMethod, PaymentStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RegistrationData:
    """Identity fields submitted at registration."""

    full_name: str
    email: str
    national_id: str
    phone: str
    password: str
    accepted_terms: bool = False
    accepted_privacy: bool = False
    marketing_opt_in: bool = False


@dataclass
class Account:
    id: str
    full_name: str
    email: str
    national_id: str
    phone: str
    password_hash: str
    state: LifecycleState = LifecycleState.PENDING_VERIFICATION
    created_at: datetime = field(default_factory=utcnow)
    verified_at: datetime | None = None
    accepted_terms: bool = False
    accepted_privacy: bool = False
    marketing_opt_in: bool = False

    @property
    def email_verified(self) -> bool:
        return self.state.rank >= LifecycleState.EMAIL_VERIFIED.rank


@dataclass(frozen=True)
class VerificationCode:
    email: str
    code: str
    issued_at: datetime = field(default_factory=utcnow)


@dataclass
class Subscription:
    id: str
    account_id: str
    plan_id: str
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    created_at: datetime = field(default_factory=utcnow)
    activated_at: datetime | None = None
    payment_data: dict[str, Any] | None = None

    @property
    def created(self) -> bool:
        """A stored subscription record always exists; kept apart from ``active``."""
        return True

    @property
    def active(self) -> bool:
        return self.payment_status is PaymentStatus.COMPLETED

    @property
    def pending(self) -> bool:
        return self.payment_status in (PaymentStatus.PENDING_PIX, PaymentStatus.PENDING_BOLETO)


@dataclass(frozen=True)
class CreditGrant:
    """Amounts added to each tranche by a single grant."""

    current: int = 0
    monthly: int = 0
    bonus: int = 0

    def __post_init__(self) -> None:
        for name in ("current", "monthly", "bonus"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    @property
    def total(self) -> int:
        return self.current + self.monthly + self.bonus


@dataclass
class CreditBalance:
    account_id: str
    current: int = 0
    monthly: int = 0
    bonus: int = 0

    @property
    def total(self) -> int:
        return self.current + self.monthly + self.bonus


@dataclass(frozen=True)
class LedgerEntry:
    """
    One balance change.

    ``amount`` is signed: positive for grants and promotions, negative
    for consumption.
    """

    account_id: str
    kind: str
    amount: int
    reason: str
    total_after: int
    created_at: datetime = field(default_factory=utcnow)
