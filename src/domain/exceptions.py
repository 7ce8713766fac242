"""
Domain exceptions - Semantic error types for the account lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Every failed operation leaves previously stored state unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import FieldError


class AccountError(Exception):
    """Base class for account lifecycle domain errors."""

    pass


class ValidationFailed(AccountError):
    """One or more identity fields are missing or malformed."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid registration data ({summary})")


class DuplicateEmail(AccountError):
    """An account with this email already exists."""

    pass


class AccountNotFound(AccountError):
    """No account matches the given email or identifier."""

    pass


class CodeNotFound(AccountError):
    """No verification code is on file for the email (or it expired)."""

    pass


class CodeMismatch(AccountError):
    """Submitted verification code differs from the stored one."""

    pass


class AlreadyVerified(AccountError):
    """Account has already left PENDING_VERIFICATION."""

    pass


class UnverifiedEmail(AccountError):
    """Subscription requested before the email was verified."""

    pass


class AlreadySubscribed(AccountError):
    """Account already holds a subscription."""

    pass


class UnknownPlan(AccountError):
    """Plan id is not in the catalog."""

    pass


class SubscriptionNotFound(AccountError):
    """No subscription matches the given identifier."""

    pass


class PaymentNotPending(AccountError):
    """Payment was already completed or cancelled."""

    pass


class InsufficientCredits(AccountError):
    """Requested amount exceeds the account's total usable credits."""

    def __init__(self, account_id: str, requested: int, available: int) -> None:
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient credits for {account_id}: requested {requested}, available {available}"
        )


class UnknownFeature(AccountError):
    """Feature name has no credit cost in the catalog."""

    pass


class InvalidPromotion(AccountError):
    """Promotion code is not recognised."""

    pass


class PromotionAlreadyApplied(AccountError):
    """Promotion code was already redeemed by this account."""

    pass
