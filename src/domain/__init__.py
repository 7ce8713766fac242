"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account lifecycle pipeline: identity
validation, registration, email verification, subscription activation
and the credit ledger that gates feature access. It defines its own
port interfaces for infrastructure abstraction.
"""

from .exceptions import (
    AccountError,
    AccountNotFound,
    AlreadySubscribed,
    AlreadyVerified,
    CodeMismatch,
    CodeNotFound,
    DuplicateEmail,
    InsufficientCredits,
    InvalidPromotion,
    PaymentNotPending,
    PromotionAlreadyApplied,
    SubscriptionNotFound,
    UnknownFeature,
    UnknownPlan,
    UnverifiedEmail,
    ValidationFailed,
)
from .ledger import CreditLedger
from .models import Account, CreditBalance, CreditGrant, RegistrationData, Subscription
from .ports import LifecycleState, NotificationSender, PaymentMethod, PaymentStatus
from .registration import AccountRegistry
from .subscription import SubscriptionActivator
from .verification import VerificationCodeStore

__all__ = [
    "Account",
    "AccountError",
    "AccountNotFound",
    "AccountRegistry",
    "AlreadySubscribed",
    "AlreadyVerified",
    "CodeMismatch",
    "CodeNotFound",
    "CreditBalance",
    "CreditGrant",
    "CreditLedger",
    "DuplicateEmail",
    "InsufficientCredits",
    "InvalidPromotion",
    "LifecycleState",
    "NotificationSender",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentNotPending",
    "PromotionAlreadyApplied",
    "RegistrationData",
    "Subscription",
    "SubscriptionActivator",
    "SubscriptionNotFound",
    "UnknownFeature",
    "UnknownPlan",
    "UnverifiedEmail",
    "ValidationFailed",
    "VerificationCodeStore",
]
