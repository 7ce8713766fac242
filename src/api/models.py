"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from src.domain.ports import PaymentMethod, PaymentStatus

PENDING_PAYMENT = "Pending payment"


class RegisterRequest(BaseModel):
    """
    Request model for account registration.

    Identity fields are accepted as plain strings so the domain validator
    can report every malformed field at once.
    """

    full_name: str = Field(..., min_length=1, description="First and last name")
    email: str = Field(..., min_length=1, description="Email address")
    national_id: str = Field(..., min_length=1, description="11-digit national ID (CPF)")
    phone: str = Field(..., min_length=1, description="Phone as (00) 00000-0000")
    password: str = Field(..., min_length=1, description="Account password")
    accepted_terms: bool = False
    accepted_privacy: bool = False
    marketing_opt_in: bool = False


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    success: bool = True
    user_id: str
    message: str


class VerifyEmailRequest(BaseModel):
    """Request model for email verification."""

    email: str = Field(..., min_length=1, description="Email used at registration")
    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^\d{6}$",
        description="6-digit verification code",
    )


class VerifyEmailResponse(BaseModel):
    """Response model for successful verification."""

    success: bool = True
    verified: bool = True
    message: str


class ResendVerificationRequest(BaseModel):
    """Request model for resending a verification code."""

    email: str = Field(..., min_length=1, description="Email used at registration")


class ResendVerificationResponse(BaseModel):
    success: bool = True
    message: str


class SubscribeRequest(BaseModel):
    """Request model for plan subscription."""

    user_id: str
    plan_id: str
    payment_method: PaymentMethod
    payment_data: dict[str, Any] | None = None


class SubscribeResponse(BaseModel):
    """
    Response model for subscription creation.

    ``subscription_created`` and ``subscription_active`` are reported
    separately: a PIX or boleto subscription exists before its payment
    completes.
    """

    success: bool = True
    subscription_id: str
    activated_at: str = Field(..., description=f"ISO timestamp, or '{PENDING_PAYMENT}'")
    payment_status: PaymentStatus
    subscription_created: bool
    subscription_active: bool
    message: str


class SubscriptionResponse(BaseModel):
    """Full view of a subscription record."""

    subscription_id: str
    account_id: str
    plan_id: str
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    created_at: datetime
    activated_at: datetime | None
    active: bool


class CreditBalanceResponse(BaseModel):
    account_id: str
    current: int
    monthly: int
    bonus: int
    total: int


class ConsumeCreditsRequest(BaseModel):
    """Consume either a raw amount or the catalog cost of a feature."""

    amount: int | None = Field(None, gt=0)
    feature: str | None = None

    @model_validator(mode="after")
    def exactly_one_target(self) -> "ConsumeCreditsRequest":
        if (self.amount is None) == (self.feature is None):
            raise ValueError("provide exactly one of 'amount' or 'feature'")
        return self


class PromotionRequest(BaseModel):
    promo_code: str = Field(..., min_length=1)


class LedgerEntryResponse(BaseModel):
    kind: str
    amount: int
    reason: str
    total_after: int
    created_at: datetime


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
