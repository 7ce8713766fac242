"""
API v1 routes.

Defines REST endpoints for the account lifecycle API: registration,
email verification, subscription and credit ledger access.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import (
    get_account_registry,
    get_code_store,
    get_credit_ledger,
    get_subscription_activator,
)
from src.api.models import (
    PENDING_PAYMENT,
    ConsumeCreditsRequest,
    CreditBalanceResponse,
    ErrorResponse,
    LedgerEntryResponse,
    PromotionRequest,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    ResendVerificationResponse,
    SubscribeRequest,
    SubscribeResponse,
    SubscriptionResponse,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from src.domain.exceptions import (
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
from src.domain.ledger import CreditLedger
from src.domain.models import CreditBalance, RegistrationData, Subscription
from src.domain.registration import AccountRegistry
from src.domain.subscription import SubscriptionActivator
from src.domain.verification import VerificationCodeStore

router = APIRouter(tags=["v1"])

USER_NOT_FOUND = "User not found"


def _balance_response(balance: CreditBalance) -> CreditBalanceResponse:
    return CreditBalanceResponse(
        account_id=balance.account_id,
        current=balance.current,
        monthly=balance.monthly,
        bonus=balance.bonus,
        total=balance.total,
    )


def _subscription_response(subscription: Subscription) -> SubscriptionResponse:
    return SubscriptionResponse(
        subscription_id=subscription.id,
        account_id=subscription.account_id,
        plan_id=subscription.plan_id,
        payment_method=subscription.payment_method,
        payment_status=subscription.payment_status,
        created_at=subscription.created_at,
        activated_at=subscription.activated_at,
        active=subscription.active,
    )


async def _require_account(registry: AccountRegistry, account_id: str) -> None:
    try:
        await registry.get(account_id)
    except AccountNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND) from None


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"description": "Validation error"},
    },
    summary="Register a new user",
    description="Submit identity data to create an account pending verification. "
    "A 6-digit verification code will be sent to the provided email.",
)
async def register(
    request_data: RegisterRequest,
    registry: AccountRegistry = Depends(get_account_registry),
) -> RegisterResponse:
    """
    Register a new account and send a verification code.

    All identity fields are validated together; the error detail lists
    every invalid field.
    """
    data = RegistrationData(**request_data.model_dump())
    try:
        account = await registry.register(data)
    except ValidationFailed as exc:
        raise HTTPException(
            status_code=422,
            detail=str(exc),
        ) from None
    except DuplicateEmail:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        ) from None
    return RegisterResponse(
        user_id=account.id,
        message="Account created. Verification code sent by email.",
    )


@router.post(
    "/verify-email",
    response_model=VerifyEmailResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid verification code"},
        404: {"model": ErrorResponse, "description": "Code not found or expired"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
        422: {"description": "Validation error"},
    },
    summary="Verify email with verification code",
    description="Submit the 6-digit code received by email to verify the account.",
)
async def verify_email(
    request_data: VerifyEmailRequest,
    registry: AccountRegistry = Depends(get_account_registry),
) -> VerifyEmailResponse:
    """A mismatched code leaves the account and the stored code untouched."""
    try:
        await registry.verify_email(request_data.email, request_data.code)
    except CodeNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Verification code not found or expired",
        ) from None
    except CodeMismatch:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification code",
        ) from None
    except AccountNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND) from None
    except AlreadyVerified:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already verified",
        ) from None
    return VerifyEmailResponse(message="Email verified successfully")


@router.post(
    "/resend-verification",
    response_model=ResendVerificationResponse,
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
    },
    summary="Resend verification code",
    description="Issue a new verification code, replacing the previous one.",
)
async def resend_verification(
    request_data: ResendVerificationRequest,
    code_store: VerificationCodeStore = Depends(get_code_store),
) -> ResendVerificationResponse:
    try:
        await code_store.resend(request_data.email)
    except AccountNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND) from None
    except AlreadyVerified:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already verified",
        ) from None
    return ResendVerificationResponse(message="New verification code sent")


@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Email not verified"},
        404: {"model": ErrorResponse, "description": "User or plan not found"},
        409: {"model": ErrorResponse, "description": "Already subscribed"},
    },
    summary="Subscribe to a plan",
    description="Create a subscription for a verified account. Credit card payments "
    "activate immediately; PIX and boleto payments stay pending until confirmed.",
)
async def subscribe(
    request_data: SubscribeRequest,
    activator: SubscriptionActivator = Depends(get_subscription_activator),
) -> SubscribeResponse:
    try:
        subscription = await activator.activate(
            request_data.user_id,
            request_data.plan_id,
            request_data.payment_method,
            request_data.payment_data,
        )
    except AccountNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND) from None
    except UnknownPlan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found") from None
    except UnverifiedEmail:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email must be verified before subscribing",
        ) from None
    except AlreadySubscribed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Account already subscribed",
        ) from None

    if subscription.active:
        activated_at = subscription.activated_at.isoformat()
        message = "Subscription activated successfully"
    else:
        activated_at = PENDING_PAYMENT
        message = "Subscription created. Awaiting payment confirmation."
    return SubscribeResponse(
        subscription_id=subscription.id,
        activated_at=activated_at,
        payment_status=subscription.payment_status,
        subscription_created=subscription.created,
        subscription_active=subscription.active,
        message=message,
    )


@router.post(
    "/subscriptions/{subscription_id}/confirm-payment",
    response_model=SubscriptionResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Subscription not found"},
        409: {"model": ErrorResponse, "description": "Payment was cancelled"},
    },
    summary="Confirm a pending payment",
    description="Record the external settlement of a PIX or boleto payment and "
    "activate the subscription.",
)
async def confirm_payment(
    subscription_id: str,
    activator: SubscriptionActivator = Depends(get_subscription_activator),
) -> SubscriptionResponse:
    try:
        subscription = await activator.confirm_payment(subscription_id)
    except SubscriptionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found",
        ) from None
    except PaymentNotPending:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Payment was cancelled",
        ) from None
    return _subscription_response(subscription)


@router.post(
    "/subscriptions/{subscription_id}/cancel-payment",
    response_model=SubscriptionResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Subscription not found"},
        409: {"model": ErrorResponse, "description": "Payment already completed"},
    },
    summary="Cancel a pending payment",
    description="Abandon a PIX or boleto payment that was never settled. The "
    "account may then subscribe again.",
)
async def cancel_payment(
    subscription_id: str,
    activator: SubscriptionActivator = Depends(get_subscription_activator),
) -> SubscriptionResponse:
    try:
        subscription = await activator.cancel_payment(subscription_id)
    except SubscriptionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found",
        ) from None
    except PaymentNotPending:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Payment already completed",
        ) from None
    return _subscription_response(subscription)


@router.get(
    "/subscriptions/{subscription_id}",
    response_model=SubscriptionResponse,
    responses={404: {"model": ErrorResponse, "description": "Subscription not found"}},
    summary="Get a subscription and its payment status",
)
async def get_subscription(
    subscription_id: str,
    activator: SubscriptionActivator = Depends(get_subscription_activator),
) -> SubscriptionResponse:
    try:
        subscription = await activator.get(subscription_id)
    except SubscriptionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found",
        ) from None
    return _subscription_response(subscription)


@router.get(
    "/accounts/{account_id}/credits",
    response_model=CreditBalanceResponse,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Get credit balance",
)
async def get_credits(
    account_id: str,
    registry: AccountRegistry = Depends(get_account_registry),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> CreditBalanceResponse:
    await _require_account(registry, account_id)
    return _balance_response(await ledger.balance(account_id))


@router.post(
    "/accounts/{account_id}/credits/consume",
    response_model=CreditBalanceResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Unknown feature"},
        402: {"model": ErrorResponse, "description": "Insufficient credits"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Consume credits",
    description="Deduct a raw amount or a feature's catalog cost. Bonus credits are "
    "spent first, then current, then monthly.",
)
async def consume_credits(
    account_id: str,
    request_data: ConsumeCreditsRequest,
    registry: AccountRegistry = Depends(get_account_registry),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> CreditBalanceResponse:
    await _require_account(registry, account_id)
    try:
        if request_data.feature is not None:
            balance = await ledger.consume_feature(account_id, request_data.feature)
        else:
            balance = await ledger.consume(account_id, request_data.amount)
    except UnknownFeature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown feature") from None
    except InsufficientCredits:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Insufficient credits",
        ) from None
    return _balance_response(balance)


@router.post(
    "/accounts/{account_id}/credits/promotions",
    response_model=CreditBalanceResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid promotion code"},
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Promotion already applied"},
    },
    summary="Apply a promotion code",
)
async def apply_promotion(
    account_id: str,
    request_data: PromotionRequest,
    registry: AccountRegistry = Depends(get_account_registry),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> CreditBalanceResponse:
    await _require_account(registry, account_id)
    try:
        balance = await ledger.apply_promotion(account_id, request_data.promo_code)
    except InvalidPromotion:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid promotion code",
        ) from None
    except PromotionAlreadyApplied:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Promotion already applied",
        ) from None
    return _balance_response(balance)


@router.get(
    "/accounts/{account_id}/credits/history",
    response_model=list[LedgerEntryResponse],
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="List credit ledger entries",
)
async def credit_history(
    account_id: str,
    limit: int | None = Query(None, gt=0),
    registry: AccountRegistry = Depends(get_account_registry),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> list[LedgerEntryResponse]:
    await _require_account(registry, account_id)
    entries = await ledger.history(account_id, limit)
    return [
        LedgerEntryResponse(
            kind=e.kind,
            amount=e.amount,
            reason=e.reason,
            total_after=e.total_after,
            created_at=e.created_at,
        )
        for e in entries
    ]
