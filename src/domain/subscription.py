"""
Subscription activation - payment-method branching and final lifecycle step.

Creating a subscription and activating it are separate signals:

- the subscription record is created (and the account moves to
  SUBSCRIBED) as soon as a verified account subscribes;
- the subscription is active, with ``activated_at`` set and the plan's
  credits granted, only once its payment is completed.

Credit card payments complete immediately. PIX and boleto payments stay
pending until ``confirm_payment`` receives the external settlement
signal, or until ``cancel_payment`` abandons them. An account whose
subscriptions are all cancelled may subscribe again; it stays SUBSCRIBED
throughout.
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any

from .catalog import get_plan
from .exceptions import (
    AlreadySubscribed,
    PaymentNotPending,
    SubscriptionNotFound,
    UnverifiedEmail,
)
from .ledger import CreditLedger
from .locks import KeyedLocks
from .models import Subscription, utcnow
from .ports import LifecycleState, PaymentMethod, PaymentStatus, SubscriptionRepository
from .registration import AccountRegistry

logger = logging.getLogger(__name__)

PAYMENT_STATUS_BY_METHOD = {
    PaymentMethod.CREDIT_CARD: PaymentStatus.COMPLETED,
    PaymentMethod.PIX: PaymentStatus.PENDING_PIX,
    PaymentMethod.BOLETO: PaymentStatus.PENDING_BOLETO,
}


@dataclass
class SubscriptionActivator:
    """Transitions verified accounts to SUBSCRIBED and activates paid plans."""

    registry: AccountRegistry
    subscriptions: SubscriptionRepository
    ledger: CreditLedger
    _locks: KeyedLocks = field(default_factory=KeyedLocks, init=False, repr=False)

    async def activate(
        self,
        account_id: str,
        plan_id: str,
        payment_method: PaymentMethod | str,
        payment_data: dict[str, Any] | None = None,
    ) -> Subscription:
        """
        Subscribe a verified account to a plan.

        Args:
            account_id: Account identifier
            plan_id: Catalog plan id
            payment_method: credit_card, pix or boleto
            payment_data: Opaque gateway payload, stored as given

        Returns:
            The created subscription; ``active`` tells whether payment completed

        Raises:
            AccountNotFound: No account with this id
            UnknownPlan: Plan id is not in the catalog
            UnverifiedEmail: Account is still pending verification
            AlreadySubscribed: Account holds an active or pending subscription
            ValueError: Unsupported payment method
        """
        method = PaymentMethod(payment_method)
        plan = get_plan(plan_id)

        async with self._locks(account_id):
            account = await self.registry.get(account_id)
            if account.state is LifecycleState.PENDING_VERIFICATION:
                raise UnverifiedEmail(account_id)
            if account.state is LifecycleState.SUBSCRIBED:
                existing = await self.subscriptions.list_subscriptions(account_id)
                if any(s.active or s.pending for s in existing):
                    raise AlreadySubscribed(account_id)

            status = PAYMENT_STATUS_BY_METHOD[method]
            now = utcnow()
            subscription = Subscription(
                id=self._generate_subscription_id(),
                account_id=account_id,
                plan_id=plan.id,
                payment_method=method,
                payment_status=status,
                created_at=now,
                activated_at=now if status is PaymentStatus.COMPLETED else None,
                payment_data=payment_data,
            )
            await self.subscriptions.add_subscription(subscription)
            if account.state is not LifecycleState.SUBSCRIBED:
                await self.registry.advance(account, LifecycleState.SUBSCRIBED)

            if subscription.active:
                await self.ledger.grant(account_id, plan.entitlement, reason=f"plan:{plan.id}")

        logger.info(
            "Subscription %s created for %s on plan %s (%s)",
            subscription.id,
            account_id,
            plan.id,
            status.value,
        )
        return subscription

    async def confirm_payment(self, subscription_id: str) -> Subscription:
        """
        Settle a pending payment and activate the subscription.

        Confirming an already completed subscription returns it unchanged
        and grants nothing.

        Raises:
            SubscriptionNotFound: No subscription with this id
            PaymentNotPending: The payment was cancelled
        """
        subscription = await self.subscriptions.get_subscription(subscription_id)
        if subscription is None:
            raise SubscriptionNotFound(subscription_id)

        async with self._locks(subscription.account_id):
            subscription = await self.subscriptions.get_subscription(subscription_id)
            if subscription.active:
                return subscription
            if not subscription.pending:
                raise PaymentNotPending(subscription_id)

            plan = get_plan(subscription.plan_id)
            subscription.payment_status = PaymentStatus.COMPLETED
            subscription.activated_at = utcnow()
            await self.subscriptions.save_subscription(subscription)
            await self.ledger.grant(
                subscription.account_id, plan.entitlement, reason=f"plan:{plan.id}"
            )

        logger.info("Payment confirmed for subscription %s", subscription_id)
        return subscription

    async def cancel_payment(self, subscription_id: str) -> Subscription:
        """
        Abandon a pending PIX or boleto payment.

        The subscription is kept, marked cancelled, and no longer blocks a
        new ``activate`` call for the account. Cancelling twice returns the
        cancelled subscription unchanged.

        Raises:
            SubscriptionNotFound: No subscription with this id
            PaymentNotPending: The payment already completed
        """
        subscription = await self.get(subscription_id)

        async with self._locks(subscription.account_id):
            subscription = await self.get(subscription_id)
            if subscription.payment_status is PaymentStatus.CANCELLED:
                return subscription
            if subscription.active:
                raise PaymentNotPending(subscription_id)

            subscription.payment_status = PaymentStatus.CANCELLED
            await self.subscriptions.save_subscription(subscription)

        logger.info("Payment cancelled for subscription %s", subscription_id)
        return subscription

    async def get(self, subscription_id: str) -> Subscription:
        subscription = await self.subscriptions.get_subscription(subscription_id)
        if subscription is None:
            raise SubscriptionNotFound(subscription_id)
        return subscription

    def _generate_subscription_id(self) -> str:
        return f"sub_{secrets.token_hex(8)}"
