"""
Unit tests for SubscriptionActivator.

Tests verify:
- Payment method to payment status mapping
- Account state preconditions
- Credit grants and activation timestamps only for completed payments
- External payment confirmation for pending subscriptions
- Cancelling pending payments and subscribing again afterwards
"""

import pytest

from src.domain.catalog import PLANS
from src.domain.exceptions import (
    AccountNotFound,
    AlreadySubscribed,
    PaymentNotPending,
    SubscriptionNotFound,
    UnknownPlan,
    UnverifiedEmail,
)
from src.domain.ports import LifecycleState, PaymentMethod, PaymentStatus


class TestActivatePreconditions:
    @pytest.mark.asyncio
    async def test_unknown_account(self, activator) -> None:
        with pytest.raises(AccountNotFound):
            await activator.activate("user_missing", "inicial", "credit_card")

    @pytest.mark.asyncio
    async def test_pending_account_rejected_without_record(
        self, activator, registry, repository, make_registration
    ) -> None:
        """Subscribing before verification fails and creates nothing."""
        account = await registry.register(make_registration())

        with pytest.raises(UnverifiedEmail):
            await activator.activate(account.id, "inicial", "credit_card")

        assert await repository.list_subscriptions(account.id) == []
        assert (await registry.get(account.id)).state is LifecycleState.PENDING_VERIFICATION

    @pytest.mark.asyncio
    async def test_unknown_plan(self, activator, verified_account, repository) -> None:
        account = await verified_account()
        with pytest.raises(UnknownPlan):
            await activator.activate(account.id, "enterprise", "credit_card")
        assert await repository.list_subscriptions(account.id) == []

    @pytest.mark.asyncio
    async def test_unsupported_payment_method(self, activator, verified_account) -> None:
        account = await verified_account()
        with pytest.raises(ValueError):
            await activator.activate(account.id, "inicial", "paypal")

    @pytest.mark.asyncio
    async def test_second_subscription_rejected(self, activator, verified_account, repository) -> None:
        account = await verified_account()
        await activator.activate(account.id, "inicial", "pix")

        with pytest.raises(AlreadySubscribed):
            await activator.activate(account.id, "profissional", "credit_card")
        assert len(await repository.list_subscriptions(account.id)) == 1


class TestPaymentBranching:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            (PaymentMethod.CREDIT_CARD, PaymentStatus.COMPLETED),
            (PaymentMethod.PIX, PaymentStatus.PENDING_PIX),
            (PaymentMethod.BOLETO, PaymentStatus.PENDING_BOLETO),
        ],
    )
    async def test_status_follows_payment_method(
        self, activator, verified_account, method, expected
    ) -> None:
        account = await verified_account()
        subscription = await activator.activate(account.id, "inicial", method.value)
        assert subscription.payment_status is expected

    @pytest.mark.asyncio
    async def test_credit_card_activates_and_grants(
        self, activator, verified_account, registry, ledger
    ) -> None:
        account = await verified_account()

        subscription = await activator.activate(account.id, "intermediario", "credit_card")

        assert subscription.created is True
        assert subscription.active is True
        assert subscription.activated_at is not None
        assert subscription.id.startswith("sub_")
        balance = await ledger.balance(account.id)
        assert balance.monthly == PLANS["intermediario"].credits
        assert balance.total == 500
        assert (await registry.get(account.id)).state is LifecycleState.SUBSCRIBED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["pix", "boleto"])
    async def test_pending_payment_creates_but_does_not_activate(
        self, activator, verified_account, registry, ledger, method
    ) -> None:
        account = await verified_account()

        subscription = await activator.activate(account.id, "profissional", method)

        assert subscription.created is True
        assert subscription.active is False
        assert subscription.activated_at is None
        assert (await ledger.balance(account.id)).total == 0
        assert (await registry.get(account.id)).state is LifecycleState.SUBSCRIBED

    @pytest.mark.asyncio
    async def test_payment_data_stored_as_given(self, activator, verified_account) -> None:
        account = await verified_account()
        payload = {"card_token": "tok_123", "installments": 1}

        subscription = await activator.activate(account.id, "inicial", "credit_card", payload)

        assert (await activator.get(subscription.id)).payment_data == payload


class TestConfirmPayment:
    @pytest.mark.asyncio
    async def test_confirm_activates_and_grants_once(self, activator, verified_account, ledger) -> None:
        account = await verified_account()
        pending = await activator.activate(account.id, "inicial", "boleto")

        confirmed = await activator.confirm_payment(pending.id)
        again = await activator.confirm_payment(pending.id)

        assert confirmed.payment_status is PaymentStatus.COMPLETED
        assert confirmed.activated_at is not None
        assert again.activated_at == confirmed.activated_at
        assert (await ledger.balance(account.id)).total == PLANS["inicial"].credits

    @pytest.mark.asyncio
    async def test_confirm_completed_subscription_is_noop(self, activator, verified_account, ledger) -> None:
        account = await verified_account()
        subscription = await activator.activate(account.id, "inicial", "credit_card")

        await activator.confirm_payment(subscription.id)

        assert (await ledger.balance(account.id)).total == PLANS["inicial"].credits

    @pytest.mark.asyncio
    async def test_confirm_unknown_subscription(self, activator) -> None:
        with pytest.raises(SubscriptionNotFound):
            await activator.confirm_payment("sub_missing")

    @pytest.mark.asyncio
    async def test_confirm_cancelled_payment_rejected(self, activator, verified_account, ledger) -> None:
        account = await verified_account()
        pending = await activator.activate(account.id, "inicial", "pix")
        await activator.cancel_payment(pending.id)

        with pytest.raises(PaymentNotPending):
            await activator.confirm_payment(pending.id)
        assert (await ledger.balance(account.id)).total == 0


class TestCancelPayment:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["pix", "boleto"])
    async def test_cancel_pending_payment(self, activator, verified_account, ledger, method) -> None:
        account = await verified_account()
        pending = await activator.activate(account.id, "inicial", method)

        cancelled = await activator.cancel_payment(pending.id)

        assert cancelled.payment_status is PaymentStatus.CANCELLED
        assert cancelled.active is False
        assert cancelled.activated_at is None
        assert (await activator.get(pending.id)).payment_status is PaymentStatus.CANCELLED
        assert (await ledger.balance(account.id)).total == 0

    @pytest.mark.asyncio
    async def test_cancel_twice_is_noop(self, activator, verified_account) -> None:
        account = await verified_account()
        pending = await activator.activate(account.id, "inicial", "boleto")

        await activator.cancel_payment(pending.id)
        again = await activator.cancel_payment(pending.id)

        assert again.payment_status is PaymentStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_completed_payment_rejected(self, activator, verified_account, ledger) -> None:
        account = await verified_account()
        subscription = await activator.activate(account.id, "inicial", "credit_card")

        with pytest.raises(PaymentNotPending):
            await activator.cancel_payment(subscription.id)

        assert (await activator.get(subscription.id)).active is True
        assert (await ledger.balance(account.id)).total == PLANS["inicial"].credits

    @pytest.mark.asyncio
    async def test_cancel_unknown_subscription(self, activator) -> None:
        with pytest.raises(SubscriptionNotFound):
            await activator.cancel_payment("sub_missing")

    @pytest.mark.asyncio
    async def test_subscribe_again_after_cancelling(
        self, activator, verified_account, registry, ledger, repository
    ) -> None:
        """A cancelled boleto no longer blocks paying by credit card."""
        account = await verified_account()
        pending = await activator.activate(account.id, "inicial", "boleto")
        await activator.cancel_payment(pending.id)

        paid = await activator.activate(account.id, "profissional", "credit_card")

        assert paid.active is True
        assert (await ledger.balance(account.id)).total == PLANS["profissional"].credits
        assert (await registry.get(account.id)).state is LifecycleState.SUBSCRIBED
        assert len(await repository.list_subscriptions(account.id)) == 2

    @pytest.mark.asyncio
    async def test_pending_payment_still_blocks_new_subscription(
        self, activator, verified_account
    ) -> None:
        account = await verified_account()
        await activator.activate(account.id, "inicial", "boleto")

        with pytest.raises(AlreadySubscribed):
            await activator.activate(account.id, "inicial", "credit_card")

    @pytest.mark.asyncio
    async def test_active_subscription_blocks_after_cancelled_one(
        self, activator, verified_account
    ) -> None:
        account = await verified_account()
        pending = await activator.activate(account.id, "inicial", "pix")
        await activator.cancel_payment(pending.id)
        await activator.activate(account.id, "inicial", "credit_card")

        with pytest.raises(AlreadySubscribed):
            await activator.activate(account.id, "profissional", "pix")
