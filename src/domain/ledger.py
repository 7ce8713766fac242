"""
Credit ledger - multi-tranche balances and atomic consumption.

A balance is split into three tranches:

- bonus:   promotional credits, spent first
- current: purchased/adjusted credits, spent second
- monthly: the plan's recurring entitlement, spent last

Consumption drains the tranches in that order, carrying any remainder
into the next tranche, and never leaves a tranche negative. Every
mutation of an account's balance holds that account's lock from the
read through the write, so concurrent calls against the same account
never observe an intermediate state. Different accounts never contend.
"""

import logging
from dataclasses import dataclass, field

from .catalog import feature_cost, promotion_bonus
from .exceptions import InsufficientCredits, PromotionAlreadyApplied
from .locks import KeyedLocks
from .models import CreditBalance, CreditGrant, LedgerEntry
from .ports import CreditBalanceRepository

logger = logging.getLogger(__name__)

DRAIN_ORDER = ("bonus", "current", "monthly")


def drain(balance: CreditBalance, amount: int) -> CreditBalance:
    """Return a new balance with ``amount`` deducted in DRAIN_ORDER."""
    remaining = amount
    tranches = {"current": balance.current, "monthly": balance.monthly, "bonus": balance.bonus}
    for name in DRAIN_ORDER:
        taken = min(tranches[name], remaining)
        tranches[name] -= taken
        remaining -= taken
    if remaining:
        raise InsufficientCredits(balance.account_id, amount, balance.total)
    return CreditBalance(account_id=balance.account_id, **tranches)


@dataclass
class CreditLedger:
    """Owns credit balances; the only writer of CreditBalance records."""

    balances: CreditBalanceRepository
    history_limit: int = 50
    _locks: KeyedLocks = field(default_factory=KeyedLocks, init=False, repr=False)

    async def balance(self, account_id: str) -> CreditBalance:
        balance = await self.balances.get_balance(account_id)
        return balance if balance is not None else CreditBalance(account_id=account_id)

    async def grant(self, account_id: str, grant: CreditGrant, *, reason: str = "grant") -> CreditBalance:
        """
        Add ``grant`` to the account's tranches.

        The ledger does not track renewal periods; callers must not grant
        the same period twice.
        """
        async with self._locks(account_id):
            return await self._apply_grant(account_id, grant, kind="grant", reason=reason)

    async def sufficient(self, account_id: str, amount: int) -> bool:
        return (await self.balance(account_id)).total >= amount

    async def consume(self, account_id: str, amount: int, *, reason: str = "consumption") -> CreditBalance:
        """
        Atomically check sufficiency and deduct ``amount``.

        Raises:
            ValueError: ``amount`` is not a positive integer
            InsufficientCredits: Total balance is below ``amount``; the
                balance is left unchanged
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError(f"amount must be a positive integer, got {amount!r}")

        async with self._locks(account_id):
            before = await self.balance(account_id)
            try:
                after = drain(before, amount)
            except InsufficientCredits:
                logger.warning(
                    "Rejected consumption of %d credits for %s (available %d)",
                    amount,
                    account_id,
                    before.total,
                )
                raise
            entry = LedgerEntry(
                account_id=account_id,
                kind="consume",
                amount=-amount,
                reason=reason,
                total_after=after.total,
            )
            await self.balances.save_balance(after, entry)
        return after

    async def consume_feature(self, account_id: str, feature: str) -> CreditBalance:
        """Consume the catalog cost of ``feature``."""
        return await self.consume(account_id, feature_cost(feature), reason=feature)

    async def apply_promotion(self, account_id: str, promo_code: str) -> CreditBalance:
        """
        Grant a promotion's bonus credits, once per account and code.

        Raises:
            InvalidPromotion: Unknown promotion code
            PromotionAlreadyApplied: The account already redeemed it
        """
        bonus = promotion_bonus(promo_code)
        async with self._locks(account_id):
            entries = await self.balances.list_entries(account_id, limit=0)
            if any(e.kind == "promotion" and e.reason == promo_code for e in entries):
                raise PromotionAlreadyApplied(promo_code)
            return await self._apply_grant(
                account_id, CreditGrant(bonus=bonus), kind="promotion", reason=promo_code
            )

    async def history(self, account_id: str, limit: int | None = None) -> list[LedgerEntry]:
        """Most recent entries first."""
        return await self.balances.list_entries(
            account_id, limit=self.history_limit if limit is None else limit
        )

    async def _apply_grant(
        self, account_id: str, grant: CreditGrant, *, kind: str, reason: str
    ) -> CreditBalance:
        before = await self.balance(account_id)
        after = CreditBalance(
            account_id=account_id,
            current=before.current + grant.current,
            monthly=before.monthly + grant.monthly,
            bonus=before.bonus + grant.bonus,
        )
        entry = LedgerEntry(
            account_id=account_id,
            kind=kind,
            amount=grant.total,
            reason=reason,
            total_after=after.total,
        )
        await self.balances.save_balance(after, entry)
        logger.info("Granted %d credits to %s (%s)", grant.total, account_id, reason)
        return after
