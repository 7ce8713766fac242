"""
Verification codes - issue, redeem and resend one-time email codes.

One code is active per email. Issuing a new code replaces the previous
one; a successful redemption deletes it. Codes do not expire unless a
TTL policy is configured.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .exceptions import AccountNotFound, AlreadyVerified, CodeMismatch, CodeNotFound
from .locks import KeyedLocks
from .models import VerificationCode, utcnow
from .ports import (
    AccountRepository,
    LifecycleState,
    NotificationSender,
    VerificationCodeRepository,
)

logger = logging.getLogger(__name__)


def generate_code() -> str:
    """Uniformly random 6-digit code in 100000-999999."""
    return str(100_000 + secrets.randbelow(900_000))


@dataclass
class VerificationCodeStore:
    """Issues and redeems short-lived numeric codes keyed by email."""

    codes: VerificationCodeRepository
    accounts: AccountRepository
    sender: NotificationSender
    code_ttl_seconds: int | None = None
    clock: Callable[[], datetime] = utcnow
    _locks: KeyedLocks = field(default_factory=KeyedLocks, init=False, repr=False)

    async def issue(self, email: str) -> str:
        """
        Mint a new code for ``email`` and hand it to the notification sender.

        Any code previously issued for the email stops being valid.
        """
        code = generate_code()
        async with self._locks(email):
            await self.codes.put_code(VerificationCode(email=email, code=code, issued_at=self.clock()))
        logger.info("Verification code issued for %s", email)
        await self.sender.send_verification_code(email, code)
        return code

    async def redeem(self, email: str, code: str) -> VerificationCode:
        """
        Consume the code on file for ``email``.

        Raises:
            CodeNotFound: No code on file (or the stored code expired)
            CodeMismatch: Submitted code differs; the stored code is kept
        """
        async with self._locks(email):
            stored = await self.codes.get_code(email)
            if stored is None:
                raise CodeNotFound(email)

            if self._expired(stored):
                await self.codes.delete_code(email)
                logger.info("Expired verification code discarded for %s", email)
                raise CodeNotFound(email)

            if not secrets.compare_digest(stored.code.encode(), code.encode()):
                raise CodeMismatch(email)

            await self.codes.delete_code(email)
            return stored

    async def resend(self, email: str) -> str:
        """
        Issue a fresh code for an account that is still pending verification.

        Raises:
            AccountNotFound: No account has this email
            AlreadyVerified: The account is past PENDING_VERIFICATION
        """
        email = email.strip()
        account = await self.accounts.find_account_by_email(email)
        if account is None:
            raise AccountNotFound(email)
        if account.state is not LifecycleState.PENDING_VERIFICATION:
            raise AlreadyVerified(email)
        return await self.issue(email)

    async def peek(self, email: str) -> VerificationCode | None:
        return await self.codes.get_code(email)

    def _expired(self, stored: VerificationCode) -> bool:
        if self.code_ttl_seconds is None:
            return False
        return self.clock() - stored.issued_at > timedelta(seconds=self.code_ttl_seconds)
