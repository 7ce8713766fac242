"""
Account registry - registration and lifecycle state ownership.

Lifecycle State Machine (Forward-Only Transitions)
==================================================

States:
- PENDING_VERIFICATION: Initial state after registration (code issued)
- EMAIL_VERIFIED: Verification code redeemed
- SUBSCRIBED: Terminal state once a subscription record exists

Valid Transitions:
    PENDING_VERIFICATION -> EMAIL_VERIFIED   (verify_email)
    EMAIL_VERIFIED       -> SUBSCRIBED       (SubscriptionActivator.activate)

Invalid Transitions (never allowed):
    SUBSCRIBED -> any       (SUBSCRIBED is terminal)
    any -> earlier state    (no backward movement)

Re-registering an email that already has an account is rejected as a
duplicate whatever the existing account's state; there is no merge or
retry path.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass, field

import bcrypt

from .exceptions import AccountNotFound, AlreadyVerified, DuplicateEmail, ValidationFailed
from .locks import KeyedLocks
from .models import Account, RegistrationData, utcnow
from .ports import AccountRepository, LifecycleState
from .validation import normalize_national_id, validate_registration
from .verification import VerificationCodeStore

logger = logging.getLogger(__name__)


@dataclass
class AccountRegistry:
    """
    Domain service owning account records.

    Orchestrates the registration flow: field validation, password
    hashing, atomic email claim and verification code issuance.
    """

    accounts: AccountRepository
    codes: VerificationCodeStore
    strong_passwords: bool = False
    bcrypt_cost: int = 10
    _locks: KeyedLocks = field(default_factory=KeyedLocks, init=False, repr=False)

    async def register(self, data: RegistrationData) -> Account:
        """
        Register a new account in PENDING_VERIFICATION and issue a code.

        A failed code delivery does not undo the registration: it is
        logged and the account can recover through ``codes.resend``.

        Args:
            data: Identity fields from the registration form

        Returns:
            The stored account

        Raises:
            ValidationFailed: One or more fields are missing or malformed
            DuplicateEmail: An account with this email already exists
        """
        errors = validate_registration(data, strong_password=self.strong_passwords)
        if errors:
            raise ValidationFailed(errors)

        email = data.email.strip()
        async with self._locks(email):
            if await self.accounts.find_account_by_email(email) is not None:
                raise DuplicateEmail(email)

            password_hash = await asyncio.to_thread(self._hash_password, data.password)
            account = Account(
                id=self._generate_account_id(),
                full_name=" ".join(data.full_name.split()),
                email=email,
                national_id=normalize_national_id(data.national_id),
                phone=data.phone.strip(),
                password_hash=password_hash,
                accepted_terms=data.accepted_terms,
                accepted_privacy=data.accepted_privacy,
                marketing_opt_in=data.marketing_opt_in,
            )
            if not await self.accounts.add_account(account):
                raise DuplicateEmail(email)

        logger.info("Account %s registered, pending verification", account.id)
        try:
            await self.codes.issue(email)
        except Exception:
            logger.exception("Verification code delivery failed for %s", account.id)
        return account

    async def verify_email(self, email: str, code: str) -> Account:
        """
        Redeem a verification code and mark the account verified.

        A mismatched code leaves both the account and the stored code
        untouched.

        Raises:
            CodeNotFound: No code on file for the email
            CodeMismatch: Code differs from the stored one
            AccountNotFound: Code redeemed but no account has the email
        """
        email = email.strip()
        async with self._locks(email):
            await self.codes.redeem(email, code)
            return await self._mark_verified(email)

    async def mark_verified(self, email: str) -> Account:
        """
        Transition PENDING_VERIFICATION -> EMAIL_VERIFIED.

        Callers must have redeemed the account's verification code first.

        Raises:
            AccountNotFound: No account matches the email
            AlreadyVerified: The account is past PENDING_VERIFICATION
        """
        email = email.strip()
        async with self._locks(email):
            return await self._mark_verified(email)

    async def lookup(self, email: str) -> Account | None:
        return await self.accounts.find_account_by_email(email.strip())

    async def get(self, account_id: str) -> Account:
        account = await self.accounts.get_account(account_id)
        if account is None:
            raise AccountNotFound(account_id)
        return account

    async def advance(self, account: Account, state: LifecycleState) -> Account:
        """
        Move an account forward to ``state`` and persist it.

        Raises:
            ValueError: ``state`` is not later than the current state
        """
        if state.rank <= account.state.rank:
            raise ValueError(f"cannot move account {account.id} from {account.state.value} to {state.value}")
        account.state = state
        if state is LifecycleState.EMAIL_VERIFIED:
            account.verified_at = utcnow()
        await self.accounts.save_account(account)
        logger.info("Account %s moved to %s", account.id, state.value)
        return account

    async def check_password(self, email: str, password: str) -> bool:
        account = await self.lookup(email)
        if account is None:
            return False
        return await asyncio.to_thread(
            bcrypt.checkpw, password.encode(), account.password_hash.encode()
        )

    async def _mark_verified(self, email: str) -> Account:
        account = await self.accounts.find_account_by_email(email)
        if account is None:
            raise AccountNotFound(email)
        if account.state is not LifecycleState.PENDING_VERIFICATION:
            raise AlreadyVerified(email)
        return await self.advance(account, LifecycleState.EMAIL_VERIFIED)

    def _generate_account_id(self) -> str:
        return f"user_{secrets.token_hex(8)}"

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
