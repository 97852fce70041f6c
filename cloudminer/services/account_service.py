"""
Account service.

Registration, sign-in and the current session slot. Credentials are
hashed and verified by the AuthProvider; the ledger only keeps the hash.
"""

import secrets
from decimal import Decimal

from cloudminer.config.business_constants import (
    ACCOUNT_ID_MAX,
    ACCOUNT_ID_MIN,
    ACCOUNT_ID_PREFIX,
)
from cloudminer.models.account import Account
from cloudminer.services.auth import AuthProvider, BcryptAuthProvider
from cloudminer.services.base_service import BaseService, log_operation
from cloudminer.services.referral.chain_manager import ReferralChainManager
from cloudminer.services.unit_of_work import LedgerStore, UnitOfWork
from cloudminer.utils.exceptions import (
    AccountBlocked,
    AccountIdInUse,
    AccountNotFound,
    EmailInUse,
    IncorrectSecret,
)


def generate_account_id() -> str:
    """Generate a random account id such as 'uid4821'."""
    number = ACCOUNT_ID_MIN + secrets.randbelow(ACCOUNT_ID_MAX - ACCOUNT_ID_MIN + 1)
    return f"{ACCOUNT_ID_PREFIX}{number}"


class AccountService(BaseService):
    """Account lifecycle from the user's side."""

    def __init__(
        self,
        store: LedgerStore,
        auth: AuthProvider | None = None,
    ) -> None:
        """
        Initialize account service.

        Args:
            store: Ledger store
            auth: Credential provider (bcrypt by default)
        """
        super().__init__(store)
        self.auth = auth or BcryptAuthProvider()
        self.chain_manager = ReferralChainManager(store)

    async def _allocate_id(self, uow: UnitOfWork, email: str) -> str:
        """Pick the id of a new account; the admin email gets the admin id."""
        if email == self.store.admin.email:
            holder = await uow.accounts.get_by_id(self.store.admin.account_id)
            if holder is not None:
                raise AccountIdInUse(
                    f"Administrator id {holder.id} is held by another account."
                )
            return self.store.admin.account_id
        while True:
            account_id = generate_account_id()
            if account_id == self.store.admin.account_id:
                continue
            if await uow.accounts.get_by_id(account_id) is None:
                return account_id

    @log_operation
    async def register(
        self,
        email: str,
        secret: str,
        referral_code: str | None = None,
    ) -> Account:
        """
        Register a new account and sign it in.

        An unknown referral code does not fail the registration; the
        account is simply created without a referrer.

        Args:
            email: Email (normalized before use)
            secret: Plain text secret (only its hash is stored)
            referral_code: Optional referral code of the referrer

        Returns:
            Created account

        Raises:
            ValueError: If email or secret is empty
            EmailInUse: If another account uses this email
            AccountIdInUse: If the administrator id is held by another account
        """
        email = self.auth.normalize_email(email)
        if not email or "@" not in email:
            raise ValueError("A valid email is required")
        if not secret:
            raise ValueError("A password is required")

        secret_hash = self.auth.hash_secret(secret)

        async with self.store.begin() as uow:
            if await uow.accounts.get_by_email(email) is not None:
                raise EmailInUse("Email already in use.")

            account = Account(
                id=await self._allocate_id(uow, email),
                email=email,
                secret_hash=secret_hash,
                primary_balance=Decimal("0"),
                secondary_balance=Decimal("0"),
                tier=0,
                last_yield_at=None,
                total_earned=Decimal("0"),
                referral_code=await self.chain_manager.generate_unique_code(uow),
                referred_by=None,
                referral_count=0,
                referral_earnings=Decimal("0"),
                blocked=False,
                join_date=self.now(),
            )
            await self.chain_manager.link_on_register(uow, account, referral_code)
            await uow.accounts.upsert(account)
            await uow.session_slots.set_current(account.id)

            self.logger.info(
                "Account registered",
                extra={
                    "account_id": account.id,
                    "email": account.email,
                    "has_referrer": account.referred_by is not None,
                },
            )
            return account

    @log_operation
    async def login(self, email: str, secret: str) -> Account:
        """
        Sign in with email and secret.

        Args:
            email: Email in any case
            secret: Plain text secret

        Returns:
            Signed-in account

        Raises:
            AccountNotFound: If no account uses this email
            IncorrectSecret: If the secret does not match
            AccountBlocked: If the account is blocked
        """
        async with self.store.read() as uow:
            account = await uow.accounts.get_by_email(email)
        if account is None:
            raise AccountNotFound("User not found. Please sign up.")
        if not self.auth.verify(account.secret_hash, secret):
            raise IncorrectSecret("Incorrect password")

        async with self.store.begin() as uow:
            account = await uow.accounts.require(account.id, for_update=True)
            if account.blocked:
                raise AccountBlocked("ACCOUNT BLOCKED: Contact Support.")

            if not account.referral_code:
                account.referral_code = await self.chain_manager.generate_unique_code(uow)
            await self._normalize_admin_identity(uow, account)
            await uow.accounts.upsert(account)
            await uow.session_slots.set_current(account.id)

            self.logger.info("Account signed in", extra={"account_id": account.id})
            return account

    async def _normalize_admin_identity(self, uow: UnitOfWork, account: Account) -> None:
        """
        Give the administrator account its configured id.

        Children and transactions of the old id follow the account.
        """
        admin = self.store.admin
        if account.email != admin.email or account.id == admin.account_id:
            return

        holder = await uow.accounts.get_by_id(admin.account_id)
        if holder is not None:
            self.logger.warning(
                "Administrator id held by another account, keeping current id",
                extra={"account_id": account.id, "admin_id": admin.account_id},
            )
            return

        old_id = account.id
        children = await uow.accounts.repoint_referrals(old_id, admin.account_id)
        moved = await uow.transactions.reassign_account(old_id, admin.account_id)
        account.id = admin.account_id
        await uow.accounts.upsert(account)

        self.logger.warning(
            "Administrator account id normalized",
            extra={
                "old_id": old_id,
                "new_id": admin.account_id,
                "children_moved": children,
                "transactions_moved": moved,
            },
        )

    async def logout(self) -> None:
        """Clear the current session."""
        async with self.store.begin() as uow:
            await uow.session_slots.set_current(None)

    async def current_account(self) -> Account | None:
        """
        Get the signed-in account.

        A blocked or deleted account ends the session.

        Returns:
            Account or None if nobody is signed in
        """
        async with self.store.read() as uow:
            account_id = await uow.session_slots.get_current()
            if account_id is None:
                return None
            account = await uow.accounts.get_by_id(account_id)

        if account is None or account.blocked:
            await self.logout()
            return None
        return account

    async def get_account(self, account_id: str) -> Account:
        """
        Get account by ID.

        Raises:
            AccountNotFound: If the account does not exist
        """
        async with self.store.read() as uow:
            return await uow.accounts.require(account_id)

    @log_operation
    async def change_secret(
        self, account_id: str, old_secret: str, new_secret: str
    ) -> None:
        """
        Replace the secret after checking the current one.

        Raises:
            AccountNotFound: If the account does not exist
            IncorrectSecret: If the current secret does not match
            ValueError: If the new secret is empty
        """
        if not new_secret:
            raise ValueError("A password is required")
        new_hash = self.auth.hash_secret(new_secret)

        async with self.store.begin() as uow:
            account = await uow.accounts.require(account_id, for_update=True)
            if not self.auth.verify(account.secret_hash, old_secret):
                raise IncorrectSecret("Old password is incorrect")
            account.secret_hash = new_hash
            await uow.accounts.upsert(account)

        self.logger.info("Secret changed", extra={"account_id": account_id})

    @log_operation
    async def reset_secret(self, email: str, new_secret: str) -> None:
        """
        Set a new secret for the account with this email.

        Raises:
            AccountNotFound: If no account uses this email
            ValueError: If the new secret is empty
        """
        if not new_secret:
            raise ValueError("A password is required")
        new_hash = self.auth.hash_secret(new_secret)

        async with self.store.begin() as uow:
            account = await uow.accounts.get_by_email(email)
            if account is None:
                raise AccountNotFound("Email not found")
            account.secret_hash = new_hash
            await uow.accounts.upsert(account)

        self.logger.info("Secret reset", extra={"account_id": account.id})
