"""
Account repository.

Data access layer for the Account model. Single source of truth for
balances and profile fields.
"""

from collections.abc import Iterable

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cloudminer.models.account import Account
from cloudminer.repositories.base import BaseRepository
from cloudminer.utils.exceptions import AccountNotFound, ProtectedAccount
from cloudminer.utils.validation import normalize_email, normalize_referral_code


class AccountRepository(BaseRepository[Account]):
    """Account repository with specific queries."""

    def __init__(
        self,
        session: AsyncSession,
        protected_ids: Iterable[str] = (),
    ) -> None:
        """
        Initialize account repository.

        Args:
            session: Async database session
            protected_ids: Account ids that can never be deleted
        """
        super().__init__(Account, session)
        self.protected_ids = frozenset(protected_ids)

    async def require(self, account_id: str, for_update: bool = False) -> Account:
        """
        Get account by ID or fail.

        Args:
            account_id: Account ID
            for_update: Lock the row for the rest of the transaction

        Returns:
            Account

        Raises:
            AccountNotFound: If no account has this ID
        """
        if for_update:
            account = await self.get_for_update(account_id)
        else:
            account = await self.get_by_id(account_id)
        if account is None:
            raise AccountNotFound(f"Account {account_id} not found")
        return account

    async def get_by_email(self, email: str) -> Account | None:
        """
        Get account by email (case and whitespace insensitive).

        Args:
            email: Email in any case, possibly padded

        Returns:
            Account or None
        """
        normalized = normalize_email(email)
        if not normalized:
            return None
        stmt = select(Account).where(func.lower(Account.email) == normalized)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_referral_code(self, code: str | None) -> Account | None:
        """
        Get account by referral code (case and whitespace insensitive).

        Args:
            code: Referral code as typed

        Returns:
            Account or None
        """
        normalized = normalize_referral_code(code)
        if not normalized:
            return None
        stmt = select(Account).where(
            func.upper(Account.referral_code) == normalized
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def upsert(self, account: Account) -> Account:
        """
        Persist a new or modified account.

        Args:
            account: Account entity

        Returns:
            The persisted account
        """
        return await self.add(account)

    async def delete_account(self, account_id: str) -> Account:
        """
        Permanently delete an account.

        Args:
            account_id: Account ID

        Returns:
            The deleted account (detached)

        Raises:
            ProtectedAccount: If the account is protected
            AccountNotFound: If no account has this ID
        """
        if account_id in self.protected_ids:
            raise ProtectedAccount("Cannot delete the administrator account")

        account = await self.require(account_id, for_update=True)
        await self.session.delete(account)
        await self.session.flush()

        logger.info(
            "Account deleted",
            extra={"account_id": account_id, "email": account.email},
        )
        return account

    async def get_referrals(self, parent_id: str) -> list[Account]:
        """
        Get accounts referred by the given account, newest first.

        Args:
            parent_id: Parent account ID

        Returns:
            List of child accounts
        """
        stmt = (
            select(Account)
            .where(Account.referred_by == parent_id)
            .order_by(Account.join_date.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_referrals(self, parent_id: str) -> int:
        """Count accounts whose parent is the given account."""
        return await self.count(referred_by=parent_id)

    async def repoint_referrals(self, old_parent_id: str, new_parent_id: str) -> int:
        """
        Move every child of one parent id to another.

        Args:
            old_parent_id: Current parent id
            new_parent_id: Replacement parent id

        Returns:
            Number of children updated
        """
        stmt = (
            update(Account)
            .where(Account.referred_by == old_parent_id)
            .values(referred_by=new_parent_id)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def list_all(self) -> list[Account]:
        """Get all accounts, newest first."""
        stmt = select(Account).order_by(Account.join_date.desc(), Account.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def top_earners(self, limit: int) -> list[Account]:
        """
        Get accounts ranked by total yield earned.

        Args:
            limit: Maximum number of accounts

        Returns:
            Accounts ordered by total_earned descending
        """
        stmt = (
            select(Account)
            .where(Account.total_earned > 0)
            .order_by(Account.total_earned.desc(), Account.join_date)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
