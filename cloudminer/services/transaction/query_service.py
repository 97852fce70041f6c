"""
Transaction query service.

History helpers, always ordered newest first.
"""

from cloudminer.models.enums import TransactionStatus
from cloudminer.models.transaction import Transaction
from cloudminer.services.base_service import BaseService


class TransactionQueryService(BaseService):
    """Read-only transaction queries."""

    async def history(self, account_id: str) -> list[Transaction]:
        """
        Get the transactions of one account, newest first.

        Args:
            account_id: Account ID

        Returns:
            List of transactions
        """
        async with self.store.read() as uow:
            return await uow.transactions.get_by_account(account_id)

    async def all_history(self, admin_id: str) -> list[Transaction]:
        """
        Get every transaction, newest first (admin only).

        Raises:
            Unauthorized: If the caller is not the administrator
        """
        async with self.store.read() as uow:
            await self.require_admin(uow, admin_id)
            return await uow.transactions.get_all()

    async def pending(self, admin_id: str) -> list[Transaction]:
        """
        Get the approval queue, newest first (admin only).

        Raises:
            Unauthorized: If the caller is not the administrator
        """
        async with self.store.read() as uow:
            await self.require_admin(uow, admin_id)
            return await uow.transactions.get_all(status=TransactionStatus.PENDING)
