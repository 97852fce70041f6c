"""
Transaction repository.

Data access layer for the Transaction model.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cloudminer.models.enums import TransactionStatus
from cloudminer.models.transaction import Transaction
from cloudminer.repositories.base import BaseRepository
from cloudminer.utils.exceptions import TransactionNotFound


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def require(self, tx_id: str, for_update: bool = False) -> Transaction:
        """
        Get transaction by ID or fail.

        Args:
            tx_id: Transaction ID
            for_update: Lock the row for the rest of the transaction

        Returns:
            Transaction

        Raises:
            TransactionNotFound: If no transaction has this ID
        """
        if for_update:
            tx = await self.get_for_update(tx_id)
        else:
            tx = await self.get_by_id(tx_id)
        if tx is None:
            raise TransactionNotFound(f"Transaction {tx_id} not found")
        return tx

    async def append(self, tx: Transaction) -> Transaction:
        """Append a new transaction record."""
        return await self.add(tx)

    async def get_by_account(
        self,
        account_id: str,
        status: TransactionStatus | None = None,
    ) -> list[Transaction]:
        """
        Get transactions of one account, newest first.

        Args:
            account_id: Account ID
            status: Optional status filter

        Returns:
            List of transactions
        """
        stmt = select(Transaction).where(Transaction.account_id == account_id)
        if status is not None:
            stmt = stmt.where(Transaction.status == status.value)
        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_all(
        self, status: TransactionStatus | None = None
    ) -> list[Transaction]:
        """
        Get all transactions, newest first.

        Args:
            status: Optional status filter

        Returns:
            List of transactions
        """
        stmt = select(Transaction)
        if status is not None:
            stmt = stmt.where(Transaction.status == status.value)
        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def reassign_account(self, old_account_id: str, new_account_id: str) -> int:
        """
        Move all transactions from one account id to another.

        Returns:
            Number of transactions updated
        """
        stmt = (
            update(Transaction)
            .where(Transaction.account_id == old_account_id)
            .values(account_id=new_account_id)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
