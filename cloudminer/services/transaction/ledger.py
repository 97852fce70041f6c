"""
Transaction ledger facade.

Single entry point combining request, settlement and query handling.
"""

from decimal import Decimal

from cloudminer.models.enums import SettlementDecision, TransactionKind
from cloudminer.models.transaction import Transaction
from cloudminer.services.transaction.lifecycle_handler import (
    TransactionLifecycleHandler,
)
from cloudminer.services.transaction.query_service import TransactionQueryService
from cloudminer.services.transaction.request_handler import (
    TransactionRequestHandler,
)
from cloudminer.services.unit_of_work import LedgerStore


class TransactionLedger:
    """Deposit/withdrawal requests and their approval workflow."""

    def __init__(
        self,
        store: LedgerStore,
        min_withdrawal_amount: Decimal | None = None,
    ) -> None:
        """
        Initialize transaction ledger.

        Args:
            store: Ledger store
            min_withdrawal_amount: Smallest accepted withdrawal (0 disables)
        """
        self.requests = TransactionRequestHandler(store, min_withdrawal_amount)
        self.lifecycle = TransactionLifecycleHandler(store)
        self.queries = TransactionQueryService(store)

    async def request(
        self,
        account_id: str,
        kind: TransactionKind | str,
        amount: Decimal | int | str,
        network: str = "",
        proof: str = "",
    ) -> Transaction:
        """Create a pending deposit or withdrawal."""
        return await self.requests.request(account_id, kind, amount, network, proof)

    async def deposit(
        self, account_id: str, amount: Decimal | int | str, network: str = "", proof: str = ""
    ) -> Transaction:
        """Create a pending deposit."""
        return await self.request(account_id, TransactionKind.DEPOSIT, amount, network, proof)

    async def withdraw(
        self, account_id: str, amount: Decimal | int | str, network: str = "", proof: str = ""
    ) -> Transaction:
        """Create a pending withdrawal (escrowed immediately)."""
        return await self.request(account_id, TransactionKind.WITHDRAW, amount, network, proof)

    async def settle(
        self, admin_id: str, tx_id: str, decision: SettlementDecision | str
    ) -> Transaction:
        """Approve or reject a pending transaction."""
        return await self.lifecycle.settle(admin_id, tx_id, decision)

    async def approve(self, admin_id: str, tx_id: str) -> Transaction:
        """Approve a pending transaction."""
        return await self.settle(admin_id, tx_id, SettlementDecision.APPROVE)

    async def reject(self, admin_id: str, tx_id: str) -> Transaction:
        """Reject a pending transaction."""
        return await self.settle(admin_id, tx_id, SettlementDecision.REJECT)

    async def history(self, account_id: str) -> list[Transaction]:
        """Transactions of one account, newest first."""
        return await self.queries.history(account_id)

    async def all_history(self, admin_id: str) -> list[Transaction]:
        """All transactions, newest first (admin only)."""
        return await self.queries.all_history(admin_id)

    async def pending(self, admin_id: str) -> list[Transaction]:
        """Pending transactions, newest first (admin only)."""
        return await self.queries.pending(admin_id)
