"""
Transaction request handling.

Creates pending deposit and withdrawal requests. A withdrawal is escrowed
at request time; a deposit has no balance effect until it is approved.
"""

import secrets
from decimal import Decimal

from cloudminer.config.settings import settings
from cloudminer.models.enums import TransactionKind, TransactionStatus
from cloudminer.models.transaction import Transaction
from cloudminer.services.base_service import BaseService, log_operation
from cloudminer.services.transaction.balance_manager import LedgerBalanceManager
from cloudminer.services.unit_of_work import LedgerStore
from cloudminer.utils.exceptions import InvalidAmount
from cloudminer.utils.validation import validate_positive_amount

_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"


class TransactionRequestHandler(BaseService):
    """Handles creation of deposit and withdrawal requests."""

    def __init__(
        self,
        store: LedgerStore,
        min_withdrawal_amount: Decimal | None = None,
    ) -> None:
        """
        Initialize request handler.

        Args:
            store: Ledger store
            min_withdrawal_amount: Smallest accepted withdrawal (0 disables)
        """
        super().__init__(store)
        self.balance_manager = LedgerBalanceManager()
        self.min_withdrawal_amount = (
            settings.min_withdrawal_amount
            if min_withdrawal_amount is None
            else min_withdrawal_amount
        )

    def _new_transaction_id(self) -> str:
        """Creation-time derived id: tx_<epoch ms>_<5 random chars>."""
        millis = int(self.now().timestamp() * 1000)
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(5))
        return f"tx_{millis}_{suffix}"

    @log_operation
    async def request(
        self,
        account_id: str,
        kind: TransactionKind | str,
        amount: Decimal | int | str,
        network: str = "",
        proof: str = "",
    ) -> Transaction:
        """
        Create a pending transaction.

        Args:
            account_id: Requesting account
            kind: deposit or withdraw
            amount: Positive amount in primary currency
            network: Settlement channel label
            proof: Deposit evidence id or withdrawal destination

        Returns:
            The new pending transaction

        Raises:
            InvalidAmount: If amount is not positive (or below the minimum withdrawal)
            AccountNotFound: If the account does not exist
            AccountBlocked: If the account is blocked
            InsufficientFunds: If a withdrawal exceeds the primary balance
        """
        kind = TransactionKind(kind)
        amount = validate_positive_amount(amount)
        if (
            kind is TransactionKind.WITHDRAW
            and self.min_withdrawal_amount > 0
            and amount < self.min_withdrawal_amount
        ):
            raise InvalidAmount(
                f"Minimum withdrawal is {self.min_withdrawal_amount}"
            )

        async with self.store.begin() as uow:
            account = await self.require_active(uow, account_id)
            tx_id = self._new_transaction_id()
            while await uow.transactions.get_by_id(tx_id) is not None:
                tx_id = self._new_transaction_id()

            if kind is TransactionKind.WITHDRAW:
                self.balance_manager.escrow(account, amount, tx_id)
                # Account is persisted before the record is appended
                await uow.accounts.upsert(account)

            tx = Transaction(
                id=tx_id,
                account_id=account.id,
                account_email=account.email,
                kind=kind.value,
                amount=amount,
                status=TransactionStatus.PENDING.value,
                created_at=self.now(),
                network=network or "",
                proof=proof or "",
            )
            await uow.transactions.append(tx)

            self.logger.info(
                "Transaction requested",
                extra={
                    "tx_id": tx.id,
                    "account_id": account.id,
                    "kind": kind.value,
                    "amount": str(amount),
                    "network": tx.network,
                },
            )
            return tx
