"""
Transaction lifecycle handling.

Settles pending transactions: pending -> approved or pending -> rejected,
both terminal. Repeating the decision a transaction already carries is a
no-op, so a double-fired approval cannot credit twice.
"""

from cloudminer.models.enums import SettlementDecision, TransactionStatus
from cloudminer.models.transaction import Transaction
from cloudminer.services.base_service import BaseService, log_operation
from cloudminer.services.referral.earnings_manager import ReferralEarningsManager
from cloudminer.services.transaction.balance_manager import LedgerBalanceManager
from cloudminer.services.unit_of_work import LedgerStore
from cloudminer.utils.exceptions import AlreadySettled


class TransactionLifecycleHandler(BaseService):
    """Handles approval and rejection of transactions."""

    def __init__(self, store: LedgerStore) -> None:
        """
        Initialize lifecycle handler.

        Args:
            store: Ledger store
        """
        super().__init__(store)
        self.balance_manager = LedgerBalanceManager()
        self.earnings_manager = ReferralEarningsManager(store)

    @log_operation
    async def settle(
        self,
        admin_id: str,
        tx_id: str,
        decision: SettlementDecision | str,
    ) -> Transaction:
        """
        Approve or reject a pending transaction (admin only).

        approve + deposit: credit amount, pay referral commission
        approve + withdraw: no balance change (already escrowed)
        reject + withdraw: refund the escrowed amount
        reject + deposit: no balance change

        Args:
            admin_id: Caller account id
            tx_id: Transaction ID
            decision: approve or reject

        Returns:
            The settled transaction

        Raises:
            Unauthorized: If the caller is not the administrator
            TransactionNotFound: If the transaction does not exist
            AlreadySettled: If the transaction carries the opposite decision
        """
        decision = SettlementDecision(decision)
        target = decision.target_status

        async with self.store.begin() as uow:
            await self.require_admin(uow, admin_id)
            tx = await uow.transactions.require(tx_id, for_update=True)

            if tx.status == target.value:
                self.logger.info(
                    "Transaction already settled, nothing to do",
                    extra={"tx_id": tx.id, "status": tx.status},
                )
                return tx
            if TransactionStatus(tx.status).is_terminal:
                raise AlreadySettled(
                    f"Transaction {tx.id} is already {tx.status}"
                )

            account = await uow.accounts.get_for_update(tx.account_id)
            if account is None:
                self.logger.warning(
                    "Settling transaction of a deleted account, no balance effect",
                    extra={"tx_id": tx.id, "account_id": tx.account_id},
                )
            elif decision is SettlementDecision.APPROVE and tx.is_deposit:
                self.balance_manager.credit_deposit(account, tx.amount, tx.id)
                await uow.accounts.upsert(account)
                await self.earnings_manager.pay_commission(uow, account, tx.amount)
            elif decision is SettlementDecision.REJECT and tx.is_withdrawal:
                self.balance_manager.refund(account, tx.amount, tx.id)
                await uow.accounts.upsert(account)

            tx.status = target.value
            await uow.transactions.add(tx)

            self.logger.info(
                "Transaction settled",
                extra={
                    "tx_id": tx.id,
                    "account_id": tx.account_id,
                    "kind": tx.kind,
                    "amount": str(tx.amount),
                    "status": tx.status,
                    "admin_id": admin_id,
                },
            )
            return tx
