"""
Transaction ledger package.

This package provides the deposit/withdrawal workflow:
- balance_manager: escrow, refund and deposit credit
- request_handler: creation of pending requests
- lifecycle_handler: approval and rejection
- query_service: history queries
- ledger: facade combining the above
"""

from cloudminer.services.transaction.balance_manager import LedgerBalanceManager
from cloudminer.services.transaction.ledger import TransactionLedger
from cloudminer.services.transaction.lifecycle_handler import (
    TransactionLifecycleHandler,
)
from cloudminer.services.transaction.query_service import TransactionQueryService
from cloudminer.services.transaction.request_handler import (
    TransactionRequestHandler,
)


__all__ = [
    "LedgerBalanceManager",
    "TransactionLedger",
    "TransactionLifecycleHandler",
    "TransactionQueryService",
    "TransactionRequestHandler",
]
