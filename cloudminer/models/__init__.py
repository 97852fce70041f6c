"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from cloudminer.models.account import Account
from cloudminer.models.base import Base
from cloudminer.models.enums import (
    Currency,
    SettlementDecision,
    TransactionKind,
    TransactionStatus,
)
from cloudminer.models.session_slot import SESSION_SLOT_ID, SessionSlot
from cloudminer.models.transaction import Transaction

__all__ = [
    # Base
    "Base",
    # Enums
    "Currency",
    "SettlementDecision",
    "TransactionKind",
    "TransactionStatus",
    # Models
    "Account",
    "Transaction",
    "SessionSlot",
    "SESSION_SLOT_ID",
]
