"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from cloudminer.services.base_service import BaseService, log_operation
from cloudminer.services.unit_of_work import AdminIdentity, LedgerStore, UnitOfWork

# Core Services
from cloudminer.services.account_service import AccountService
from cloudminer.services.admin_service import AdminService
from cloudminer.services.auth import AuthProvider, BcryptAuthProvider

# Referral Services
from cloudminer.services.referral import (
    ReferralChainManager,
    ReferralEarningsManager,
    ReferralQueryManager,
)

# Market Services
from cloudminer.services.price_service import (
    CoinGeckoPriceSource,
    FallbackPriceSource,
    PriceQuote,
)
from cloudminer.services.swap_service import SwapService
from cloudminer.services.transaction import TransactionLedger
from cloudminer.services.yield_engine import YieldEngine


__all__ = [
    # Infrastructure
    "AdminIdentity",
    "BaseService",
    "LedgerStore",
    "UnitOfWork",
    "log_operation",
    # Core
    "AccountService",
    "AdminService",
    "AuthProvider",
    "BcryptAuthProvider",
    "TransactionLedger",
    "YieldEngine",
    # Referral
    "ReferralChainManager",
    "ReferralEarningsManager",
    "ReferralQueryManager",
    # Market
    "CoinGeckoPriceSource",
    "FallbackPriceSource",
    "PriceQuote",
    "SwapService",
]
