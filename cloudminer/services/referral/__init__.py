"""
Referral services package.

Contains modular services for the one-level referral graph:
- chain_manager: linking at registration, admin relinking, detaching
- earnings_manager: commission payout on approved deposits
- query_manager: team view queries
"""

from cloudminer.services.referral.chain_manager import (
    ReferralChainManager,
    generate_referral_code,
)
from cloudminer.services.referral.earnings_manager import (
    CommissionResult,
    ReferralEarningsManager,
    calculate_commission,
)
from cloudminer.services.referral.query_manager import (
    ReferralQueryManager,
    ReferralSummary,
)


__all__ = [
    # Managers
    "ReferralChainManager",
    "ReferralEarningsManager",
    "ReferralQueryManager",
    # Results
    "CommissionResult",
    "ReferralSummary",
    # Helpers
    "calculate_commission",
    "generate_referral_code",
]
