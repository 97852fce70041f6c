"""
Business logic constants for CloudMiner.

Central location for business rules used across the ledger services.
"""

from datetime import timedelta
from decimal import Decimal


# One-level referral program: 5% of every approved deposit
REFERRAL_COMMISSION_RATE = Decimal("0.05")

# Yield can be collected once per window
YIELD_COOLDOWN = timedelta(hours=24)

# Free tier payout, in secondary currency, per collection
FREE_YIELD_RATE = Decimal("0.0000000001")

# Referral codes: 6 characters from this alphabet
REFERRAL_CODE_LENGTH = 6
REFERRAL_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# Account ids: "uid" + 4 digits
ACCOUNT_ID_PREFIX = "uid"
ACCOUNT_ID_MIN = 1000
ACCOUNT_ID_MAX = 9999

# Symbol used to value the secondary balance
SECONDARY_PRICE_SYMBOL = "BTC"

# Leaderboard size
LEADERBOARD_SIZE = 10
