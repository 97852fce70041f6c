"""
Standard type definitions for database models.

Provides consistent types for monetary fields across all models.
"""

from decimal import Decimal

from sqlalchemy import DECIMAL

# Primary (stable-unit) money type for balances, deposits and withdrawals
# Precision: 18 digits total, 8 after decimal point
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Secondary (crypto-unit) money type
# Precision: 36 digits total, 18 after decimal point
# Needed for the free tier payout of 0.0000000001 per collection
CryptoMoneyType = DECIMAL(36, 18)

# Digits after the decimal point and exclusive upper bound of each column
MONEY_SCALE = 8
MONEY_LIMIT = Decimal(10) ** (18 - MONEY_SCALE)
CRYPTO_MONEY_SCALE = 18
CRYPTO_MONEY_LIMIT = Decimal(10) ** (36 - CRYPTO_MONEY_SCALE)
