"""
Standard type definitions for database models.

Provides consistent types for monetary fields across all models.
"""

from sqlalchemy import DECIMAL

# Ledger amounts in currency units
# Precision: 18 digits total, 8 after decimal point
MoneyType = DECIMAL(18, 8)

# Raw on-chain amounts are stored as decimal strings instead,
# uint256 does not fit any SQL numeric type reliably.
BASE_UNIT_STRING_LENGTH = 78
