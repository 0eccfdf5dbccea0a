"""
Standard type definitions for database models.

Provides consistent types for monetary fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts, balances and income buckets
# Precision: 18 digits total, 2 after decimal point
# Every computed amount is floored to a whole unit before it is stored
MoneyType = DECIMAL(18, 2)
