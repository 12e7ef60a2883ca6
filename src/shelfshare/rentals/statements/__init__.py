"""Borrower statements.

Provides functionality for:
- Rent accrued on each checked out book
- Overdue detection and estimated late fees
- Hold expiry countdowns
"""

from .builder import (
    StatementBuilder,
    build_statement,
    hold_time_remaining,
    is_hold_expiring_soon,
)
from .schemas import BorrowerStatement, HoldLine, LineStatus, StatementLine

__all__ = [
    "StatementBuilder",
    "build_statement",
    "hold_time_remaining",
    "is_hold_expiring_soon",
    "BorrowerStatement",
    "HoldLine",
    "LineStatus",
    "StatementLine",
]
