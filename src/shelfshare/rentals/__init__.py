"""Rental accrual, fees and borrower statements.

Provides functionality for:
- Rent accrued on checked out books
- Late fees and rental cost breakdowns
- Borrower statements built from the platform's REST API
- A local response cache with fixed expiry
"""

from .accrual import InvalidInputError, RentalAccrual, compute_accrual

__all__ = [
    "InvalidInputError",
    "RentalAccrual",
    "compute_accrual",
]
