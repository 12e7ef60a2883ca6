"""Rent accrual module.

Provides:
- Days elapsed and amount due on an active rental
- Rental cost for a planned period
- Late fees with optional grace period and cap
- Cost breakdowns for returned and active rentals
"""

from .calculator import (
    InvalidInputError,
    compute_accrual,
    days_elapsed,
    parse_instant,
    parse_rate,
    to_money,
)
from .fees import cost_breakdown, days_overdue, late_fee, rental_cost
from .schemas import (
    CostBreakdown,
    DayCountPolicy,
    LateFee,
    RentalAccrual,
    ReturnStatus,
)

__all__ = [
    "InvalidInputError",
    "compute_accrual",
    "days_elapsed",
    "parse_instant",
    "parse_rate",
    "to_money",
    "cost_breakdown",
    "days_overdue",
    "late_fee",
    "rental_cost",
    "CostBreakdown",
    "DayCountPolicy",
    "LateFee",
    "RentalAccrual",
    "ReturnStatus",
]
