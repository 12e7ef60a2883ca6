"""Rental cost and late fee rules.

Built on the same day counting as the accrual calculator, so a rental that
is one minute late is one day late.
"""

from decimal import Decimal
from typing import Optional

from . import calculator
from .calculator import (
    Amount,
    Instant,
    InvalidInputError,
    days_elapsed,
    parse_instant,
    parse_rate,
    to_money,
)
from .schemas import CostBreakdown, LateFee, ReturnStatus

DEFAULT_LATE_FEE_PER_DAY = Decimal("0.50")


def rental_cost(price_per_day: Amount, start: Instant, end: Instant) -> Decimal:
    """Cost of renting a book from start to end.

    Args:
        price_per_day: Daily rental price
        start: Rental start
        end: Agreed return date

    Returns:
        Cost rounded to cents
    """
    price = parse_rate(price_per_day, "price_per_day")
    return to_money(price * days_elapsed(start, end))


def days_overdue(due: Instant, now: Optional[Instant] = None) -> int:
    """Days past the due date, 0 if not yet due."""
    at = now if now is not None else calculator.clock()
    return days_elapsed(due, at)


def check_grace_period(days: int) -> int:
    """Validate a grace period given in whole days."""
    if isinstance(days, bool) or not isinstance(days, int):
        raise InvalidInputError(f"grace_period_days must be an integer, got {days!r}")
    if days < 0:
        raise InvalidInputError("grace_period_days must not be negative")
    return days


def late_fee(
    due: Instant,
    returned: Optional[Instant] = None,
    rate: Amount = DEFAULT_LATE_FEE_PER_DAY,
    grace_period_days: int = 0,
    max_fine: Optional[Amount] = None,
) -> LateFee:
    """Late fee for a rental returned after its due date.

    Args:
        due: Due date
        returned: Return instant (default: now, for an estimate)
        rate: Late fee per day
        grace_period_days: Days late that are not charged
        max_fine: Upper bound on the fee, if any

    Returns:
        LateFee with the days late and the amount charged

    Raises:
        InvalidInputError: For bad rates, a negative grace period or
            unparseable dates
    """
    fee_rate = parse_rate(rate, "rate")
    check_grace_period(grace_period_days)
    cap = parse_rate(max_fine, "max_fine") if max_fine is not None else None

    days_late = days_overdue(due, returned)
    chargeable = max(0, days_late - grace_period_days)
    amount = to_money(fee_rate * chargeable)

    capped = False
    if cap is not None and amount > cap:
        amount = to_money(cap)
        capped = True

    return LateFee(days_late=days_late, amount=amount, capped=capped)


def cost_breakdown(
    daily_rate: Amount,
    start: Instant,
    due: Instant,
    returned: Optional[Instant] = None,
    now: Optional[Instant] = None,
    late_fee_rate: Amount = DEFAULT_LATE_FEE_PER_DAY,
    grace_period_days: int = 0,
    max_fine: Optional[Amount] = None,
) -> CostBreakdown:
    """Break a rental's cost into base cost and late fees.

    For a returned rental the late fee is final. For one still out it is
    an estimate as of ``now``.
    """
    rate = parse_rate(daily_rate)
    start_at = parse_instant(start, "start")
    due_at = parse_instant(due, "due")
    if due_at < start_at:
        raise InvalidInputError("due must not be before start")

    rental_days = days_elapsed(start_at, due_at)
    base_cost = to_money(rate * rental_days)

    if returned is not None:
        fee = late_fee(due_at, returned, late_fee_rate, grace_period_days, max_fine)
        status = ReturnStatus.LATE if fee.days_late > 0 else ReturnStatus.ON_TIME
    else:
        at = now if now is not None else calculator.clock()
        fee = late_fee(due_at, at, late_fee_rate, grace_period_days, max_fine)
        status = ReturnStatus.PENDING

    return CostBreakdown(
        daily_rate=to_money(rate),
        rental_days=rental_days,
        base_cost=base_cost,
        late_fees=fee.amount,
        total_cost=base_cost + fee.amount,
        days_late=fee.days_late,
        return_status=status,
        late_fee_capped=fee.capped,
    )
