"""Rent accrual calculation.

Every charge shown to a borrower goes through this module: the number of
days a rental has been out and what that costs at the book's daily rate.

Day counting uses the ceiling policy: a rental that has been out for any
part of a 24-hour period pays for the whole period. Checkout at 00:00 and
evaluation at 12:00 two days later is three days.
"""

import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, Optional, Union

from .schemas import DayCountPolicy, RentalAccrual

Instant = Union[datetime, str, int, float]
Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
_DAY_MICROSECONDS = 24 * 60 * 60 * 1_000_000


class InvalidInputError(ValueError):
    """Raised when a rate or timestamp cannot be used in a calculation."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Replaced in tests to freeze time
clock: Callable[[], datetime] = _utcnow


def to_money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents, half up.

    Raises:
        InvalidInputError: If the amount has too many digits to hold in cents
    """
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInputError(f"Amount too large to charge: {value}")


def parse_rate(value: Amount, name: str = "daily_rate") -> Decimal:
    """Convert a per-day rate to a non-negative finite Decimal.

    Args:
        value: Rate as Decimal, int, float or numeric string
        name: Field name used in error messages

    Returns:
        The rate as a Decimal

    Raises:
        InvalidInputError: If the rate is negative, non-finite or not a number
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{name} must be a number, got {value!r}")

    try:
        if isinstance(value, float):
            # str() keeps 0.1 as 0.1 instead of its binary expansion
            rate = Decimal(str(value))
        elif isinstance(value, (Decimal, int)):
            rate = Decimal(value)
        elif isinstance(value, str):
            rate = Decimal(value.strip())
        else:
            raise InvalidInputError(f"{name} must be a number, got {value!r}")
    except InvalidOperation:
        raise InvalidInputError(f"{name} is not a number: {value!r}")

    if not rate.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if rate < 0:
        raise InvalidInputError(f"{name} must not be negative, got {value!r}")

    return rate


def parse_instant(value: Instant, name: str = "timestamp") -> datetime:
    """Convert a timestamp to an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), ISO-8601 strings
    including a trailing ``Z``, and POSIX epoch seconds.

    Raises:
        InvalidInputError: If the value cannot be read as an instant
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{name} is not a valid instant: {value!r}")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} must be finite, got {value!r}")
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise InvalidInputError(f"{name} is out of range: {value!r}")
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidInputError(f"{name} is not a valid instant: {value!r}")
    else:
        raise InvalidInputError(f"{name} is not a valid instant: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_elapsed(
    start: Instant,
    end: Instant,
    policy: DayCountPolicy = DayCountPolicy.CEILING,
) -> int:
    """Count 24-hour periods from start to end.

    Returns 0 when end is at or before start.

    Args:
        start: Beginning of the period
        end: End of the period
        policy: Counting policy for a partial day

    Returns:
        Non-negative number of days
    """
    start_at = parse_instant(start, "start")
    end_at = parse_instant(end, "end")

    delta = end_at - start_at
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    if micros <= 0:
        return 0

    whole, remainder = divmod(micros, _DAY_MICROSECONDS)
    if policy == DayCountPolicy.CEILING and remainder:
        return whole + 1
    return whole


def compute_accrual(
    checkout_timestamp: Instant,
    daily_rate: Amount,
    now: Optional[Instant] = None,
    policy: DayCountPolicy = DayCountPolicy.CEILING,
) -> RentalAccrual:
    """Compute the days elapsed and amount due on a rental.

    Args:
        checkout_timestamp: When the rental began
        daily_rate: Charge per full or partial day
        now: Evaluation instant (default: current time)
        policy: Day counting policy

    Returns:
        RentalAccrual with days_elapsed and amount_due

    Raises:
        InvalidInputError: For a negative or non-finite rate, or a
            timestamp that cannot be parsed

    Example:
        >>> compute_accrual("2025-01-01T00:00:00Z", 10, now="2025-01-03T12:00:00Z")
        RentalAccrual(days_elapsed=3, amount_due=Decimal('30.00'))
    """
    rate = parse_rate(daily_rate)
    checkout = parse_instant(checkout_timestamp, "checkout_timestamp")
    at = parse_instant(now, "now") if now is not None else clock()

    days = days_elapsed(checkout, at, policy)
    amount = to_money(rate * days)

    return RentalAccrual(days_elapsed=days, amount_due=max(amount, Decimal("0.00")))
