"""Borrower statement builder.

Turns the platform's rental records into what the borrower owes today.
Every charge comes from the accrual calculator and the fee rules; nothing
here does its own day arithmetic on money.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Iterable, Optional

from ..accrual import calculator
from ..accrual.calculator import (
    Amount,
    Instant,
    InvalidInputError,
    compute_accrual,
    parse_instant,
    parse_rate,
    to_money,
)
from ..accrual.fees import check_grace_period, late_fee
from ..api.client import RentalPlatformClient, RentalRecord
from ..cache import ResponseCache
from ..config import Config, get_config
from .schemas import BorrowerStatement, HoldLine, LineStatus, StatementLine

logger = logging.getLogger(__name__)

HOLD_EXPIRY_WARNING_HOURS = 6


def hold_time_remaining(expiry: Instant, now: Optional[Instant] = None) -> str:
    """Human readable time left on a hold.

    Example:
        >>> hold_time_remaining("2025-01-01T15:20:00Z", now="2025-01-01T12:00:00Z")
        '3h 20m'
    """
    remaining = _remaining(expiry, now)
    if remaining <= timedelta(0):
        return "Expired"

    total_minutes = int(remaining.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def is_hold_expiring_soon(
    expiry: Instant,
    now: Optional[Instant] = None,
    hours: int = HOLD_EXPIRY_WARNING_HOURS,
) -> bool:
    """Check if a hold expires within the given number of hours."""
    remaining = _remaining(expiry, now)
    return timedelta(0) < remaining <= timedelta(hours=hours)


def _remaining(expiry: Instant, now: Optional[Instant]) -> timedelta:
    at = parse_instant(now if now is not None else calculator.clock(), "now")
    return parse_instant(expiry, "expiry") - at


def build_statement(
    rentals: Iterable[RentalRecord],
    now: Optional[Instant] = None,
    default_daily_rate: Amount = "0",
    late_fee_rate: Amount = "0.50",
    grace_period_days: int = 0,
    max_fine: Optional[Amount] = None,
    unreadable: int = 0,
) -> BorrowerStatement:
    """Build a statement for the given rentals at one instant.

    Records without a checkout date are treated as holds. Records whose
    data cannot be used are skipped and counted. Fee settings are checked
    once, before any record.

    Args:
        rentals: Rental records from the platform
        now: Evaluation instant (default: current time)
        default_daily_rate: Rate used when a book has none
        late_fee_rate: Late fee per day
        grace_period_days: Days late that are not charged
        max_fine: Upper bound on a single late fee
        unreadable: Records already dropped because the platform data was malformed

    Returns:
        BorrowerStatement with one line per checked out book

    Raises:
        InvalidInputError: If a rate, grace period or cap setting is invalid
    """
    at = parse_instant(now if now is not None else calculator.clock(), "now")
    fallback_rate = parse_rate(default_daily_rate, "default_daily_rate")
    fee_rate = to_money(parse_rate(late_fee_rate, "late_fee_rate"))
    fine_cap = to_money(parse_rate(max_fine, "max_fine")) if max_fine is not None else None
    check_grace_period(grace_period_days)

    lines: list[StatementLine] = []
    holds: list[HoldLine] = []
    skipped = unreadable

    for record in rentals:
        if record.is_hold:
            if record.hold_expiry is not None and record.hold_expiry > at:
                holds.append(
                    HoldLine(
                        rental_id=record.id,
                        book_title=record.book_title,
                        hold_expiry=record.hold_expiry,
                        time_remaining=hold_time_remaining(record.hold_expiry, at),
                        expiring_soon=is_hold_expiring_soon(record.hold_expiry, at),
                    )
                )
            continue

        if not record.is_active:
            continue

        if record.checkout_at is None:
            logger.warning("Rental %s is active but has no checkout date", record.id)
            skipped += 1
            continue

        rate = record.daily_rate if record.daily_rate is not None else fallback_rate
        try:
            line_rate = to_money(rate)
            accrual = compute_accrual(record.checkout_at, rate, now=at)
            fee = (
                late_fee(record.due_at, at, fee_rate, grace_period_days, fine_cap)
                if record.due_at is not None
                else None
            )
        except InvalidInputError as e:
            logger.warning("Skipping rental %s: %s", record.id, e)
            skipped += 1
            continue

        overdue = (fee is not None and fee.days_late > 0) or record.status == "overdue"
        lines.append(
            StatementLine(
                rental_id=record.id,
                book_title=record.book_title,
                owner_name=record.owner_name,
                checkout_at=record.checkout_at,
                due_at=record.due_at,
                daily_rate=line_rate,
                accrual=accrual,
                status=LineStatus.OVERDUE if overdue else LineStatus.ACTIVE,
                days_overdue=fee.days_late if fee else 0,
                estimated_late_fee=fee.amount if fee else Decimal("0.00"),
            )
        )

    lines.sort(key=lambda line: line.checkout_at)
    holds.sort(key=lambda hold: hold.hold_expiry)

    return BorrowerStatement(
        generated_at=at,
        lines=lines,
        holds=holds,
        total_rent_due=sum((line.accrual.amount_due for line in lines), Decimal("0.00")),
        total_late_fees=sum((line.estimated_late_fee for line in lines), Decimal("0.00")),
        skipped=skipped,
    )


class StatementBuilder:
    """Builds borrower statements from live platform data."""

    def __init__(
        self,
        client: Optional[RentalPlatformClient] = None,
        config: Optional[Config] = None,
    ):
        """Initialize statement builder.

        Args:
            client: Platform client (created from config if not provided)
            config: Configuration (uses global if not provided)
        """
        self.config = config or get_config()
        self.client = client or RentalPlatformClient(
            base_url=self.config.api_url,
            token=self.config.api_token,
            timeout=self.config.api_timeout,
            cache=ResponseCache(self.config.cache_path, ttl=self.config.cache_ttl),
        )

    def build(self, now: Optional[Instant] = None) -> BorrowerStatement:
        """Fetch rentals and build the statement.

        Args:
            now: Evaluation instant (default: current time)

        Returns:
            BorrowerStatement
        """
        rentals = self.client.get_rentals()
        logger.debug(
            "Building statement from %d rental records (%d unreadable)",
            len(rentals),
            self.client.skipped_records,
        )
        return build_statement(
            rentals,
            now=now,
            default_daily_rate=self.config.default_daily_rate,
            late_fee_rate=self.config.late_fee_per_day,
            grace_period_days=self.config.fine_grace_days,
            max_fine=self.config.max_fine,
            unreadable=self.client.skipped_records,
        )
