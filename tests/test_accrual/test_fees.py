"""Tests for rental cost and late fee rules."""

from decimal import Decimal

import pytest

from shelfshare.rentals.accrual.calculator import InvalidInputError
from shelfshare.rentals.accrual.fees import (
    cost_breakdown,
    days_overdue,
    late_fee,
    rental_cost,
)
from shelfshare.rentals.accrual.schemas import ReturnStatus


class TestRentalCost:
    """Tests for rental_cost."""

    def test_whole_week(self):
        """Test a seven day rental."""
        assert rental_cost(5, "2025-01-01", "2025-01-08") == Decimal("35.00")

    def test_partial_day_rounds_up(self):
        """Test 47 hours is charged as two days."""
        cost = rental_cost(5, "2025-01-01T10:00:00Z", "2025-01-03T09:00:00Z")

        assert cost == Decimal("10.00")

    def test_end_before_start_is_free(self):
        """Test a reversed period costs nothing."""
        assert rental_cost(5, "2025-01-08", "2025-01-01") == Decimal("0.00")

    def test_negative_price_rejected(self):
        """Test a negative price raises."""
        with pytest.raises(InvalidInputError, match="price_per_day"):
            rental_cost(-1, "2025-01-01", "2025-01-08")


class TestDaysOverdue:
    """Tests for days_overdue."""

    def test_not_yet_due(self):
        """Test a rental before its due date is not overdue."""
        assert days_overdue("2025-01-08", now="2025-01-07T23:59:00Z") == 0

    def test_exactly_at_due(self):
        """Test the due instant itself is not overdue."""
        assert days_overdue("2025-01-08", now="2025-01-08T00:00:00Z") == 0

    def test_one_minute_late_is_one_day(self):
        """Test any lateness counts as a day."""
        assert days_overdue("2025-01-08", now="2025-01-08T00:01:00Z") == 1

    def test_defaults_to_clock(self, frozen_clock):
        """Test now defaults to the module clock."""
        # Frozen at 2025-01-10 12:00 UTC
        assert days_overdue("2025-01-08") == 3


class TestLateFee:
    """Tests for late_fee."""

    def test_on_time(self):
        """Test no fee when returned on time."""
        fee = late_fee("2025-01-08", "2025-01-07")

        assert fee.days_late == 0
        assert fee.amount == Decimal("0.00")
        assert fee.capped is False

    def test_default_rate(self):
        """Test the default rate is 0.50 per day."""
        fee = late_fee("2025-01-08", "2025-01-11")

        assert fee.days_late == 3
        assert fee.amount == Decimal("1.50")

    def test_custom_rate(self):
        """Test a custom rate."""
        fee = late_fee("2025-01-08", "2025-01-10", rate="2")

        assert fee.amount == Decimal("4.00")

    def test_grace_period(self):
        """Test grace days are not charged."""
        fee = late_fee("2025-01-08", "2025-01-11", rate=1, grace_period_days=1)

        assert fee.days_late == 3
        assert fee.amount == Decimal("2.00")

    def test_grace_period_covers_lateness(self):
        """Test lateness within the grace period is free."""
        fee = late_fee("2025-01-08", "2025-01-08T12:00:00Z", rate=1, grace_period_days=1)

        assert fee.days_late == 1
        assert fee.amount == Decimal("0.00")

    def test_max_fine_caps_amount(self):
        """Test the fee is capped."""
        fee = late_fee("2025-01-01", "2025-03-01", rate=1, max_fine=50)

        assert fee.days_late == 59
        assert fee.amount == Decimal("50.00")
        assert fee.capped is True

    def test_below_cap_not_capped(self):
        """Test a fee under the cap is unchanged."""
        fee = late_fee("2025-01-01", "2025-01-03", rate=1, max_fine=50)

        assert fee.amount == Decimal("2.00")
        assert fee.capped is False

    def test_negative_grace_rejected(self):
        """Test a negative grace period raises."""
        with pytest.raises(InvalidInputError):
            late_fee("2025-01-08", "2025-01-10", grace_period_days=-1)

    def test_negative_max_fine_rejected(self):
        """Test a negative cap raises."""
        with pytest.raises(InvalidInputError, match="max_fine"):
            late_fee("2025-01-08", "2025-01-10", max_fine=-5)

    def test_estimate_uses_clock(self, frozen_clock):
        """Test an unreturned rental is estimated as of now."""
        fee = late_fee("2025-01-08")

        assert fee.days_late == 3
        assert fee.amount == Decimal("1.50")


class TestCostBreakdown:
    """Tests for cost_breakdown."""

    def test_returned_late(self):
        """Test a late return adds late fees to the base cost."""
        breakdown = cost_breakdown(
            2, "2025-01-01", "2025-01-08", returned="2025-01-10"
        )

        assert breakdown.daily_rate == Decimal("2.00")
        assert breakdown.rental_days == 7
        assert breakdown.base_cost == Decimal("14.00")
        assert breakdown.days_late == 2
        assert breakdown.late_fees == Decimal("1.00")
        assert breakdown.total_cost == Decimal("15.00")
        assert breakdown.return_status == ReturnStatus.LATE

    def test_returned_on_time(self):
        """Test an on-time return has no late fees."""
        breakdown = cost_breakdown(
            2, "2025-01-01", "2025-01-08", returned="2025-01-07"
        )

        assert breakdown.late_fees == Decimal("0.00")
        assert breakdown.total_cost == Decimal("14.00")
        assert breakdown.return_status == ReturnStatus.ON_TIME
        assert breakdown.late_fee_capped is False

    def test_pending_estimate(self):
        """Test an active rental estimates late fees as of now."""
        breakdown = cost_breakdown(
            2, "2025-01-01", "2025-01-08", now="2025-01-09T12:00:00Z"
        )

        assert breakdown.days_late == 2
        assert breakdown.late_fees == Decimal("1.00")
        assert breakdown.return_status == ReturnStatus.PENDING

    def test_capped_flag(self):
        """Test the breakdown reports a capped late fee."""
        breakdown = cost_breakdown(
            1,
            "2025-01-01",
            "2025-01-02",
            returned="2025-02-01",
            late_fee_rate=1,
            max_fine=10,
        )

        assert breakdown.late_fees == Decimal("10.00")
        assert breakdown.late_fee_capped is True

    def test_due_before_start_rejected(self):
        """Test an impossible rental period raises."""
        with pytest.raises(InvalidInputError):
            cost_breakdown(2, "2025-01-08", "2025-01-01")
