"""Pydantic schemas for rental accrual results."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class DayCountPolicy(str, Enum):
    """How a partial 24-hour period is counted."""

    CEILING = "ceiling"  # Any started day is a full day
    FLOOR = "floor"  # Only completed days count


class ReturnStatus(str, Enum):
    """Whether a rental came back on time."""

    ON_TIME = "on-time"
    LATE = "late"
    PENDING = "pending"  # Not returned yet


class RentalAccrual(BaseModel):
    """Money owed on a rental at a given instant."""

    days_elapsed: int = Field(..., ge=0)
    amount_due: Decimal = Field(..., ge=0)

    model_config = {"frozen": True}


class LateFee(BaseModel):
    """Late fee for a rental returned (or still out) after its due date."""

    days_late: int = Field(..., ge=0)
    amount: Decimal = Field(..., ge=0)
    capped: bool = False

    model_config = {"frozen": True}


class CostBreakdown(BaseModel):
    """Full cost of a rental, split into its parts."""

    daily_rate: Decimal
    rental_days: int
    base_cost: Decimal
    late_fees: Decimal
    total_cost: Decimal
    days_late: int = 0
    return_status: ReturnStatus
    late_fee_capped: bool = False

    model_config = {"frozen": True}
