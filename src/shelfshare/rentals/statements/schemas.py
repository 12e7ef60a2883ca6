"""Pydantic schemas for borrower statements."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ..accrual.schemas import RentalAccrual


class LineStatus(str, Enum):
    """Status of a checked out book."""

    ACTIVE = "active"
    OVERDUE = "overdue"


class StatementLine(BaseModel):
    """One checked out book on a borrower statement."""

    rental_id: str
    book_title: str
    owner_name: Optional[str] = None
    checkout_at: datetime
    due_at: Optional[datetime] = None
    daily_rate: Decimal
    accrual: RentalAccrual
    status: LineStatus
    days_overdue: int = 0
    estimated_late_fee: Decimal = Decimal("0.00")

    @property
    def total_due(self) -> Decimal:
        """Rent accrued plus estimated late fee."""
        return self.accrual.amount_due + self.estimated_late_fee


class HoldLine(BaseModel):
    """A live hold on a book."""

    rental_id: str
    book_title: str
    hold_expiry: datetime
    time_remaining: str
    expiring_soon: bool


class BorrowerStatement(BaseModel):
    """What a borrower owes across all checked out books."""

    generated_at: datetime
    lines: list[StatementLine]
    holds: list[HoldLine] = []
    total_rent_due: Decimal
    total_late_fees: Decimal
    skipped: int = 0

    @property
    def grand_total(self) -> Decimal:
        """Rent plus late fees."""
        return self.total_rent_due + self.total_late_fees

    @property
    def overdue_count(self) -> int:
        """Number of overdue books."""
        return sum(1 for line in self.lines if line.status == LineStatus.OVERDUE)
