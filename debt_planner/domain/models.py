"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class Strategy(str, Enum):
    """Order in which extra money is thrown at debts"""

    SNOWBALL = "snowball"  # smallest balance first
    AVALANCHE = "avalanche"  # highest APR first
    MINIMUM = "minimum"  # minimums only, baseline for comparisons


@dataclass(frozen=True)
class Debt:
    """A single obligation being paid down"""

    id: str
    name: str
    balance_cents: int
    apr: Decimal  # percent, e.g. Decimal("18.99")
    min_payment_cents: int
    due_day: Optional[int] = None  # informational only
    include: bool = True
    category: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PlanSettings:
    """Parameters for one simulation run"""

    strategy: Strategy = Strategy.SNOWBALL
    extra_monthly_cents: int = 0
    one_time_extra_cents: int = 0  # first month only
    start_date: Optional[date] = None
    max_months: Optional[int] = None
    # Keep the starting outflow constant so minimums of paid-off debts
    # keep flowing into the next debt in later months.
    rollover_freed_minimums: bool = False


@dataclass(frozen=True)
class Payment:
    """One debt's activity within one simulated month"""

    debt_id: str
    starting_balance_cents: int
    interest_accrued_cents: int
    min_applied_cents: int
    extra_applied_cents: int
    total_paid_cents: int
    ending_balance_cents: int
    paid_off: bool

    @property
    def principal_cents(self) -> int:
        """Negative when the payment did not cover the interest"""
        return self.total_paid_cents - self.interest_accrued_cents


@dataclass(frozen=True)
class MonthTotals:
    outflow_cents: int
    interest_cents: int


@dataclass(frozen=True)
class Month:
    """One simulated calendar month"""

    month_index: int
    date: date
    payments: Tuple[Payment, ...]
    totals: MonthTotals


@dataclass(frozen=True)
class PlanTotals:
    """Aggregates over the whole schedule"""

    interest_cents: int = 0
    total_paid_cents: int = 0
    outflow_monthly_cents: int = 0
    one_time_applied_cents: int = 0
    months_to_debt_free: Optional[int] = 0  # None when the horizon was hit


@dataclass(frozen=True)
class PlanResult:
    """Output of the simulator, never mutated after construction"""

    strategy: Strategy
    start_date: date
    settings: PlanSettings
    months: Tuple[Month, ...] = ()
    totals: PlanTotals = field(default_factory=PlanTotals)
    horizon_exceeded: bool = False

    @property
    def debt_free_date(self) -> Optional[date]:
        if self.horizon_exceeded or not self.months:
            return None
        return self.months[-1].date

    @property
    def remaining_balance_cents(self) -> int:
        if not self.months:
            return 0
        return sum(p.ending_balance_cents for p in self.months[-1].payments)
