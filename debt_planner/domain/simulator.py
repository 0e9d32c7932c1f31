"""Debt payoff simulation engine - month-by-month amortization with rollover"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Sequence

from debt_planner.domain.exceptions import InvalidInputError
from debt_planner.domain.models import (
    Debt,
    Month,
    MonthTotals,
    Payment,
    PlanResult,
    PlanSettings,
    PlanTotals,
    Strategy,
)
from debt_planner.utils.date_utils import add_months
from debt_planner.utils.money import round_cents

DEFAULT_MAX_MONTHS = 600  # 50 years
MAX_APR = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")


@dataclass
class _Allocation:
    """Working state for one debt within one month"""

    debt: Debt
    starting_balance: int
    interest: int
    owed: int
    min_applied: int = 0
    extra_applied: int = 0


def _is_cents(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_inputs(debts: Sequence[Debt], settings: PlanSettings) -> None:
    """
    Reject inputs that would put negative money into the schedule.

    Policy: always reject, never clamp. Excluded debts are validated too so
    that toggling ``include`` can never turn a bad record into a crash later.
    """
    seen_ids = set()
    for debt in debts:
        label = f"debt {debt.id!r}"
        if not debt.id:
            raise InvalidInputError("Debt id must not be blank")
        if debt.id in seen_ids:
            raise InvalidInputError(f"Duplicate debt id {debt.id!r}")
        seen_ids.add(debt.id)

        if not _is_cents(debt.balance_cents) or not _is_cents(debt.min_payment_cents):
            raise InvalidInputError(f"{label}: balance and minimum payment must be whole cents")
        if isinstance(debt.apr, bool) or not isinstance(debt.apr, (Decimal, int)):
            raise InvalidInputError(f"{label}: APR must be a Decimal percent, got {type(debt.apr).__name__}")
        if debt.balance_cents < 0:
            raise InvalidInputError(f"{label}: balance must be non-negative")
        if debt.min_payment_cents < 0:
            raise InvalidInputError(f"{label}: minimum payment must be non-negative")
        if debt.apr < 0 or debt.apr > MAX_APR:
            raise InvalidInputError(f"{label}: APR must be a percent between 0 and {MAX_APR}")
        if debt.due_day is not None and not 1 <= debt.due_day <= 28:
            raise InvalidInputError(f"{label}: due day must be between 1 and 28")

    if not _is_cents(settings.extra_monthly_cents) or not _is_cents(settings.one_time_extra_cents):
        raise InvalidInputError("Extra payments must be whole cents")
    if settings.extra_monthly_cents < 0:
        raise InvalidInputError("Extra monthly payment must be non-negative")
    if settings.one_time_extra_cents < 0:
        raise InvalidInputError("One-time extra payment must be non-negative")
    if settings.max_months is not None and settings.max_months < 1:
        raise InvalidInputError("max_months must be at least 1")
    try:
        Strategy(settings.strategy)
    except ValueError as e:
        raise InvalidInputError(f"Unknown strategy {settings.strategy!r}") from e


def monthly_interest(balance_cents: int, apr: Decimal) -> int:
    """Simple monthly accrual on the stated APR, rounded to the cent"""
    if balance_cents <= 0 or apr == 0:
        return 0
    return round_cents(Decimal(balance_cents) * apr / Decimal(100) / MONTHS_PER_YEAR)


def order_by_strategy(allocations: List[_Allocation], strategy: Strategy) -> List[_Allocation]:
    """
    Priority order for extra money.

    ``sorted`` is stable, so ties keep the caller's input order - never the
    name or id.
    """
    if strategy is Strategy.SNOWBALL:
        return sorted(allocations, key=lambda a: a.starting_balance)
    if strategy is Strategy.AVALANCHE:
        return sorted(allocations, key=lambda a: -a.debt.apr)
    return list(allocations)


def simulate(debts: Sequence[Debt], settings: PlanSettings) -> PlanResult:
    """
    Build the full payoff schedule for ``debts`` under ``settings``.

    Each month:
    1. Accrue interest on every active debt's starting balance
    2. Pool = active minimums + extra monthly (+ one-time extra in month 0)
    3. Pay every minimum, capped at what the debt owes after interest
    4. Hand the rest of the pool out in strategy order; money left over when
       a debt is cleared rolls into the next debt within the same month

    Stops when every included debt is paid off, or after ``max_months``, in
    which case the result is flagged ``horizon_exceeded`` instead of raising.

    Raises:
        InvalidInputError: a debt or setting is out of range
    """
    validate_inputs(debts, settings)

    start_date = settings.start_date or date.today()
    max_months = settings.max_months or DEFAULT_MAX_MONTHS
    strategy = Strategy(settings.strategy)

    included = [d for d in debts if d.include]
    balances: Dict[str, int] = {d.id: d.balance_cents for d in included}
    starting_active = [d for d in included if d.balance_cents > 0]

    if not starting_active:
        return PlanResult(strategy=strategy, start_date=start_date, settings=settings)

    if strategy is Strategy.MINIMUM:
        extra_monthly = 0
        one_time_extra = 0
    else:
        extra_monthly = settings.extra_monthly_cents
        one_time_extra = settings.one_time_extra_cents

    starting_minimums = sum(d.min_payment_cents for d in starting_active)

    months: List[Month] = []
    total_interest = 0
    total_paid = 0

    for month_index in range(max_months):
        active = [d for d in included if balances[d.id] > 0]
        if not active:
            break

        allocations = []
        for debt in active:
            balance = balances[debt.id]
            interest = monthly_interest(balance, debt.apr)
            allocations.append(
                _Allocation(debt=debt, starting_balance=balance, interest=interest, owed=balance + interest)
            )

        if settings.rollover_freed_minimums and strategy is not Strategy.MINIMUM:
            pool = starting_minimums
        else:
            pool = sum(d.min_payment_cents for d in active)
        pool += extra_monthly
        if month_index == 0:
            pool += one_time_extra

        ordered = order_by_strategy(allocations, strategy)

        # Minimums first; a minimum never overpays what is owed
        for alloc in ordered:
            pay = min(alloc.debt.min_payment_cents, alloc.owed, pool)
            alloc.min_applied = pay
            alloc.owed -= pay
            pool -= pay

        # Whatever is left (including minimums a cleared debt did not need)
        # cascades down the priority list
        if strategy is not Strategy.MINIMUM:
            for alloc in ordered:
                if pool <= 0:
                    break
                pay = min(alloc.owed, pool)
                alloc.extra_applied = pay
                alloc.owed -= pay
                pool -= pay

        payments = []
        for alloc in ordered:
            paid = alloc.min_applied + alloc.extra_applied
            balances[alloc.debt.id] = alloc.owed
            payments.append(
                Payment(
                    debt_id=alloc.debt.id,
                    starting_balance_cents=alloc.starting_balance,
                    interest_accrued_cents=alloc.interest,
                    min_applied_cents=alloc.min_applied,
                    extra_applied_cents=alloc.extra_applied,
                    total_paid_cents=paid,
                    ending_balance_cents=alloc.owed,
                    paid_off=alloc.owed == 0,
                )
            )

        month_interest = sum(p.interest_accrued_cents for p in payments)
        month_outflow = sum(p.total_paid_cents for p in payments)
        total_interest += month_interest
        total_paid += month_outflow

        months.append(
            Month(
                month_index=month_index,
                date=add_months(start_date, month_index),
                payments=tuple(payments),
                totals=MonthTotals(outflow_cents=month_outflow, interest_cents=month_interest),
            )
        )

    horizon_exceeded = any(balance > 0 for balance in balances.values())

    totals = PlanTotals(
        interest_cents=total_interest,
        total_paid_cents=total_paid,
        outflow_monthly_cents=starting_minimums + extra_monthly,
        one_time_applied_cents=one_time_extra,
        months_to_debt_free=None if horizon_exceeded else len(months),
    )

    return PlanResult(
        strategy=strategy,
        start_date=start_date,
        settings=settings,
        months=tuple(months),
        totals=totals,
        horizon_exceeded=horizon_exceeded,
    )
