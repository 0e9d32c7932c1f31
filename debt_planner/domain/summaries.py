"""Read-only views derived from a simulated plan (charts, tables, comparisons)"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from debt_planner.domain.models import Debt, PlanResult, PlanSettings, Strategy
from debt_planner.domain.simulator import simulate

MILESTONE_CHECKPOINTS = (
    ("75% Remaining", Decimal("0.75")),
    ("50% Remaining", Decimal("0.50")),
    ("25% Remaining", Decimal("0.25")),
)


@dataclass(frozen=True)
class PayoffEvent:
    """Month in which a debt's balance first reached zero"""

    debt_id: str
    month_index: int
    date: date


@dataclass(frozen=True)
class DebtStats:
    """Per-debt totals across the whole schedule"""

    debt_id: str
    name: str
    payoff_month_index: Optional[int]
    payoff_date: Optional[date]
    interest_paid_cents: int
    principal_paid_cents: int
    total_paid_cents: int


@dataclass(frozen=True)
class Milestone:
    label: str
    month_index: int
    date: date
    remaining_cents: int


@dataclass(frozen=True)
class PlanComparison:
    """How much a plan saves against a baseline (usually minimum-only)"""

    months_plan: Optional[int]
    months_baseline: Optional[int]
    months_saved: Optional[int]
    interest_plan_cents: int
    interest_baseline_cents: int
    interest_saved_cents: int
    debt_free_date_plan: Optional[date]
    debt_free_date_baseline: Optional[date]


@dataclass(frozen=True)
class StrategyComparison:
    snowball: PlanResult
    avalanche: PlanResult
    minimum: PlanResult


def remaining_by_month(plan: PlanResult) -> List[Tuple[int, int]]:
    """Total remaining balance at the end of each month"""
    return [
        (month.month_index, sum(p.ending_balance_cents for p in month.payments))
        for month in plan.months
    ]


def remaining_by_category(plan: PlanResult, debts: Sequence[Debt]) -> List[Dict[str, int]]:
    """Remaining balance per category at the end of each month"""
    categories = {d.id: d.category or "other" for d in debts}
    rows = []
    for month in plan.months:
        row: Dict[str, int] = {}
        for payment in month.payments:
            category = categories.get(payment.debt_id, "other")
            row[category] = row.get(category, 0) + payment.ending_balance_cents
        rows.append(row)
    return rows


def outflow_by_month(plan: PlanResult) -> List[Tuple[int, int]]:
    """Cash actually paid out each month (the growing snowball)"""
    return [(month.month_index, month.totals.outflow_cents) for month in plan.months]


def payoff_order(plan: PlanResult) -> List[PayoffEvent]:
    events = []
    for month in plan.months:
        for payment in month.payments:
            if payment.paid_off:
                events.append(PayoffEvent(payment.debt_id, month.month_index, month.date))
    # Months are already in order, but keep it explicit for callers
    return sorted(events, key=lambda e: e.month_index)


def debt_stats(plan: PlanResult, debts: Sequence[Debt]) -> List[DebtStats]:
    """Totals per included debt, in input order"""
    payoffs = {e.debt_id: e for e in payoff_order(plan)}
    interest: Dict[str, int] = {}
    paid: Dict[str, int] = {}
    for month in plan.months:
        for payment in month.payments:
            interest[payment.debt_id] = interest.get(payment.debt_id, 0) + payment.interest_accrued_cents
            paid[payment.debt_id] = paid.get(payment.debt_id, 0) + payment.total_paid_cents

    stats = []
    for debt in debts:
        if not debt.include:
            continue
        event = payoffs.get(debt.id)
        debt_interest = interest.get(debt.id, 0)
        debt_paid = paid.get(debt.id, 0)
        stats.append(
            DebtStats(
                debt_id=debt.id,
                name=debt.name,
                payoff_month_index=event.month_index if event else None,
                payoff_date=event.date if event else None,
                interest_paid_cents=debt_interest,
                principal_paid_cents=debt_paid - debt_interest,
                total_paid_cents=debt_paid,
            )
        )
    return stats


def milestones(plan: PlanResult) -> List[Milestone]:
    """
    Progress markers for the payoff timeline.

    The percentage checkpoints are measured against the balance owed before
    the first month, not the first month's ending balance.
    """
    if not plan.months:
        return []

    remaining = remaining_by_month(plan)
    initial_total = sum(p.starting_balance_cents for p in plan.months[0].payments)
    out = []

    first_payoff = next(iter(payoff_order(plan)), None)
    if first_payoff is not None:
        out.append(
            Milestone(
                "First Debt Paid",
                first_payoff.month_index,
                first_payoff.date,
                remaining[first_payoff.month_index][1],
            )
        )

    for label, fraction in MILESTONE_CHECKPOINTS:
        target = initial_total * fraction
        hit = next(((i, cents) for i, cents in remaining if cents <= target), None)
        if hit is None:
            continue
        month_index, cents = hit
        out.append(Milestone(label, month_index, plan.months[month_index].date, cents))

    if not plan.horizon_exceeded:
        final = plan.months[-1]
        out.append(Milestone("Debt-Free", final.month_index, final.date, 0))

    return sorted(out, key=lambda m: m.month_index)


def compare_plans(plan: PlanResult, baseline: PlanResult) -> PlanComparison:
    months_plan = plan.totals.months_to_debt_free
    months_baseline = baseline.totals.months_to_debt_free
    if months_plan is None or months_baseline is None:
        months_saved = None
    else:
        months_saved = months_baseline - months_plan

    return PlanComparison(
        months_plan=months_plan,
        months_baseline=months_baseline,
        months_saved=months_saved,
        interest_plan_cents=plan.totals.interest_cents,
        interest_baseline_cents=baseline.totals.interest_cents,
        interest_saved_cents=baseline.totals.interest_cents - plan.totals.interest_cents,
        debt_free_date_plan=plan.debt_free_date,
        debt_free_date_baseline=baseline.debt_free_date,
    )


def compare_strategies(debts: Sequence[Debt], settings: PlanSettings) -> StrategyComparison:
    """Run the same inputs under every strategy"""
    # Pin the start date so all three runs share one calendar
    settings = replace(settings, start_date=settings.start_date or date.today())
    return StrategyComparison(
        snowball=simulate(debts, replace(settings, strategy=Strategy.SNOWBALL)),
        avalanche=simulate(debts, replace(settings, strategy=Strategy.AVALANCHE)),
        minimum=simulate(debts, replace(settings, strategy=Strategy.MINIMUM)),
    )
