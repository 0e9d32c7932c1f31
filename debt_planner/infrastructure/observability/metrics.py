"""Prometheus metrics for monitoring simulation outcomes, horizons, and snapshot drift"""

from prometheus_client import Counter, Histogram

from debt_planner.domain.models import PlanResult

# Simulation metrics
simulation_counter = Counter(
    "debt_planner_simulations_total",
    "Total payoff plans simulated",
    ["strategy", "outcome"],  # outcome: paid_off | horizon_exceeded | empty
)

simulated_months_histogram = Histogram(
    "debt_planner_simulated_months",
    "Length of simulated schedules in months",
    buckets=[1, 6, 12, 24, 36, 60, 120, 240, 360, 600, 1200],
)

# Snapshot cache consistency
snapshot_check_counter = Counter(
    "debt_planner_snapshot_total",
    "Stored snapshots compared against a fresh simulation",
    ["result"],  # match | drift
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def simulation_outcome(plan: PlanResult) -> str:
    if plan.horizon_exceeded:
        return "horizon_exceeded"
    if not plan.months:
        return "empty"
    return "paid_off"


def record_simulation(plan: PlanResult) -> None:
    """Record outcome and schedule length for one simulated plan"""
    simulation_counter.labels(strategy=plan.strategy.value, outcome=simulation_outcome(plan)).inc()
    simulated_months_histogram.observe(len(plan.months))


def record_snapshot_check(matches: bool) -> None:
    snapshot_check_counter.labels(result="match" if matches else "drift").inc()
