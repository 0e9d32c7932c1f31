"""Versioned upgrades for persisted plan snapshots

Snapshots are cached views of a simulated plan. Version 1 is the legacy
shape written by older clients: dollar floats and the ``paid`` / ``interest``
/ ``principal`` / ``balanceEnd`` payment fields. Version 2 is the canonical
shape (integer cents, one field name per concept) produced by
``PlanResultSchema``.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict

from debt_planner.domain.exceptions import SnapshotVersionError
from debt_planner.utils.date_utils import add_months
from debt_planner.utils.money import dollars_to_cents

CURRENT_SNAPSHOT_VERSION = 2


def _cents(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, float):
        value = repr(value)
    try:
        return dollars_to_cents(Decimal(value))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise SnapshotVersionError(f"Legacy snapshot has an unreadable amount {value!r}") from e


def _legacy_start_date(payload: Dict[str, Any]) -> date:
    raw = payload.get("startDateISO")
    if not raw:
        months = payload.get("months") or []
        raw = months[0].get("dateISO") if months else None
    if not raw:
        raise SnapshotVersionError("Legacy snapshot has no start date")
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError as e:
        raise SnapshotVersionError(f"Legacy snapshot has an unreadable start date {raw!r}") from e


def _upgrade_v1_to_v2(payload: Dict[str, Any]) -> Dict[str, Any]:
    start_date = _legacy_start_date(payload)
    legacy_settings = payload.get("settings") or {}
    strategy = payload.get("strategy") or legacy_settings.get("strategy") or "snowball"

    months = []
    for index, legacy_month in enumerate(payload.get("months") or []):
        payments = []
        for p in legacy_month.get("payments") or []:
            paid = _cents(p.get("paid", p.get("totalPaid")))
            interest = _cents(p.get("interest", p.get("interestAccrued")))
            ending = _cents(p.get("balanceEnd", p.get("endingBalance")))
            starting = ending + paid - interest
            # Old minimum-only runs listed closed debts with all-zero rows
            if starting <= 0:
                continue
            payments.append(
                {
                    "debt_id": str(p.get("debtId")),
                    "starting_balance_cents": starting,
                    "interest_accrued_cents": interest,
                    # The legacy shape never split minimum from extra
                    "min_applied_cents": paid,
                    "extra_applied_cents": 0,
                    "total_paid_cents": paid,
                    "ending_balance_cents": ending,
                    "paid_off": ending == 0,
                }
            )
        month_index = legacy_month.get("monthIndex", index)
        month_date = legacy_month.get("dateISO")
        months.append(
            {
                "month_index": month_index,
                "date": str(month_date)[:10] if month_date else add_months(start_date, month_index).isoformat(),
                "payments": payments,
                "totals": {
                    "outflow_cents": sum(p["total_paid_cents"] for p in payments),
                    "interest_cents": sum(p["interest_accrued_cents"] for p in payments),
                },
            }
        )

    remaining = sum(p["ending_balance_cents"] for p in months[-1]["payments"]) if months else 0
    horizon_exceeded = remaining > 0
    summary = payload.get("summary") or {}

    return {
        "version": 2,
        "plan": {
            "strategy": strategy,
            "start_date": start_date.isoformat(),
            "settings": {
                "strategy": strategy,
                "extra_monthly_cents": _cents(legacy_settings.get("extraMonthly")),
                "one_time_extra_cents": _cents(legacy_settings.get("oneTimeExtra")),
                "start_date": start_date.isoformat(),
                "max_months": legacy_settings.get("maxMonths"),
                "rollover_freed_minimums": False,
            },
            "months": months,
            "totals": {
                "interest_cents": sum(m["totals"]["interest_cents"] for m in months),
                "total_paid_cents": sum(m["totals"]["outflow_cents"] for m in months),
                "outflow_monthly_cents": _cents(summary.get("initialOutflow")),
                "one_time_applied_cents": _cents(legacy_settings.get("oneTimeExtra")),
                "months_to_debt_free": None if horizon_exceeded else len(months),
            },
            "horizon_exceeded": horizon_exceeded,
            "debt_free_date": None if horizon_exceeded or not months else months[-1]["date"],
        },
    }


UPGRADES: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    1: _upgrade_v1_to_v2,
}


def snapshot_version(payload: Dict[str, Any]) -> int:
    """Unversioned payloads predate versioning and are treated as version 1"""
    version = payload.get("version", 1)
    try:
        return int(version)
    except (TypeError, ValueError) as e:
        raise SnapshotVersionError(f"Snapshot version {version!r} is not a number") from e


def migrate_snapshot(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Upgrade a stored snapshot to the current version, one step at a time.

    Raises:
        SnapshotVersionError: version is newer than this code or has no upgrade path
    """
    version = snapshot_version(payload)
    if version > CURRENT_SNAPSHOT_VERSION:
        raise SnapshotVersionError(f"Snapshot version {version} is newer than supported {CURRENT_SNAPSHOT_VERSION}")

    while version < CURRENT_SNAPSHOT_VERSION:
        upgrade = UPGRADES.get(version)
        if upgrade is None:
            raise SnapshotVersionError(f"No upgrade path from snapshot version {version}")
        payload = upgrade(payload)
        version = snapshot_version(payload)

    return payload
