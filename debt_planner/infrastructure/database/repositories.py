"""Data access layer for saved plans and snapshots"""

import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
from debt_planner.infrastructure.database.models import DebtPlanRecord, PlanDebtRecord, PlanSnapshotRecord
from debt_planner.domain.models import Debt, PlanSettings, Strategy


class PlanRepository:
    """Repository for plan inputs (debts + settings) and their cached snapshots"""

    def __init__(self, db: Session):
        self.db = db

    def create_plan(
        self,
        user_id: str,
        debts: Sequence[Debt],
        plan_settings: PlanSettings,
        name: Optional[str] = None,
    ) -> DebtPlanRecord:
        """Persist raw inputs; ``plan_settings.start_date`` must already be resolved"""
        if plan_settings.start_date is None:
            raise ValueError("start_date must be resolved before a plan is stored")

        db_plan = DebtPlanRecord(
            user_id=user_id,
            name=name,
            strategy=Strategy(plan_settings.strategy).value,
            extra_monthly_cents=plan_settings.extra_monthly_cents,
            one_time_extra_cents=plan_settings.one_time_extra_cents,
            start_date=plan_settings.start_date,
            max_months=plan_settings.max_months,
            rollover_freed_minimums=plan_settings.rollover_freed_minimums,
        )
        self.db.add(db_plan)
        self.db.flush()  # Get ID without committing

        for position, debt in enumerate(debts):
            self.db.add(
                PlanDebtRecord(
                    plan_id=db_plan.id,
                    position=position,
                    debt_id=debt.id,
                    name=debt.name,
                    balance_cents=debt.balance_cents,
                    apr=str(debt.apr),
                    min_payment_cents=debt.min_payment_cents,
                    due_day=debt.due_day,
                    include=debt.include,
                    category=debt.category,
                    notes=debt.notes,
                )
            )
        self.db.flush()

        return db_plan

    def get_plan_by_id(self, plan_id: uuid.UUID) -> Optional[DebtPlanRecord]:
        """Fetch plan with its debts"""
        return (
            self.db.query(DebtPlanRecord)
            .filter(DebtPlanRecord.id == plan_id)
            .first()
        )

    def get_plans_by_user(self, user_id: str, limit: int = 20) -> List[DebtPlanRecord]:
        """Fetch a user's most recent plans"""
        return (
            self.db.query(DebtPlanRecord)
            .filter(DebtPlanRecord.user_id == user_id)
            .order_by(DebtPlanRecord.created_at.desc())
            .limit(limit)
            .all()
        )

    def save_snapshot(self, plan_id: uuid.UUID, version: int, payload: Dict[str, Any]) -> PlanSnapshotRecord:
        """Store a computed plan as a cached view"""
        db_snapshot = PlanSnapshotRecord(plan_id=plan_id, version=version, payload=payload)
        self.db.add(db_snapshot)
        self.db.flush()
        return db_snapshot

    def get_latest_snapshot(self, plan_id: uuid.UUID) -> Optional[PlanSnapshotRecord]:
        return (
            self.db.query(PlanSnapshotRecord)
            .filter(PlanSnapshotRecord.plan_id == plan_id)
            .order_by(PlanSnapshotRecord.id.desc())
            .first()
        )

    @staticmethod
    def to_domain(db_plan: DebtPlanRecord) -> Tuple[List[Debt], PlanSettings]:
        """Rebuild simulator inputs exactly as they were stored"""
        debts = [
            Debt(
                id=d.debt_id,
                name=d.name,
                balance_cents=d.balance_cents,
                apr=Decimal(d.apr),
                min_payment_cents=d.min_payment_cents,
                due_day=d.due_day,
                include=d.include,
                category=d.category,
                notes=d.notes,
            )
            for d in db_plan.debts
        ]
        plan_settings = PlanSettings(
            strategy=Strategy(db_plan.strategy),
            extra_monthly_cents=db_plan.extra_monthly_cents,
            one_time_extra_cents=db_plan.one_time_extra_cents,
            start_date=db_plan.start_date,
            max_months=db_plan.max_months,
            rollover_freed_minimums=db_plan.rollover_freed_minimums,
        )
        return debts, plan_settings
