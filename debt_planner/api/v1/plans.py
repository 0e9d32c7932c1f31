"""Saved plans: /v1/plans CRUD and cached snapshots

Only the inputs (debts + settings) are canonical. Every read re-simulates;
snapshots are cached views kept for history and sharing.
"""

import uuid
import logging
from dataclasses import replace
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from debt_planner.api.v1.schemas import (
    CreatePlanRequest,
    DebtSchema,
    PlanListItem,
    PlanListResponse,
    PlanResponse,
    PlanResultSchema,
    SnapshotResponse,
)
from debt_planner.api.v1.simulate import run_simulation, to_domain_inputs
from debt_planner.api.dependencies import get_request_id
from debt_planner.infrastructure.database.session import get_db
from debt_planner.infrastructure.database.repositories import PlanRepository
from debt_planner.infrastructure.database.models import DebtPlanRecord
from debt_planner.infrastructure.observability.metrics import record_snapshot_check
from debt_planner.domain.exceptions import SnapshotVersionError
from debt_planner.domain.migrations import CURRENT_SNAPSHOT_VERSION, migrate_snapshot

router = APIRouter()


def _parse_plan_id(plan_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(plan_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid plan ID format")


def _load_plan(plan_repo: PlanRepository, plan_id: str) -> DebtPlanRecord:
    plan = plan_repo.get_plan_by_id(_parse_plan_id(plan_id))
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


def _resimulate(db_plan: DebtPlanRecord, request_id: str) -> PlanResultSchema:
    debts, plan_settings = PlanRepository.to_domain(db_plan)
    plan = run_simulation(debts, plan_settings, request_id)
    return PlanResultSchema.model_validate(plan)


@router.post("/plans", response_model=PlanResponse, status_code=201)
def create_plan(
    request_body: CreatePlanRequest,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """
    Store debts + settings and return the simulated plan.

    Flow:
    1. Resolve the start date so reloads reproduce the same calendar
    2. Simulate (rejects invalid input before anything is written)
    3. Persist the inputs
    """
    debts, plan_settings = to_domain_inputs(request_body)
    if plan_settings.start_date is None:
        plan_settings = replace(plan_settings, start_date=date.today())

    plan = run_simulation(debts, plan_settings, request_id)

    try:
        plan_repo = PlanRepository(db)
        db_plan = plan_repo.create_plan(
            user_id=request_body.user_id,
            debts=debts,
            plan_settings=plan_settings,
            name=request_body.name,
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to store plan: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return PlanResponse(
        plan_id=str(db_plan.id),
        user_id=db_plan.user_id,
        name=db_plan.name,
        debts=[DebtSchema.model_validate(d) for d in debts],
        result=PlanResultSchema.model_validate(plan),
        created_at=db_plan.created_at.isoformat(),
    )


@router.get("/plans", response_model=PlanListResponse)
def list_plans(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Recent saved plans for a user (inputs only, no schedules)"""
    plan_repo = PlanRepository(db)
    plans = plan_repo.get_plans_by_user(user_id, limit=20)

    items = [
        PlanListItem(
            plan_id=str(p.id),
            name=p.name,
            strategy=p.strategy,
            start_date=p.start_date,
            created_at=p.created_at.isoformat(),
        )
        for p in plans
    ]

    return PlanListResponse(user_id=user_id, plans=items)


@router.get("/plans/{plan_id}", response_model=PlanResponse)
def get_plan(plan_id: str, db: Session = Depends(get_db), request_id: str = Depends(get_request_id)):
    """Reload stored inputs and re-simulate them"""
    db_plan = _load_plan(PlanRepository(db), plan_id)
    debts, _ = PlanRepository.to_domain(db_plan)

    return PlanResponse(
        plan_id=str(db_plan.id),
        user_id=db_plan.user_id,
        name=db_plan.name,
        debts=[DebtSchema.model_validate(d) for d in debts],
        result=_resimulate(db_plan, request_id),
        created_at=db_plan.created_at.isoformat(),
    )


@router.post("/plans/{plan_id}/snapshots", response_model=SnapshotResponse, status_code=201)
def create_snapshot(plan_id: str, db: Session = Depends(get_db), request_id: str = Depends(get_request_id)):
    """Persist the current simulation of a plan as a cached snapshot"""
    plan_repo = PlanRepository(db)
    db_plan = _load_plan(plan_repo, plan_id)
    result = _resimulate(db_plan, request_id)

    payload = {"version": CURRENT_SNAPSHOT_VERSION, "plan": result.model_dump(mode="json")}
    try:
        snapshot = plan_repo.save_snapshot(db_plan.id, CURRENT_SNAPSHOT_VERSION, payload)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to store snapshot for plan {db_plan.id}: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(f"Stored snapshot {snapshot.id} for plan {db_plan.id}", extra={"request_id": request_id})

    return SnapshotResponse(
        snapshot_id=snapshot.id,
        plan_id=str(db_plan.id),
        version=CURRENT_SNAPSHOT_VERSION,
        stored_version=snapshot.version,
        plan=result,
        matches_current=True,
        created_at=snapshot.created_at.isoformat(),
    )


@router.get("/plans/{plan_id}/snapshots/latest", response_model=SnapshotResponse)
def get_latest_snapshot(plan_id: str, db: Session = Depends(get_db), request_id: str = Depends(get_request_id)):
    """
    Return the newest snapshot, upgraded to the current version.

    ``matches_current`` tells whether re-simulating the stored inputs still
    reproduces the snapshot exactly.
    """
    plan_repo = PlanRepository(db)
    db_plan = _load_plan(plan_repo, plan_id)
    snapshot = plan_repo.get_latest_snapshot(db_plan.id)
    if not snapshot:
        raise HTTPException(status_code=404, detail="No snapshot stored for this plan")

    try:
        payload = migrate_snapshot(snapshot.payload)
        stored = PlanResultSchema.model_validate(payload.get("plan"))
    except (SnapshotVersionError, ValidationError) as e:
        logging.error(f"Unreadable snapshot: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=f"Snapshot {snapshot.id} is unreadable: {e}")

    current = _resimulate(db_plan, request_id)
    matches = stored.model_dump(mode="json") == current.model_dump(mode="json")
    record_snapshot_check(matches)

    return SnapshotResponse(
        snapshot_id=snapshot.id,
        plan_id=str(db_plan.id),
        version=CURRENT_SNAPSHOT_VERSION,
        stored_version=snapshot.version,
        plan=stored,
        matches_current=matches,
        created_at=snapshot.created_at.isoformat(),
    )
