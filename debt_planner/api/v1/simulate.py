"""POST /v1/simulate and POST /v1/compare - stateless payoff simulation"""

import time
import logging
from dataclasses import replace
from typing import List, Tuple
from fastapi import APIRouter, Depends, HTTPException

from debt_planner.api.v1.schemas import (
    CompareResponse,
    PlanComparisonSchema,
    PlanResultSchema,
    SimulateRequest,
)
from debt_planner.api.dependencies import get_request_id
from debt_planner.config import settings
from debt_planner.domain.exceptions import InvalidInputError
from debt_planner.domain.models import Debt, PlanResult, PlanSettings
from debt_planner.domain.simulator import simulate
from debt_planner.domain.summaries import compare_plans, compare_strategies
from debt_planner.infrastructure.observability.metrics import record_simulation
from debt_planner.infrastructure.observability.logging import log_simulation

router = APIRouter()


def to_domain_inputs(request_body: SimulateRequest) -> Tuple[List[Debt], PlanSettings]:
    """
    Convert a request into simulator inputs, applying service limits.

    Raises:
        HTTPException: 422 when the request exceeds configured limits
    """
    if len(request_body.debts) > settings.max_debts_per_plan:
        raise HTTPException(
            status_code=422,
            detail=f"At most {settings.max_debts_per_plan} debts per plan",
        )

    plan_settings = request_body.settings.to_domain()
    if plan_settings.max_months is None:
        plan_settings = replace(plan_settings, max_months=settings.default_max_months)
    elif plan_settings.max_months > settings.max_months_limit:
        raise HTTPException(
            status_code=422,
            detail=f"max_months may not exceed {settings.max_months_limit}",
        )

    return [d.to_domain() for d in request_body.debts], plan_settings


def run_simulation(debts: List[Debt], plan_settings: PlanSettings, request_id: str) -> PlanResult:
    """Simulate and record metrics/logs; invalid input becomes a 422"""
    start_time = time.time()
    try:
        plan = simulate(debts, plan_settings)
    except InvalidInputError as e:
        logging.warning(f"Invalid plan input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_simulation(plan)
    log_simulation(
        request_id,
        plan.strategy.value,
        len(debts),
        len(plan.months),
        plan.horizon_exceeded,
        duration_ms,
    )
    return plan


@router.post("/simulate", response_model=PlanResultSchema)
def simulate_plan(request_body: SimulateRequest, request_id: str = Depends(get_request_id)):
    """
    Simulate a payoff schedule without storing anything.

    A plan that does not pay off within ``max_months`` is still returned
    (200) with ``horizon_exceeded`` set.
    """
    debts, plan_settings = to_domain_inputs(request_body)
    plan = run_simulation(debts, plan_settings, request_id)
    return PlanResultSchema.model_validate(plan)


@router.post("/compare", response_model=CompareResponse)
def compare_plan_strategies(request_body: SimulateRequest, request_id: str = Depends(get_request_id)):
    """Run snowball, avalanche and minimum-only on the same debts"""
    debts, plan_settings = to_domain_inputs(request_body)

    try:
        comparison = compare_strategies(debts, plan_settings)
    except InvalidInputError as e:
        logging.warning(f"Invalid plan input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    for plan in (comparison.snowball, comparison.avalanche, comparison.minimum):
        record_simulation(plan)

    return CompareResponse(
        snowball=PlanResultSchema.model_validate(comparison.snowball),
        avalanche=PlanResultSchema.model_validate(comparison.avalanche),
        minimum=PlanResultSchema.model_validate(comparison.minimum),
        snowball_vs_minimum=PlanComparisonSchema.model_validate(
            compare_plans(comparison.snowball, comparison.minimum)
        ),
        avalanche_vs_minimum=PlanComparisonSchema.model_validate(
            compare_plans(comparison.avalanche, comparison.minimum)
        ),
    )
