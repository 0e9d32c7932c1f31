"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from debt_planner.domain.models import Debt, PlanSettings, Strategy
from debt_planner.domain.simulator import MAX_APR


class DebtSchema(BaseModel):
    """A debt as supplied by the client (amounts in cents, APR in percent)"""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1, description="Stable debt identifier")
    name: str = Field(..., description="Display label")
    balance_cents: int = Field(..., ge=0)
    apr: Decimal = Field(..., ge=0, le=MAX_APR, description="Annual rate in percent, e.g. 18.99")
    min_payment_cents: int = Field(..., ge=0)
    due_day: Optional[int] = Field(None, ge=1, le=28)
    include: bool = True
    category: Optional[str] = None
    notes: Optional[str] = None

    def to_domain(self) -> Debt:
        return Debt(**self.model_dump())


class PlanSettingsSchema(BaseModel):
    """Simulation parameters"""

    model_config = ConfigDict(from_attributes=True)

    strategy: Strategy = Strategy.SNOWBALL
    extra_monthly_cents: int = Field(0, ge=0)
    one_time_extra_cents: int = Field(0, ge=0)
    start_date: Optional[date] = None
    max_months: Optional[int] = Field(None, ge=1)
    rollover_freed_minimums: bool = False

    def to_domain(self) -> PlanSettings:
        return PlanSettings(**self.model_dump())


class SimulateRequest(BaseModel):
    """Request body for POST /v1/simulate and POST /v1/compare"""

    debts: List[DebtSchema] = Field(default_factory=list)
    settings: PlanSettingsSchema = Field(default_factory=PlanSettingsSchema)


class PaymentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    debt_id: str
    starting_balance_cents: int
    interest_accrued_cents: int
    min_applied_cents: int
    extra_applied_cents: int
    total_paid_cents: int
    ending_balance_cents: int
    paid_off: bool


class MonthTotalsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    outflow_cents: int
    interest_cents: int


class MonthSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month_index: int
    date: date
    payments: List[PaymentSchema]
    totals: MonthTotalsSchema


class PlanTotalsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    interest_cents: int
    total_paid_cents: int
    outflow_monthly_cents: int
    one_time_applied_cents: int
    months_to_debt_free: Optional[int]


class PlanResultSchema(BaseModel):
    """Full simulated schedule; also the canonical (version 2) snapshot shape"""

    model_config = ConfigDict(from_attributes=True)

    strategy: Strategy
    start_date: date
    settings: PlanSettingsSchema
    months: List[MonthSchema]
    totals: PlanTotalsSchema
    horizon_exceeded: bool
    debt_free_date: Optional[date] = None


class PlanComparisonSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    months_plan: Optional[int]
    months_baseline: Optional[int]
    months_saved: Optional[int]
    interest_plan_cents: int
    interest_baseline_cents: int
    interest_saved_cents: int
    debt_free_date_plan: Optional[date]
    debt_free_date_baseline: Optional[date]


class CompareResponse(BaseModel):
    """Response for POST /v1/compare"""

    snowball: PlanResultSchema
    avalanche: PlanResultSchema
    minimum: PlanResultSchema
    snowball_vs_minimum: PlanComparisonSchema
    avalanche_vs_minimum: PlanComparisonSchema


class NormalizeRequest(BaseModel):
    """Request body for POST /v1/debts/normalize"""

    rows: List[Dict[str, Any]] = Field(..., min_length=1)


class NormalizeResponse(BaseModel):
    debts: List[DebtSchema]


class CreatePlanRequest(SimulateRequest):
    """Request body for POST /v1/plans"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    name: Optional[str] = None


class PlanResponse(BaseModel):
    """Stored inputs together with a fresh simulation of them"""

    plan_id: str
    user_id: str
    name: Optional[str] = None
    debts: List[DebtSchema]
    result: PlanResultSchema
    created_at: str


class PlanListItem(BaseModel):
    plan_id: str
    name: Optional[str] = None
    strategy: Strategy
    start_date: date
    created_at: str


class PlanListResponse(BaseModel):
    """Response for GET /v1/plans"""

    user_id: str
    plans: List[PlanListItem]


class SnapshotResponse(BaseModel):
    """A stored snapshot, upgraded to the current version"""

    snapshot_id: int
    plan_id: str
    version: int
    stored_version: int
    plan: PlanResultSchema
    matches_current: bool
    created_at: str
