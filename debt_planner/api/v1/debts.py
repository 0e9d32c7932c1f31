"""POST /v1/debts/normalize - turn imported rows into validated debts"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from debt_planner.api.v1.schemas import DebtSchema, NormalizeRequest, NormalizeResponse
from debt_planner.api.dependencies import get_request_id
from debt_planner.domain.exceptions import InvalidInputError
from debt_planner.domain.models import PlanSettings
from debt_planner.domain.normalization import normalize_debts
from debt_planner.domain.simulator import validate_inputs

router = APIRouter()


@router.post("/debts/normalize", response_model=NormalizeResponse)
def normalize_imported_debts(request_body: NormalizeRequest, request_id: str = Depends(get_request_id)):
    """
    Coerce spreadsheet/CSV rows (dollar strings, "18.99%", include="no")
    into debts ready for /v1/simulate.
    """
    try:
        debts = normalize_debts(request_body.rows)
        validate_inputs(debts, PlanSettings())
    except InvalidInputError as e:
        logging.warning(f"Import rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    return NormalizeResponse(debts=[DebtSchema.model_validate(d) for d in debts])
