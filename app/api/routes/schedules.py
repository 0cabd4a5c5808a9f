from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.db.models.organizations import Organizations
from app.schemas.schedules import (
    ScheduleRequest,
    ScheduleResponse,
    ScheduleStatsResponse,
    ScheduleValidationResponse,
    ShortageWarningResponse,
    UnderHoursWarningResponse,
)
from app.schemas.shifts import ShiftSchema
from app.services.scheduling import (
    ScheduleContext,
    ScheduleResult,
    SchedulingInputError,
    generate_schedule_from_context,
    load_schedule_context,
    validate_schedule,
)

router = APIRouter(prefix="/schedules", tags=["schedules"])


def _to_response(context: ScheduleContext, result: ScheduleResult) -> ScheduleResponse:
    validation = validate_schedule(context, list(context.existing_shifts) + result.assignments)
    return ScheduleResponse(
        success=result.success,
        assignments=[ShiftSchema.from_domain(s) for s in result.assignments],
        warnings=[ShortageWarningResponse.model_validate(w) for w in result.warnings],
        under_hours=[UnderHoursWarningResponse.model_validate(w) for w in result.under_hours],
        stats=ScheduleStatsResponse.model_validate(result.stats),
        validation=ScheduleValidationResponse.model_validate(validation),
    )


@router.post("/generate", response_model=ScheduleResponse)
def generate_from_payload(payload: ScheduleRequest):
    context = ScheduleContext(
        week_start=payload.week_start,
        workers=[w.to_domain() for w in payload.workers],
        templates=[t.to_domain() for t in payload.templates],
        leaves=[leave.to_domain() for leave in payload.leaves],
        existing_shifts=[s.to_domain() for s in payload.existing_shifts],
    )
    try:
        result = generate_schedule_from_context(context, seed=payload.seed)
    except SchedulingInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return _to_response(context, result)


@router.post("/generate/{organization_id}", response_model=ScheduleResponse)
def generate_for_organization(
    organization_id: str,
    week_start: date,
    seed: Optional[int] = None,
    db: Session = Depends(get_db),
):
    org = db.query(Organizations).filter(Organizations.id == organization_id).first()
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")

    try:
        context = load_schedule_context(db, organization_id, week_start)
        result = generate_schedule_from_context(context, seed=seed)
    except SchedulingInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return _to_response(context, result)
