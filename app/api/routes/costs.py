from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.db.models.organizations import Organizations
from app.db.models.workers import Workers
from app.schemas.costs import WorkerCostRequest, WorkerCostResponse
from app.services.scheduling import (
    MissingPayFieldError,
    SchedulingInputError,
    calculate_worker_cost,
    cost_for,
)

router = APIRouter(prefix="/costs", tags=["costs"])


@router.post("/worker", response_model=WorkerCostResponse)
def cost_worker(payload: WorkerCostRequest):
    try:
        result = cost_for(
            payload.worker.to_domain(),
            [s.to_domain() for s in payload.shifts],
            payload.overtime_rules.to_domain() if payload.overtime_rules else None,
            [h.to_domain() for h in payload.holidays],
        )
    except (MissingPayFieldError, SchedulingInputError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return WorkerCostResponse.model_validate(result)


@router.get("/{organization_id}/workers/{worker_id}", response_model=WorkerCostResponse)
def cost_stored_worker(
    organization_id: str,
    worker_id: str,
    start: date,
    end: date,
    db: Session = Depends(get_db),
):
    if end < start:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end must not be before start")

    org = db.query(Organizations).filter(Organizations.id == organization_id).first()
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")

    worker = db.query(Workers).filter(
        Workers.id == worker_id,
        Workers.organization_id == organization_id,
    ).first()
    if not worker:
        raise HTTPException(status_code=404, detail="Worker not found")

    try:
        result = calculate_worker_cost(db, organization_id, worker_id, start, end)
    except (MissingPayFieldError, SchedulingInputError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return WorkerCostResponse.model_validate(result)
