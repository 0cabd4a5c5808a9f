from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.overtime import OvertimeRulesSchema
from app.schemas.shifts import ShiftSchema
from app.schemas.workers import PublicHolidaySchema, WorkerSchema
from app.services.scheduling.types import PayType


class WorkerCostRequest(BaseModel):
    worker: WorkerSchema
    shifts: list[ShiftSchema] = Field(default_factory=list)
    overtime_rules: Optional[OvertimeRulesSchema] = None
    holidays: list[PublicHolidaySchema] = Field(default_factory=list)


class DailyCostResponse(BaseModel):
    date: date
    hours: float
    overtime_hours: float
    premium_hours: float
    base_cost: float
    overtime_cost: float
    premium_cost: float
    total_cost: float
    is_weekend: bool
    holiday: Optional[str] = None

    class Config:
        from_attributes = True


class WorkerCostResponse(BaseModel):
    worker_id: str
    type: PayType
    hours: float
    base_cost: float
    overtime_cost: float
    premium_cost: float
    total_cost: float
    effective_rate: float
    breakdown: list[DailyCostResponse]

    class Config:
        from_attributes = True
