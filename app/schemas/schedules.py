from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.shift_templates import ShiftTemplateSchema
from app.schemas.shifts import ShiftSchema
from app.schemas.workers import LeaveSchema, WorkerSchema


class ScheduleRequest(BaseModel):
    week_start: date
    workers: list[WorkerSchema]
    templates: list[ShiftTemplateSchema]
    leaves: list[LeaveSchema] = Field(default_factory=list)
    existing_shifts: list[ShiftSchema] = Field(default_factory=list)
    seed: Optional[int] = None


class ShortageWarningResponse(BaseModel):
    date: date
    day: str
    template_id: str
    template: str
    needed: int
    filled: int
    short_by: int

    class Config:
        from_attributes = True


class UnderHoursWarningResponse(BaseModel):
    worker_id: str
    worker: str
    assigned: float
    minimum: float

    class Config:
        from_attributes = True


class DayStatsResponse(BaseModel):
    day: str
    shifts: int
    hours: float
    workers: int

    class Config:
        from_attributes = True


class ScheduleStatsResponse(BaseModel):
    total_shifts: int
    total_hours: float
    worker_hours: dict[str, float]
    per_day: dict[date, DayStatsResponse]
    unfilled: int
    under_hours: int

    class Config:
        from_attributes = True


class ScheduleValidationResponse(BaseModel):
    valid: bool
    double_bookings: list[tuple[str, date]]
    overfilled: list[tuple[str, date, int, int]]
    cap_violations: dict[str, float]
    rest_violations: list[tuple[str, date, float]]
    incompatible_pairs: list[tuple[str, date, str, str]]

    class Config:
        from_attributes = True


class ScheduleResponse(BaseModel):
    success: bool
    assignments: list[ShiftSchema]
    warnings: list[ShortageWarningResponse]
    under_hours: list[UnderHoursWarningResponse]
    stats: ScheduleStatsResponse
    validation: ScheduleValidationResponse
