from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from app.services.scheduling.types import (
    Leave,
    PayType,
    PublicHoliday,
    ShiftPreference,
    Worker,
    WorkerStatus,
)


class WorkerSchema(BaseModel):
    id: str
    name: str = ""
    status: WorkerStatus = WorkerStatus.ACTIVE
    pay_type: PayType = PayType.HOURLY
    cost_per_hour: Optional[float] = Field(default=None, ge=0)
    contracted_hours: Optional[float] = Field(default=None, ge=0)
    min_hours_week: Optional[float] = Field(default=None, ge=0)
    max_hours_week: Optional[float] = Field(default=None, ge=0)
    monthly_salary: Optional[float] = Field(default=None, ge=0)
    fixed_hours_week: Optional[float] = Field(default=None, ge=0)
    available_days: list[int] = Field(default_factory=list)
    shift_preference: Optional[ShiftPreference] = None
    shop_id: Optional[str] = None

    def to_domain(self) -> Worker:
        return Worker(
            id=self.id,
            name=self.name,
            status=self.status,
            pay_type=self.pay_type,
            cost_per_hour=self.cost_per_hour,
            contracted_hours=self.contracted_hours,
            min_hours_week=self.min_hours_week,
            max_hours_week=self.max_hours_week,
            monthly_salary=self.monthly_salary,
            fixed_hours_week=self.fixed_hours_week,
            available_days=list(self.available_days),
            shift_preference=self.shift_preference or ShiftPreference.ANY,
            shop_id=self.shop_id,
        )


class LeaveSchema(BaseModel):
    worker_id: str
    start_date: date
    end_date: Optional[date] = None

    def to_domain(self) -> Leave:
        return Leave(worker_id=self.worker_id, start_date=self.start_date, end_date=self.end_date)


class PublicHolidaySchema(BaseModel):
    date: date
    name: str = "Public Holiday"
    multiplier: Optional[float] = Field(default=None, ge=1)

    def to_domain(self) -> PublicHoliday:
        return PublicHoliday(date=self.date, name=self.name, multiplier=self.multiplier)
