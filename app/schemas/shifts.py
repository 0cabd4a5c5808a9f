from pydantic import BaseModel
from datetime import date, time
from typing import Optional

from app.services.scheduling.types import Shift


class ShiftSchema(BaseModel):
    worker_id: str
    template_id: Optional[str] = None
    shop_id: Optional[str] = None
    date: date
    day_of_week: Optional[int] = None
    start_time: time
    end_time: time
    hours: float
    gross_hours: Optional[float] = None
    unpaid_break_minutes: int = 0
    type: str = "regular"
    auto_scheduled: bool = False

    def to_domain(self) -> Shift:
        return Shift(
            worker_id=self.worker_id,
            template_id=self.template_id,
            shop_id=self.shop_id,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            hours=self.hours,
            gross_hours=self.gross_hours,
            unpaid_break_minutes=self.unpaid_break_minutes,
            type=self.type,
            auto_scheduled=self.auto_scheduled,
        )

    @classmethod
    def from_domain(cls, shift: Shift) -> "ShiftSchema":
        return cls(
            worker_id=shift.worker_id,
            template_id=shift.template_id,
            shop_id=shift.shop_id,
            date=shift.date,
            day_of_week=shift.day_of_week,
            start_time=shift.start_time,
            end_time=shift.end_time,
            hours=shift.hours,
            gross_hours=shift.gross_hours,
            unpaid_break_minutes=shift.unpaid_break_minutes,
            type=shift.type,
            auto_scheduled=shift.auto_scheduled,
        )
