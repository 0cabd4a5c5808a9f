from datetime import time
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter, model_validator

from app.schemas.overtime import OvertimeRulesSchema
from app.services.scheduling.types import (
    IncompatibleWorkers,
    MaxConsecutiveDays,
    MinRestHours,
    Rule,
    ShiftTemplate,
    UnpaidBreak,
)


class UnpaidBreakRule(BaseModel):
    type: Literal["unpaid_break"] = "unpaid_break"
    minutes: int = Field(ge=0)

    def to_domain(self) -> UnpaidBreak:
        return UnpaidBreak(minutes=self.minutes)


class IncompatibleWorkersRule(BaseModel):
    type: Literal["incompatible_workers"] = "incompatible_workers"
    worker_a: str
    worker_b: str

    @model_validator(mode="before")
    @classmethod
    def accept_worker_list(cls, data):
        # older records store the pair as {"workers": [a, b]}
        if isinstance(data, dict) and "workers" in data and "worker_a" not in data:
            workers = list(data.get("workers") or [])
            if len(workers) != 2:
                raise ValueError("incompatible_workers needs exactly two workers")
            data = {**data, "worker_a": workers[0], "worker_b": workers[1]}
        return data

    def to_domain(self) -> IncompatibleWorkers:
        return IncompatibleWorkers(worker_a=self.worker_a, worker_b=self.worker_b)


class MinRestHoursRule(BaseModel):
    type: Literal["min_rest_hours"] = "min_rest_hours"
    hours: float = Field(gt=0)

    def to_domain(self) -> MinRestHours:
        return MinRestHours(hours=self.hours)


class MaxConsecutiveDaysRule(BaseModel):
    type: Literal["max_consecutive_days"] = "max_consecutive_days"
    days: int = Field(ge=1)

    def to_domain(self) -> MaxConsecutiveDays:
        return MaxConsecutiveDays(days=self.days)


RuleSchema = Annotated[
    Union[UnpaidBreakRule, IncompatibleWorkersRule, MinRestHoursRule, MaxConsecutiveDaysRule],
    Field(discriminator="type"),
]

rule_list_adapter = TypeAdapter(list[RuleSchema])


def rules_from_json(raw: Optional[list]) -> list[Rule]:
    """Parse a stored rule list (None = no rules)."""
    return [r.to_domain() for r in rule_list_adapter.validate_python(raw or [])]


class ShiftTemplateSchema(BaseModel):
    id: str
    shop_id: str
    name: str = ""
    type: str = "regular"
    start_time: time
    end_time: time
    days_of_week: list[int] = Field(default_factory=list)
    required_workers: int = Field(default=1, ge=0)
    required_by_day: dict[int, int] = Field(default_factory=dict)
    break_minutes: int = Field(default=0, ge=0)
    rules: list[RuleSchema] = Field(default_factory=list)
    overtime_override: Optional[OvertimeRulesSchema] = None

    def to_domain(self) -> ShiftTemplate:
        return ShiftTemplate(
            id=self.id,
            shop_id=self.shop_id,
            name=self.name,
            type=self.type,
            start_time=self.start_time,
            end_time=self.end_time,
            days_of_week=list(self.days_of_week),
            required_workers=self.required_workers,
            required_by_day=dict(self.required_by_day),
            break_minutes=self.break_minutes,
            rules=[r.to_domain() for r in self.rules],
            overtime_override=self.overtime_override.to_domain() if self.overtime_override else None,
        )
