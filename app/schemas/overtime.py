from datetime import time
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.services.scheduling.types import OvertimeRules


class OvertimeRulesSchema(BaseModel):
    enabled: bool = False
    daily_threshold: float = Field(default=0, ge=0)
    daily_multiplier: float = 1.5
    daily_threshold_2: float = Field(default=12, ge=0)
    daily_multiplier_2: float = 2.0
    weekly_threshold: float = Field(default=0, ge=0)
    weekly_multiplier: float = 1.5
    monthly_threshold: float = Field(default=0, ge=0)
    monthly_multiplier: float = 1.5
    weekend_multiplier: float = 1.25
    night_start: Optional[time] = None
    night_end: Optional[time] = None
    night_multiplier: float = 1.25
    early_start: Optional[time] = None
    early_end: Optional[time] = None
    early_multiplier: float = 1.1
    holiday_multiplier: float = 2.0

    @field_validator("night_start", "night_end", "early_start", "early_end", mode="before")
    @classmethod
    def blank_window_is_unset(cls, value):
        # stored rule sets use "" for a disabled window
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_domain(self) -> OvertimeRules:
        return OvertimeRules(**self.model_dump())
