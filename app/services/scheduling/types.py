"""
Internal data types for scheduling and costing logic.
decoupled from SQLAlchemy models for cleaner logic.

Weekdays follow date.weekday(): 0 = Monday ... 6 = Sunday.
"""

from dataclasses import dataclass, field
from datetime import date, time, datetime, timedelta
from enum import Enum
from typing import Optional, Union


class WorkerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


class PayType(str, Enum):
    HOURLY = "hourly"
    SALARIED = "salaried"


class ShiftPreference(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ANY = "any"


class ShiftPeriod(str, Enum):
    """Time-of-day bucket of a shift, derived from its start time."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


@dataclass
class Worker:
    id: str
    name: str = ""
    status: WorkerStatus = WorkerStatus.ACTIVE
    pay_type: PayType = PayType.HOURLY
    # hourly
    cost_per_hour: Optional[float] = None
    contracted_hours: Optional[float] = None
    min_hours_week: Optional[float] = None
    max_hours_week: Optional[float] = None
    # salaried
    monthly_salary: Optional[float] = None
    fixed_hours_week: Optional[float] = None
    available_days: list[int] = field(default_factory=list)  # empty = every day
    shift_preference: ShiftPreference = ShiftPreference.ANY
    shop_id: Optional[str] = None

    @property
    def is_salaried(self) -> bool:
        return self.pay_type == PayType.SALARIED


# Rule variants. Closed union: the evaluator in rules.py handles exactly these.

@dataclass(frozen=True)
class UnpaidBreak:
    minutes: int


@dataclass(frozen=True)
class IncompatibleWorkers:
    worker_a: str
    worker_b: str

    def involves(self, worker_id: str) -> bool:
        return worker_id in (self.worker_a, self.worker_b)

    def partner_of(self, worker_id: str) -> Optional[str]:
        if worker_id == self.worker_a:
            return self.worker_b
        if worker_id == self.worker_b:
            return self.worker_a
        return None


@dataclass(frozen=True)
class MinRestHours:
    hours: float


@dataclass(frozen=True)
class MaxConsecutiveDays:
    days: int


Rule = Union[UnpaidBreak, IncompatibleWorkers, MinRestHours, MaxConsecutiveDays]


@dataclass
class OvertimeRules:
    """Overtime and premium pay rule set. A threshold of 0 disables that tier."""
    enabled: bool = False
    daily_threshold: float = 0
    daily_multiplier: float = 1.5
    daily_threshold_2: float = 12
    daily_multiplier_2: float = 2.0
    weekly_threshold: float = 0
    weekly_multiplier: float = 1.5
    monthly_threshold: float = 0
    monthly_multiplier: float = 1.5
    weekend_multiplier: float = 1.25
    night_start: Optional[time] = None
    night_end: Optional[time] = None
    night_multiplier: float = 1.25
    early_start: Optional[time] = None
    early_end: Optional[time] = None
    early_multiplier: float = 1.1
    holiday_multiplier: float = 2.0


@dataclass
class ShiftTemplate:
    id: str
    shop_id: str
    start_time: time
    end_time: time
    name: str = ""
    days_of_week: list[int] = field(default_factory=list)  # empty = every day
    required_workers: int = 1
    required_by_day: dict[int, int] = field(default_factory=dict)
    break_minutes: int = 0  # legacy, superseded by an UnpaidBreak rule
    rules: list[Rule] = field(default_factory=list)
    type: str = "regular"
    overtime_override: Optional[OvertimeRules] = None

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass
class Leave:
    worker_id: str
    start_date: date
    end_date: Optional[date] = None  # None = single day

    def covers(self, target: date) -> bool:
        return self.start_date <= target <= (self.end_date or self.start_date)


@dataclass
class PublicHoliday:
    date: date
    name: str = ""
    multiplier: Optional[float] = None  # None = rule set holiday_multiplier


@dataclass(frozen=True)
class Shift:
    """A shift assignment (scheduler output or manually recorded)."""
    worker_id: str
    date: date
    start_time: time
    end_time: time
    hours: float  # paid
    template_id: Optional[str] = None
    shop_id: Optional[str] = None
    gross_hours: Optional[float] = None
    unpaid_break_minutes: int = 0
    type: str = "regular"
    auto_scheduled: bool = False

    @property
    def day_of_week(self) -> int:
        return self.date.weekday()

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end_datetime(self) -> datetime:
        """End instant, rolled over to the next day for overnight shifts."""
        end_dt = datetime.combine(self.date, self.end_time)
        if end_dt <= self.start_datetime:
            end_dt += timedelta(days=1)
        return end_dt


@dataclass
class ShortageWarning:
    """A template/day that did not reach its required headcount."""
    date: date
    day: str
    template_id: str
    template: str
    needed: int
    filled: int
    short_by: int


@dataclass
class UnderHoursWarning:
    worker_id: str
    worker: str
    assigned: float
    minimum: float


@dataclass
class DayStats:
    day: str
    shifts: int = 0
    hours: float = 0.0
    workers: int = 0


@dataclass
class ScheduleStats:
    total_shifts: int = 0
    total_hours: float = 0.0
    worker_hours: dict[str, float] = field(default_factory=dict)
    per_day: dict[date, DayStats] = field(default_factory=dict)
    unfilled: int = 0
    under_hours: int = 0


@dataclass
class ScheduleContext:
    """All data needed to generate a schedule for one week."""
    week_start: date  # Monday
    workers: list[Worker]
    templates: list[ShiftTemplate]
    leaves: list[Leave] = field(default_factory=list)
    existing_shifts: list[Shift] = field(default_factory=list)
    holidays: list[PublicHoliday] = field(default_factory=list)

    @property
    def week_end(self) -> date:
        """Sunday of the schedule week."""
        return self.week_start + timedelta(days=6)


@dataclass
class ScheduleResult:
    """Output of the scheduling algorithm. Only NEW shifts are in assignments."""
    assignments: list[Shift]
    warnings: list[ShortageWarning] = field(default_factory=list)
    under_hours: list[UnderHoursWarning] = field(default_factory=list)
    stats: ScheduleStats = field(default_factory=ScheduleStats)

    @property
    def success(self) -> bool:
        return not self.warnings and not self.under_hours


@dataclass
class DailyCost:
    date: date
    hours: float = 0.0
    overtime_hours: float = 0.0
    premium_hours: float = 0.0
    base_cost: float = 0.0
    overtime_cost: float = 0.0
    premium_cost: float = 0.0
    total_cost: float = 0.0
    is_weekend: bool = False
    holiday: Optional[str] = None


@dataclass
class WorkerCost:
    worker_id: str
    type: PayType
    hours: float = 0.0
    base_cost: float = 0.0
    overtime_cost: float = 0.0
    premium_cost: float = 0.0
    total_cost: float = 0.0
    effective_rate: float = 0.0
    breakdown: list[DailyCost] = field(default_factory=list)
