"""
Scheduling service package.

Usage:
    from datetime import date
    from app.services.scheduling import generate_schedule

    # Simple usage - load data and solve in one call
    result = generate_schedule(db, organization_id="org-1", week_start=date(2025, 1, 20))

    # Or load context separately for inspection/testing
    from app.services.scheduling import load_schedule_context, generate_schedule_from_context

    context = load_schedule_context(db, organization_id="org-1", week_start=date(2025, 1, 20))
    result = generate_schedule_from_context(context, seed=42)

    # Cost a worker's shifts without touching the database
    from app.services.scheduling import cost_for

    cost = cost_for(worker, shifts, overtime_rules, holidays)
"""

from .types import (
    Worker,
    WorkerStatus,
    PayType,
    ShiftPreference,
    UnpaidBreak,
    IncompatibleWorkers,
    MinRestHours,
    MaxConsecutiveDays,
    Rule,
    OvertimeRules,
    ShiftTemplate,
    Leave,
    PublicHoliday,
    Shift,
    ShortageWarning,
    UnderHoursWarning,
    ScheduleStats,
    ScheduleContext,
    ScheduleResult,
    DailyCost,
    WorkerCost,
)
from .errors import SchedulingInputError, MissingPayFieldError
from .costing import cost_for
from .constraints import validate_schedule
from .data_loader import load_schedule_context, resolve_overtime_rules
from .generator import generate_schedule, generate_schedule_from_context, calculate_worker_cost
from .solver import solve_schedule, schedule_week

__all__ = [
    # Types
    "Worker",
    "WorkerStatus",
    "PayType",
    "ShiftPreference",
    "UnpaidBreak",
    "IncompatibleWorkers",
    "MinRestHours",
    "MaxConsecutiveDays",
    "Rule",
    "OvertimeRules",
    "ShiftTemplate",
    "Leave",
    "PublicHoliday",
    "Shift",
    "ShortageWarning",
    "UnderHoursWarning",
    "ScheduleStats",
    "ScheduleContext",
    "ScheduleResult",
    "DailyCost",
    "WorkerCost",
    # Errors
    "SchedulingInputError",
    "MissingPayFieldError",
    # Main entry points
    "generate_schedule",
    "generate_schedule_from_context",
    "calculate_worker_cost",
    "cost_for",
    # Lower-level functions
    "load_schedule_context",
    "resolve_overtime_rules",
    "solve_schedule",
    "schedule_week",
    "validate_schedule",
]
