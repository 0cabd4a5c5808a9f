"""
Constraint checking utilities for schedule validation.
Checks a finished roster (existing + generated shifts) against the scheduling invariants:
one shift per worker per day, slot conservation, weekly caps, rest hours and
incompatible workers.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from .types import (
    IncompatibleWorkers,
    MinRestHours,
    Shift,
    ShiftTemplate,
    Worker,
    ScheduleContext,
)
from .rules import rest_gap_hours
from .scoring import weekly_cap
from .solver import HOURS_EPSILON, required_workers
from .time_utils import runs_on_day


@dataclass
class ScheduleValidation:
    valid: bool
    double_bookings: list[tuple[str, date]] = field(default_factory=list)  # (worker_id, date)
    overfilled: list[tuple[str, date, int, int]] = field(default_factory=list)  # (template_id, date, filled, required)
    cap_violations: dict[str, float] = field(default_factory=dict)  # worker_id -> hours over cap
    rest_violations: list[tuple[str, date, float]] = field(default_factory=list)  # (worker_id, date, gap hours)
    incompatible_pairs: list[tuple[str, date, str, str]] = field(default_factory=list)  # (template_id, date, a, b)


def get_shifts_on_date(shifts: Iterable[Shift], target: date, template_id: Optional[str] = None) -> list[Shift]:
    """Get all shifts on a date, optionally for one template."""
    return [
        s for s in shifts
        if s.date == target and (template_id is None or s.template_id == template_id)
    ]


def calculate_worker_hours(shifts: Iterable[Shift], worker_id: str) -> float:
    """Calculate total paid hours assigned to a worker."""
    return round(sum(s.hours for s in shifts if s.worker_id == worker_id), 2)


def find_double_bookings(shifts: list[Shift]) -> list[tuple[str, date]]:
    seen: dict[tuple[str, date], int] = defaultdict(int)
    for shift in shifts:
        seen[(shift.worker_id, shift.date)] += 1
    return sorted(key for key, count in seen.items() if count > 1)


def find_overfilled(
    shifts: list[Shift],
    templates: list[ShiftTemplate],
    days: list[date],
) -> list[tuple[str, date, int, int]]:
    overfilled = []
    for template in templates:
        for day in days:
            if not runs_on_day(template.days_of_week, day.weekday()):
                continue
            filled = len(get_shifts_on_date(shifts, day, template.id))
            required = required_workers(template, day.weekday())
            if filled > required:
                overfilled.append((template.id, day, filled, required))
    return overfilled


def find_cap_violations(shifts: list[Shift], workers: list[Worker]) -> dict[str, float]:
    """worker_id -> hours over the weekly cap."""
    over = {}
    for worker in workers:
        assigned = calculate_worker_hours(shifts, worker.id)
        excess = assigned - weekly_cap(worker)
        if excess > HOURS_EPSILON:
            over[worker.id] = round(excess, 2)
    return over


def find_rest_violations(
    shifts: list[Shift],
    templates: list[ShiftTemplate],
) -> list[tuple[str, date, float]]:
    """Consecutive shifts of a worker closer together than the later template's MinRestHours."""
    rest_rules: dict[str, float] = {}
    for template in templates:
        for rule in template.rules:
            if isinstance(rule, MinRestHours):
                rest_rules[template.id] = max(rest_rules.get(template.id, 0), rule.hours)

    by_worker: dict[str, list[Shift]] = defaultdict(list)
    for shift in shifts:
        by_worker[shift.worker_id].append(shift)

    violations = []
    for worker_id, worker_shifts in by_worker.items():
        ordered = sorted(worker_shifts, key=lambda s: s.start_datetime)
        for previous, current in zip(ordered, ordered[1:]):
            needed = rest_rules.get(current.template_id)
            if needed is None:
                continue
            gap = rest_gap_hours(previous, current.start_datetime)
            if gap < needed:
                violations.append((worker_id, current.date, round(gap, 2)))
    return violations


def find_incompatible_pairs(
    shifts: list[Shift],
    templates: list[ShiftTemplate],
) -> list[tuple[str, date, str, str]]:
    crews: dict[tuple[str, date], set[str]] = defaultdict(set)
    for shift in shifts:
        if shift.template_id is not None:
            crews[(shift.template_id, shift.date)].add(shift.worker_id)

    pairs = []
    for template in templates:
        rules = [r for r in template.rules if isinstance(r, IncompatibleWorkers)]
        if not rules:
            continue
        for (template_id, day), crew in sorted(crews.items()):
            if template_id != template.id:
                continue
            for rule in rules:
                if rule.worker_a in crew and rule.worker_b in crew:
                    pairs.append((template.id, day, rule.worker_a, rule.worker_b))
    return pairs


def validate_schedule(context: ScheduleContext, shifts: list[Shift]) -> ScheduleValidation:
    """
    Validate a complete roster against all scheduling invariants.

    `shifts` should hold every shift of the week (existing + generated).
    """
    days = [context.week_start + timedelta(days=i) for i in range(7)]
    week_shifts = [s for s in shifts if context.week_start <= s.date <= context.week_end]

    result = ScheduleValidation(
        valid=True,
        double_bookings=find_double_bookings(week_shifts),
        overfilled=find_overfilled(week_shifts, context.templates, days),
        cap_violations=find_cap_violations(week_shifts, context.workers),
        rest_violations=find_rest_violations(shifts, context.templates),
        incompatible_pairs=find_incompatible_pairs(week_shifts, context.templates),
    )
    result.valid = not (
        result.double_bookings
        or result.overfilled
        or result.cap_violations
        or result.rest_violations
        or result.incompatible_pairs
    )
    return result
