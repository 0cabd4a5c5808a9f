"""
Rule evaluator for shift template constraint rules.

Handles the four rule kinds a template can carry:
- UnpaidBreak: deducted from paid hours
- IncompatibleWorkers: never on the same template instance on the same date
- MinRestHours: rest gap before a shift of this template
- MaxConsecutiveDays: consecutive days on this same template
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .errors import SchedulingInputError
from .types import (
    Rule,
    UnpaidBreak,
    IncompatibleWorkers,
    MinRestHours,
    MaxConsecutiveDays,
    Shift,
    ShiftTemplate,
)
from .time_utils import calc_hours, shift_span


def unpaid_break_minutes(template: ShiftTemplate) -> int:
    """UnpaidBreak rule minutes if present, else legacy break_minutes, else 0."""
    for rule in template.rules:
        if isinstance(rule, UnpaidBreak):
            return rule.minutes
    return template.break_minutes or 0


def paid_hours(template: ShiftTemplate) -> tuple[float, float, int]:
    """
    Paid hours for one instance of a template.

    Returns:
        (paid_hours, gross_hours, unpaid_break_minutes)
    """
    gross = calc_hours(template.start_time, template.end_time)
    break_mins = unpaid_break_minutes(template)
    paid = max(0.0, gross - break_mins / 60)
    return round(paid, 2), gross, break_mins


def validate_template(template: ShiftTemplate) -> None:
    """Raise SchedulingInputError for a malformed template."""
    for day in template.days_of_week:
        if not isinstance(day, int) or not 0 <= day <= 6:
            raise SchedulingInputError(
                f"Template {template.id} has invalid weekday {day!r} (expected 0-6)"
            )
    for day, count in template.required_by_day.items():
        if not 0 <= int(day) <= 6:
            raise SchedulingInputError(
                f"Template {template.id} has invalid weekday {day!r} in required_by_day"
            )
        if count < 0:
            raise SchedulingInputError(f"Template {template.id} requires a negative headcount")
    if template.required_workers < 0:
        raise SchedulingInputError(f"Template {template.id} requires a negative headcount")
    if template.break_minutes < 0:
        raise SchedulingInputError(f"Template {template.id} has negative break minutes")

    breaks = 0
    for rule in template.rules:
        if isinstance(rule, UnpaidBreak):
            breaks += 1
            if rule.minutes < 0:
                raise SchedulingInputError(f"Template {template.id}: unpaid break must not be negative")
        elif isinstance(rule, MinRestHours):
            if rule.hours <= 0:
                raise SchedulingInputError(f"Template {template.id}: min rest hours must be positive")
        elif isinstance(rule, MaxConsecutiveDays):
            if rule.days < 1:
                raise SchedulingInputError(f"Template {template.id}: max consecutive days must be >= 1")
        elif isinstance(rule, IncompatibleWorkers):
            if rule.worker_a == rule.worker_b:
                raise SchedulingInputError(
                    f"Template {template.id}: incompatible workers rule names the same worker twice"
                )
        else:
            raise SchedulingInputError(f"Template {template.id}: unknown rule {rule!r}")
    if breaks > 1:
        raise SchedulingInputError(f"Template {template.id} has more than one unpaid break rule")


def validate_rule_references(templates: Iterable[ShiftTemplate], worker_ids: set[str]) -> None:
    """Every worker named by an IncompatibleWorkers rule must exist."""
    for template in templates:
        for rule in template.rules:
            if not isinstance(rule, IncompatibleWorkers):
                continue
            for worker_id in (rule.worker_a, rule.worker_b):
                if worker_id not in worker_ids:
                    raise SchedulingInputError(
                        f"Template {template.id} rule references unknown worker {worker_id}"
                    )


def rest_gap_hours(previous: Shift, next_start: datetime) -> float:
    """Hours between the end of previous (overnight-aware) and next_start."""
    return (next_start - previous.end_datetime).total_seconds() / 3600


def consecutive_days_on_template(
    template_id: str,
    target_date: date,
    shifts_by_date: dict[date, Shift],
) -> int:
    """Count consecutive days immediately before target_date worked on this template."""
    count = 0
    current = target_date - timedelta(days=1)
    while True:
        shift = shifts_by_date.get(current)
        if shift is None or shift.template_id != template_id:
            break
        count += 1
        current -= timedelta(days=1)
    return count


def check_rule(
    rule: Rule,
    template: ShiftTemplate,
    target_date: date,
    previous_shift: Optional[Shift],
    shifts_by_date: dict[date, Shift],
) -> tuple[bool, str]:
    """
    Check a single rule for a worker taking template on target_date.
    IncompatibleWorkers depends on who else is committed and is checked at commit time.
    """
    if isinstance(rule, (UnpaidBreak, IncompatibleWorkers)):
        return True, "OK"

    if isinstance(rule, MinRestHours):
        if previous_shift is None:
            return True, "OK"
        start_dt, _ = shift_span(target_date, template.start_time, template.end_time)
        gap = rest_gap_hours(previous_shift, start_dt)
        if gap < rule.hours:
            return False, f"Only {gap:.1f}h rest, need {rule.hours}h"
        return True, "OK"

    if isinstance(rule, MaxConsecutiveDays):
        run = consecutive_days_on_template(template.id, target_date, shifts_by_date)
        if run >= rule.days:
            return False, f"Already {run} consecutive days on this shift (max {rule.days})"
        return True, "OK"

    raise SchedulingInputError(f"Unknown rule {rule!r}")


def check_template_rules(
    template: ShiftTemplate,
    target_date: date,
    previous_shift: Optional[Shift],
    shifts_by_date: dict[date, Shift],
) -> tuple[bool, str]:
    """Check every attached rule; first violation wins."""
    for rule in template.rules:
        ok, reason = check_rule(rule, template, target_date, previous_shift, shifts_by_date)
        if not ok:
            return False, reason
    return True, "OK"


def violates_incompatibility(
    template: ShiftTemplate,
    worker_id: str,
    assigned_worker_ids: Iterable[str],
) -> bool:
    """True if worker would share this template instance with an incompatible partner."""
    assigned = set(assigned_worker_ids)
    for rule in template.rules:
        if not isinstance(rule, IncompatibleWorkers):
            continue
        partner = rule.partner_of(worker_id)
        if partner is not None and partner in assigned:
            return True
    return False
