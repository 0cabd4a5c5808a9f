"""
Data loader for scheduling service.
Fetches all relevant data from the database and converts to internal types.
"""

import math
from datetime import date, timedelta
from typing import Any, Optional
from pydantic import ValidationError
from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from app.db.models.organizations import Organizations
from app.db.models.workers import Workers
from app.db.models.shift_templates import ShiftTemplates
from app.db.models.leaves import Leaves, LeaveStatus
from app.db.models.shifts import Shifts, ShiftStatus
from app.db.models.public_holidays import PublicHolidays

from .errors import SchedulingInputError
from .types import (
    Worker,
    WorkerStatus,
    PayType,
    ShiftPreference,
    ShiftTemplate,
    MaxConsecutiveDays,
    MinRestHours,
    Leave,
    Shift,
    PublicHoliday,
    OvertimeRules,
    ScheduleContext,
)


def overtime_rules_from_json(raw: Optional[dict[str, Any]]) -> Optional[OvertimeRules]:
    """Parse a stored overtime rule set. None stays None."""
    if raw is None:
        return None
    from app.schemas.overtime import OvertimeRulesSchema

    try:
        return OvertimeRulesSchema.model_validate(raw).to_domain()
    except ValidationError as e:
        raise SchedulingInputError(f"Invalid overtime rules: {e}") from e


def _worker_from_row(row: Workers) -> Worker:
    return Worker(
        id=row.id,
        name=f"{row.first_name} {row.last_name}".strip(),
        status=WorkerStatus(row.status.value),
        pay_type=PayType(row.pay_type.value),
        cost_per_hour=row.cost_per_hour,
        contracted_hours=row.contracted_hours,
        min_hours_week=row.min_hours_week,
        max_hours_week=row.max_hours_week,
        monthly_salary=row.monthly_salary,
        fixed_hours_week=row.fixed_hours_week,
        available_days=list(row.available_days or []),
        shift_preference=ShiftPreference(row.shift_preference or "any"),
        shop_id=row.shop_id,
    )


def _template_from_row(row: ShiftTemplates) -> ShiftTemplate:
    from app.schemas.shift_templates import rules_from_json

    try:
        rules = rules_from_json(row.rules)
    except ValidationError as e:
        raise SchedulingInputError(f"Template {row.id} has invalid rules: {e}") from e

    return ShiftTemplate(
        id=row.id,
        shop_id=row.shop_id,
        name=row.name,
        type=row.type,
        start_time=row.start_time,
        end_time=row.end_time,
        days_of_week=list(row.days_of_week or []),
        required_workers=row.required_workers,
        required_by_day={int(k): int(v) for k, v in (row.required_by_day or {}).items()},
        break_minutes=row.break_minutes or 0,
        rules=rules,
        overtime_override=overtime_rules_from_json(row.overtime_override),
    )


def _shift_from_row(row: Shifts) -> Shift:
    return Shift(
        worker_id=row.worker_id,
        template_id=row.template_id,
        shop_id=row.shop_id,
        date=row.shift_date,
        start_time=row.start_time,
        end_time=row.end_time,
        hours=row.hours,
        gross_hours=row.gross_hours,
        unpaid_break_minutes=row.unpaid_break_minutes,
        type=row.type,
    )


def load_workers(db: Session, organization_id: str) -> list[Worker]:
    """Load all workers for an organization (inactive ones are filtered by the scheduler)."""
    stmt = select(Workers).where(Workers.organization_id == organization_id).order_by(Workers.id)
    return [_worker_from_row(w) for w in db.execute(stmt).scalars().all()]


def load_worker(db: Session, organization_id: str, worker_id: str) -> Optional[Worker]:
    stmt = select(Workers).where(
        and_(Workers.organization_id == organization_id, Workers.id == worker_id)
    )
    row = db.execute(stmt).scalars().first()
    return _worker_from_row(row) if row else None


def load_templates(db: Session, organization_id: str) -> list[ShiftTemplate]:
    """Load active shift templates for an organization."""
    stmt = select(ShiftTemplates).where(
        and_(
            ShiftTemplates.organization_id == organization_id,
            ShiftTemplates.active == True
        )
    ).order_by(ShiftTemplates.id)
    return [_template_from_row(t) for t in db.execute(stmt).scalars().all()]


def load_leaves(
    db: Session,
    worker_ids: list[str],
    start: date,
    end: date,
) -> list[Leave]:
    """Load approved leaves that overlap [start, end]."""
    if not worker_ids:
        return []

    stmt = select(Leaves).where(
        and_(
            Leaves.worker_id.in_(worker_ids),
            Leaves.status == LeaveStatus.APPROVED,
            Leaves.start_date <= end,
        )
    )
    rows = db.execute(stmt).scalars().all()

    return [
        Leave(worker_id=r.worker_id, start_date=r.start_date, end_date=r.end_date)
        for r in rows
        if (r.end_date or r.start_date) >= start
    ]


def load_shifts(
    db: Session,
    organization_id: str,
    start: date,
    end: date,
    worker_id: Optional[str] = None,
) -> list[Shift]:
    """Load non-cancelled shifts dated within [start, end]."""
    conditions = [
        Shifts.organization_id == organization_id,
        Shifts.status != ShiftStatus.CANCELLED,
        Shifts.shift_date >= start,
        Shifts.shift_date <= end,
    ]
    if worker_id is not None:
        conditions.append(Shifts.worker_id == worker_id)

    stmt = select(Shifts).where(and_(*conditions)).order_by(Shifts.shift_date, Shifts.start_time)
    return [_shift_from_row(s) for s in db.execute(stmt).scalars().all()]


def load_public_holidays(
    db: Session,
    organization_id: str,
    start: date,
    end: date,
) -> list[PublicHoliday]:
    stmt = select(PublicHolidays).where(
        and_(
            PublicHolidays.organization_id == organization_id,
            PublicHolidays.holiday_date >= start,
            PublicHolidays.holiday_date <= end,
        )
    )
    return [
        PublicHoliday(date=h.holiday_date, name=h.name, multiplier=h.multiplier)
        for h in db.execute(stmt).scalars().all()
    ]


def load_organization_overtime_rules(db: Session, organization_id: str) -> OvertimeRules:
    """Organization default rule set; an organization without one gets the disabled defaults."""
    org = db.get(Organizations, organization_id)
    if org is None:
        raise SchedulingInputError(f"Organization {organization_id} not found")
    return overtime_rules_from_json(org.overtime_rules) or OvertimeRules()


def resolve_overtime_rules(
    organization_rules: OvertimeRules,
    template: Optional[ShiftTemplate],
) -> OvertimeRules:
    """Template override if present, else organization default. Never merged field by field."""
    if template is not None and template.overtime_override is not None:
        return template.overtime_override
    return organization_rules


def history_days(templates: list[ShiftTemplate]) -> int:
    """
    Days before week_start whose shifts the scheduler needs: enough for the longest
    MaxConsecutiveDays run and the longest MinRestHours gap, at least one day.
    """
    days = 1
    for template in templates:
        for rule in template.rules:
            if isinstance(rule, MaxConsecutiveDays):
                days = max(days, rule.days)
            elif isinstance(rule, MinRestHours):
                days = max(days, math.ceil(rule.hours / 24) + 1)
    return days


def load_schedule_context(db: Session, organization_id: str, week_start: date) -> ScheduleContext:
    """
    Load all data needed to generate a schedule for an organization/week.

    Existing shifts are loaded from before week_start as far back as the templates'
    rules look (see history_days), so rest-hour, consecutive-day and night->morning
    checks see the end of the previous week.
    """
    # Validate week_start is a Monday
    if week_start.weekday() != 0:
        raise SchedulingInputError(
            f"week_start must be a Monday, got {week_start} ({week_start.strftime('%A')})"
        )
    week_end = week_start + timedelta(days=6)

    workers = load_workers(db, organization_id)
    worker_ids = [w.id for w in workers]
    templates = load_templates(db, organization_id)
    history_start = week_start - timedelta(days=history_days(templates))

    return ScheduleContext(
        week_start=week_start,
        workers=workers,
        templates=templates,
        leaves=load_leaves(db, worker_ids, week_start, week_end),
        existing_shifts=load_shifts(db, organization_id, history_start, week_end),
        holidays=load_public_holidays(db, organization_id, week_start, week_end),
    )
