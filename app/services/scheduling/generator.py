"""
Schedule generator - main orchestration layer.

This module provides the high-level API for generating schedules and costing
workers, combining data loading, solving and costing into single calls.
"""

import logging
import random
from datetime import date, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.core.config import settings

from .costing import cost_for
from .data_loader import (
    load_organization_overtime_rules,
    load_public_holidays,
    load_schedule_context,
    load_shifts,
    load_templates,
    load_worker,
    resolve_overtime_rules,
)
from .errors import SchedulingInputError
from .solver import solve_schedule
from .types import OvertimeRules, ScheduleContext, ScheduleResult, Shift, WorkerCost

logger = logging.getLogger(__name__)


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Random source for the scoring tiebreaker; falls back to SCHEDULER_SEED."""
    if seed is None:
        seed = settings.SCHEDULER_SEED
    return random.Random(seed)


def generate_schedule(
    db: Session,
    organization_id: str,
    week_start: date,
    seed: Optional[int] = None,
) -> ScheduleResult:
    """
    Generate a schedule for an organization for a given week.

    main entry point for schedule generation. This function:
    1. Loads all relevant data from the database
    2. Runs the weekly scheduler
    3. Returns the result with generated assignments (not persisted)

    Args:
        db: Database session
        organization_id: The organization to generate schedule for
        week_start: Monday of the target week
        seed: optional seed for the scoring tiebreaker

    Returns:
        ScheduleResult containing:
        - assignments: list of new Shift objects
        - warnings: shortage warnings per template/day
        - under_hours: workers below their minimum weekly hours
        - stats: totals and per-day breakdown

    Raises:
        SchedulingInputError: If week_start is not a Monday or the stored data is malformed

    Example:
        from datetime import date
        from app.services.scheduling import generate_schedule

        result = generate_schedule(db, organization_id="org-1", week_start=date(2025, 1, 20))

        for shift in result.assignments:
            # Save shifts to database
            pass
    """
    context = load_schedule_context(db, organization_id, week_start)
    return generate_schedule_from_context(context, seed=seed)


def generate_schedule_from_context(
    context: ScheduleContext,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> ScheduleResult:
    """
    Generate a schedule from a pre-loaded context.

    Useful for testing or when you want to manipulate the context
    before solving.
    """
    return solve_schedule(
        context,
        rng=rng or make_rng(seed),
        jitter_max=settings.SCHEDULER_JITTER_MAX,
    )


def calculate_worker_cost(
    db: Session,
    organization_id: str,
    worker_id: str,
    start: date,
    end: date,
) -> WorkerCost:
    """
    Cost one worker's recorded shifts in [start, end].

    Shifts from the start of the ISO week and of the month containing `start`
    are loaded as well so weekly and monthly thresholds see the whole period;
    only shifts dated in [start, end] are costed. Each shift is priced with its
    own effective rule set (template override or organization default).
    """
    worker = load_worker(db, organization_id, worker_id)
    if worker is None:
        raise SchedulingInputError(f"Worker {worker_id} not found")

    org_rules = load_organization_overtime_rules(db, organization_id)
    templates = {t.id: t for t in load_templates(db, organization_id)}

    history_start = min(start - timedelta(days=start.weekday()), start.replace(day=1))
    shifts = load_shifts(db, organization_id, history_start, end, worker_id=worker_id)
    holidays = load_public_holidays(db, organization_id, history_start, end)
    logger.debug("Costing %s: %d shifts loaded from %s", worker_id, len(shifts), history_start)

    def rules_for(shift: Shift) -> OvertimeRules:
        return resolve_overtime_rules(org_rules, templates.get(shift.template_id))

    return cost_for(
        worker,
        shifts,
        org_rules,
        holidays,
        rules_for=rules_for,
        report_from=start,
        report_to=end,
    )
