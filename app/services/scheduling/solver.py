"""
Weekly schedule solver using per-day greedy batch commitment.

Strategy:
1. Seed running state (hours, shifts per date, template fill) from existing shifts
2. For each day Monday -> Sunday:
   a. Work out open slots per template recurring today
   b. Build the candidate pool (active, available, not on leave, not already working)
   c. Hard-filter every (worker, template) pair, score the survivors
   d. Sort all of the day's pairs together and commit greedily
   e. Record shortages for templates still under headcount
3. Flag workers left under their minimum weekly hours
"""

import logging
import random
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from .errors import SchedulingInputError
from .types import (
    Worker,
    WorkerStatus,
    ShiftTemplate,
    Leave,
    Shift,
    ScheduleContext,
    ScheduleResult,
    ScheduleStats,
    DayStats,
    ShortageWarning,
    UnderHoursWarning,
)
from .availability import get_available_workers
from .rules import (
    check_template_rules,
    paid_hours,
    validate_rule_references,
    validate_template,
    violates_incompatibility,
)
from .scoring import (
    DEFAULT_JITTER_MAX,
    score_candidate,
    weekly_cap,
)
from .time_utils import (
    DAY_LABELS,
    datetime_ranges_overlap,
    is_morning_start,
    is_night_start,
    runs_on_day,
    shift_span,
)

logger = logging.getLogger(__name__)

HOURS_EPSILON = 1e-6


def required_workers(template: ShiftTemplate, weekday: int) -> int:
    """Headcount for a template on a weekday; required_by_day overrides the default."""
    if weekday in template.required_by_day:
        return template.required_by_day[weekday]
    return template.required_workers


class WeeklyScheduler:
    """
    Greedy weekly scheduler. One instance per scheduling request;
    all running state is local to the instance.
    """

    def __init__(
        self,
        context: ScheduleContext,
        rng: Optional[random.Random] = None,
        jitter_max: int = DEFAULT_JITTER_MAX,
    ):
        self.context = context
        self.rng = rng if rng is not None else random.Random()
        self.jitter_max = jitter_max
        self.assignments: list[Shift] = []
        self.warnings: list[ShortageWarning] = []
        self.worker_hours: dict[str, float] = {w.id: 0.0 for w in context.workers}
        self.worker_shifts: dict[str, dict[date, Shift]] = defaultdict(dict)  # worker_id -> date -> shift
        self.template_fill: dict[tuple[str, date], list[str]] = defaultdict(list)  # (template_id, date) -> worker ids

        # Initialize from existing shifts
        for shift in context.existing_shifts:
            self._record(shift)

    def solve(self) -> ScheduleResult:
        """
        Main solving method.

        Returns:
            ScheduleResult with new assignments, shortage/under-hours warnings and stats
        """
        self._validate()
        logger.info(
            "Scheduling week of %s: %d workers, %d templates, %d existing shifts",
            self.context.week_start,
            len(self.context.workers),
            len(self.context.templates),
            len(self.context.existing_shifts),
        )

        for offset in range(7):
            self._schedule_day(self.context.week_start + timedelta(days=offset))

        under_hours = self._check_under_hours()
        result = self._build_result(under_hours)

        logger.info(
            "Scheduled %d shifts (%.2fh), %d shortages, %d under-hours",
            result.stats.total_shifts,
            result.stats.total_hours,
            result.stats.unfilled,
            result.stats.under_hours,
        )
        return result

    def _validate(self):
        week_start = self.context.week_start
        if week_start.weekday() != 0:
            raise SchedulingInputError(
                f"week_start must be a Monday, got {week_start} ({week_start.strftime('%A')})"
            )

        for worker in self.context.workers:
            if (
                worker.min_hours_week is not None
                and worker.max_hours_week is not None
                and worker.min_hours_week > worker.max_hours_week
            ):
                raise SchedulingInputError(
                    f"Worker {worker.id} has min_hours_week above max_hours_week"
                )

        for template in self.context.templates:
            validate_template(template)
        validate_rule_references(self.context.templates, {w.id for w in self.context.workers})

    def _in_week(self, day: date) -> bool:
        return self.context.week_start <= day <= self.context.week_end

    def _record(self, shift: Shift):
        """Add a shift to running state (hours, per-date map, template fill)."""
        by_date = self.worker_shifts[shift.worker_id]
        if shift.date not in by_date:
            by_date[shift.date] = shift
        if self._in_week(shift.date):
            current = self.worker_hours.get(shift.worker_id, 0.0)
            self.worker_hours[shift.worker_id] = round(current + shift.hours, 2)
            if shift.template_id is not None:
                self.template_fill[(shift.template_id, shift.date)].append(shift.worker_id)

    def _previous_shift(self, worker_id: str, day: date) -> Optional[Shift]:
        """Most recent shift (latest end) on any date before day."""
        earlier = [s for d, s in self.worker_shifts[worker_id].items() if d < day]
        if not earlier:
            return None
        return max(earlier, key=lambda s: s.end_datetime)

    def _is_eligible(self, worker: Worker, template: ShiftTemplate, day: date) -> tuple[bool, str]:
        """Hard filters for a (worker, template, day) triple."""
        hours, _, _ = paid_hours(template)
        cap = weekly_cap(worker)
        if self.worker_hours[worker.id] + hours > cap + HOURS_EPSILON:
            return False, f"Would exceed weekly cap of {cap}h"

        # No night -> morning back-to-back
        yesterday = self.worker_shifts[worker.id].get(day - timedelta(days=1))
        if yesterday and is_night_start(yesterday.start_time) and is_morning_start(template.start_time):
            return False, "Night shift yesterday, morning shift today"

        previous = self._previous_shift(worker.id, day)
        if previous is not None:
            start_dt, end_dt = shift_span(day, template.start_time, template.end_time)
            if datetime_ranges_overlap(previous.start_datetime, previous.end_datetime, start_dt, end_dt):
                return False, f"Overlaps shift on {previous.date}"

        return check_template_rules(
            template,
            day,
            previous,
            self.worker_shifts[worker.id],
        )

    def _schedule_day(self, day: date):
        weekday = day.weekday()

        day_templates = sorted(
            (t for t in self.context.templates if runs_on_day(t.days_of_week, weekday)),
            key=lambda t: t.start_time,
        )
        if not day_templates:
            return

        open_slots: dict[str, int] = {}
        for template in day_templates:
            needed = required_workers(template, weekday)
            open_slots[template.id] = max(0, needed - len(self.template_fill[(template.id, day)]))
        open_templates = [t for t in day_templates if open_slots[t.id] > 0]

        busy = {wid for wid, by_date in self.worker_shifts.items() if day in by_date}
        pool = get_available_workers(self.context.workers, day, self.context.leaves, busy)

        # Score every surviving pair for the whole day in one batch
        candidates: list[tuple[int, int, int, Worker, ShiftTemplate]] = []
        for w_idx, worker in enumerate(pool):
            for t_idx, template in enumerate(open_templates):
                ok, reason = self._is_eligible(worker, template, day)
                if not ok:
                    logger.debug("%s: %s rejected for %s (%s)", day, worker.id, template.id, reason)
                    continue
                score = score_candidate(
                    worker,
                    template,
                    self.worker_hours[worker.id],
                    rng=self.rng,
                    jitter_max=self.jitter_max,
                )
                candidates.append((score, w_idx, t_idx, worker, template))

        candidates.sort(key=lambda c: (-c[0], c[1], c[2]))

        committed_today: set[str] = set()
        for score, _, _, worker, template in candidates:
            if worker.id in committed_today:
                continue
            if open_slots[template.id] <= 0:
                continue
            if violates_incompatibility(template, worker.id, self.template_fill[(template.id, day)]):
                logger.debug("%s: %s incompatible with crew on %s", day, worker.id, template.id)
                continue
            hours, _, _ = paid_hours(template)
            if self.worker_hours[worker.id] + hours > weekly_cap(worker) + HOURS_EPSILON:
                continue

            self._commit(worker, template, day)
            committed_today.add(worker.id)
            open_slots[template.id] -= 1
            logger.debug("%s: assigned %s to %s (score %d)", day, worker.id, template.id, score)

        for template in day_templates:
            needed = required_workers(template, weekday)
            filled = len(self.template_fill[(template.id, day)])
            if filled < needed:
                self.warnings.append(ShortageWarning(
                    date=day,
                    day=DAY_LABELS[weekday],
                    template_id=template.id,
                    template=template.label,
                    needed=needed,
                    filled=filled,
                    short_by=needed - filled,
                ))
                logger.info("%s: %s short by %d", day, template.label, needed - filled)

    def _commit(self, worker: Worker, template: ShiftTemplate, day: date):
        """Add an assignment to the schedule and update tracking."""
        hours, gross, break_mins = paid_hours(template)
        shift = Shift(
            worker_id=worker.id,
            template_id=template.id,
            shop_id=template.shop_id,
            date=day,
            start_time=template.start_time,
            end_time=template.end_time,
            hours=hours,
            gross_hours=gross,
            unpaid_break_minutes=break_mins,
            type=template.type,
            auto_scheduled=True,
        )
        self.assignments.append(shift)
        self._record(shift)

    def _check_under_hours(self) -> list[UnderHoursWarning]:
        under = []
        for worker in self.context.workers:
            if worker.status != WorkerStatus.ACTIVE:
                continue
            minimum = worker.min_hours_week or 0
            assigned = self.worker_hours[worker.id]
            if minimum > 0 and assigned < minimum:
                under.append(UnderHoursWarning(
                    worker_id=worker.id,
                    worker=worker.name or worker.id,
                    assigned=assigned,
                    minimum=minimum,
                ))
        return under

    def _build_result(self, under_hours: list[UnderHoursWarning]) -> ScheduleResult:
        stats = ScheduleStats(
            total_shifts=len(self.assignments),
            total_hours=round(sum(s.hours for s in self.assignments), 2),
            worker_hours={
                w.id: self.worker_hours[w.id]
                for w in self.context.workers
                if w.status == WorkerStatus.ACTIVE
            },
            unfilled=len(self.warnings),
            under_hours=len(under_hours),
        )

        for offset in range(7):
            day = self.context.week_start + timedelta(days=offset)
            day_shifts = [s for s in self.assignments if s.date == day]
            stats.per_day[day] = DayStats(
                day=DAY_LABELS[day.weekday()],
                shifts=len(day_shifts),
                hours=round(sum(s.hours for s in day_shifts), 2),
                workers=len({s.worker_id for s in day_shifts}),
            )

        return ScheduleResult(
            assignments=list(self.assignments),
            warnings=list(self.warnings),
            under_hours=under_hours,
            stats=stats,
        )


def solve_schedule(
    context: ScheduleContext,
    rng: Optional[random.Random] = None,
    jitter_max: int = DEFAULT_JITTER_MAX,
) -> ScheduleResult:
    """
    Main entry point for schedule generation.

    Args:
        context: ScheduleContext with all required data
        rng: random source for the scoring tiebreaker (seed it for reproducible runs)
        jitter_max: upper bound of the tiebreaker, 0 disables it

    Returns:
        ScheduleResult with generated shifts
    """
    scheduler = WeeklyScheduler(context, rng=rng, jitter_max=jitter_max)
    return scheduler.solve()


def schedule_week(
    workers: list[Worker],
    templates: list[ShiftTemplate],
    week_start: date,
    leaves: Iterable[Leave] = (),
    existing_shifts: Iterable[Shift] = (),
    *,
    rng: Optional[random.Random] = None,
    jitter_max: int = DEFAULT_JITTER_MAX,
) -> ScheduleResult:
    """Schedule one week from plain collections."""
    context = ScheduleContext(
        week_start=week_start,
        workers=list(workers),
        templates=list(templates),
        leaves=list(leaves),
        existing_shifts=list(existing_shifts),
    )
    return solve_schedule(context, rng=rng, jitter_max=jitter_max)
