"""
Overtime and premium cost calculation for a worker's shifts.

Salaried workers cost their monthly salary, full stop.

Hourly workers:
- base: every paid hour at cost_per_hour
- overtime: daily tier 1 / tier 2 on the running gross hours of the shift's date,
  weekly (ISO week) and monthly thresholds on running paid totals;
  per hour the highest applicable multiplier wins
- premium: night window, early-morning window, weekend and public holiday;
  per hour the highest applicable multiplier wins (no double counting of the same time)
- overtime and premium uplifts are added on top of base pay

All of a worker's shifts go through one chronological pass, so the running totals
are shared even when shifts use different rule sets (template overrides).
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, Optional

from .errors import MissingPayFieldError, SchedulingInputError
from .types import (
    DailyCost,
    OvertimeRules,
    PayType,
    PublicHoliday,
    Shift,
    Worker,
    WorkerCost,
)
from .time_utils import (
    is_weekend,
    iso_week_key,
    month_key,
    split_at_midnight,
    window_intervals_for_day,
)

logger = logging.getLogger(__name__)

WEEKS_PER_MONTH = 4.33


@dataclass
class _Segment:
    """A slice of a shift on one calendar day with a single premium multiplier."""
    day: date
    gross_hours: float
    paid_ratio: float
    premium: float

    @property
    def hours(self) -> float:
        return self.gross_hours * self.paid_ratio


def validate_overtime_rules(rules: OvertimeRules) -> None:
    """Raise SchedulingInputError for a malformed rule set."""
    for name in ("daily_threshold", "daily_threshold_2", "weekly_threshold", "monthly_threshold"):
        if getattr(rules, name) < 0:
            raise SchedulingInputError(f"Overtime rule {name} must not be negative")

    for name in (
        "daily_multiplier", "daily_multiplier_2", "weekly_multiplier", "monthly_multiplier",
        "weekend_multiplier", "night_multiplier", "early_multiplier", "holiday_multiplier",
    ):
        if getattr(rules, name) < 1:
            raise SchedulingInputError(f"Overtime rule {name} must be at least 1.0")

    if rules.daily_threshold > 0 and rules.daily_threshold_2 > 0:
        if rules.daily_threshold_2 <= rules.daily_threshold:
            raise SchedulingInputError(
                "daily_threshold_2 must be strictly above daily_threshold"
            )


def premium_multiplier(
    rules: OvertimeRules,
    day: date,
    in_night: bool,
    in_early: bool,
    holidays: dict[date, PublicHoliday],
) -> float:
    """Highest premium that applies to time on this calendar day."""
    if not rules.enabled:
        return 1.0
    applicable = [1.0]
    if in_night:
        applicable.append(rules.night_multiplier)
    if in_early:
        applicable.append(rules.early_multiplier)
    if is_weekend(day):
        applicable.append(rules.weekend_multiplier)
    holiday = holidays.get(day)
    if holiday is not None:
        # a holiday's own multiplier beats the rule set's
        if holiday.multiplier is not None:
            applicable.append(holiday.multiplier)
        else:
            applicable.append(rules.holiday_multiplier)
    return max(applicable)


def _inside(moment: datetime, intervals: list[tuple[datetime, datetime]]) -> bool:
    return any(start <= moment < end for start, end in intervals)


def split_shift(shift: Shift, rules: OvertimeRules, holidays: dict[date, PublicHoliday]) -> list[_Segment]:
    """
    Cut a shift at midnight and at premium window boundaries.
    Paid hours are spread evenly over the gross span (break position is unknown).
    """
    start_dt, end_dt = shift.start_datetime, shift.end_datetime
    gross_seconds = (end_dt - start_dt).total_seconds()
    if gross_seconds <= 0 or shift.hours <= 0:
        return []
    paid_ratio = shift.hours * 3600 / gross_seconds

    segments = []
    for seg_start, seg_end in split_at_midnight(start_dt, end_dt):
        day = seg_start.date()
        night = window_intervals_for_day(day, rules.night_start, rules.night_end)
        early = window_intervals_for_day(day, rules.early_start, rules.early_end)

        cuts = {seg_start, seg_end}
        for w_start, w_end in night + early:
            for point in (w_start, w_end):
                if seg_start < point < seg_end:
                    cuts.add(point)
        points = sorted(cuts)

        for lo, hi in zip(points, points[1:]):
            multiplier = premium_multiplier(
                rules, day, _inside(lo, night), _inside(lo, early), holidays
            )
            segments.append(_Segment(
                day=day,
                gross_hours=(hi - lo).total_seconds() / 3600,
                paid_ratio=paid_ratio,
                premium=multiplier,
            ))
    return segments


def overtime_bands(
    rules: OvertimeRules,
    hours: float,
    day_total: float,
    week_total: float,
    month_total: float,
    paid_ratio: float = 1.0,
) -> list[tuple[float, float]]:
    """
    Split `hours` of gross time worked on top of the running totals into
    (paid hours, multiplier) bands.

    day_total counts gross hours; week_total and month_total count paid hours,
    and paid_ratio converts gross time into paid time. The highest applicable
    overtime multiplier wins for each band.
    """
    if not rules.enabled:
        return [(hours * paid_ratio, 1.0)]

    limits = [
        (day_total, rules.daily_threshold, rules.daily_multiplier, 1.0),
        (day_total, rules.daily_threshold_2, rules.daily_multiplier_2, 1.0),
        (week_total, rules.weekly_threshold, rules.weekly_multiplier, paid_ratio),
        (month_total, rules.monthly_threshold, rules.monthly_multiplier, paid_ratio),
    ]
    active = [limit for limit in limits if limit[1] > 0]

    cuts = {0.0, hours}
    for base, threshold, _, scale in active:
        offset = (threshold - base) / scale
        if 0 < offset < hours:
            cuts.add(offset)
    points = sorted(cuts)

    bands = []
    for lo, hi in zip(points, points[1:]):
        mid = (lo + hi) / 2
        multiplier = 1.0
        for base, threshold, mult, scale in active:
            if base + mid * scale > threshold:
                multiplier = max(multiplier, mult)
        bands.append(((hi - lo) * paid_ratio, multiplier))
    return bands


def _in_period(day: date, report_from: Optional[date], report_to: Optional[date]) -> bool:
    if report_from is not None and day < report_from:
        return False
    if report_to is not None and day > report_to:
        return False
    return True


def _salaried_cost(worker: Worker, shifts: list[Shift]) -> WorkerCost:
    if worker.monthly_salary is None:
        raise MissingPayFieldError(worker.id, "monthly_salary")

    per_day: dict[date, float] = defaultdict(float)
    for shift in shifts:
        per_day[shift.date] += shift.hours

    hours = round(sum(per_day.values()), 2)
    effective_rate = 0.0
    if worker.fixed_hours_week:
        effective_rate = round(worker.monthly_salary / (worker.fixed_hours_week * WEEKS_PER_MONTH), 2)

    return WorkerCost(
        worker_id=worker.id,
        type=PayType.SALARIED,
        hours=hours,
        base_cost=worker.monthly_salary,
        total_cost=worker.monthly_salary,
        effective_rate=effective_rate,
        breakdown=[DailyCost(date=d, hours=round(h, 2), is_weekend=is_weekend(d)) for d, h in sorted(per_day.items())],
    )


def _hourly_cost(
    worker: Worker,
    shifts: list[Shift],
    rules_for: Callable[[Shift], OvertimeRules],
    holidays: dict[date, PublicHoliday],
    report_from: Optional[date],
    report_to: Optional[date],
) -> WorkerCost:
    if worker.cost_per_hour is None:
        raise MissingPayFieldError(worker.id, "cost_per_hour")
    rate = worker.cost_per_hour

    lines: dict[date, DailyCost] = {}
    day_totals: dict[date, float] = defaultdict(float)  # gross
    week_totals: dict[tuple[int, int], float] = defaultdict(float)  # paid
    month_totals: dict[tuple[int, int], float] = defaultdict(float)  # paid

    for shift in sorted(shifts, key=lambda s: s.start_datetime):
        rules = rules_for(shift)
        d = shift.date
        reported = _in_period(d, report_from, report_to)

        for segment in split_shift(shift, rules, holidays):
            bands = overtime_bands(
                rules,
                segment.gross_hours,
                day_totals[d],
                week_totals[iso_week_key(d)],
                month_totals[month_key(d)],
                segment.paid_ratio,
            )
            if reported:
                line = lines.setdefault(d, DailyCost(date=d))
                # flags follow the calendar day the time falls on
                if is_weekend(segment.day):
                    line.is_weekend = True
                holiday = holidays.get(segment.day)
                if holiday is not None and line.holiday is None:
                    line.holiday = holiday.name
                for hours, ot_multiplier in bands:
                    line.hours += hours
                    line.base_cost += hours * rate
                    line.overtime_cost += hours * rate * (ot_multiplier - 1)
                    line.premium_cost += hours * rate * (segment.premium - 1)
                    if ot_multiplier > 1:
                        line.overtime_hours += hours
                    if segment.premium > 1:
                        line.premium_hours += hours

            day_totals[d] += segment.gross_hours
            week_totals[iso_week_key(d)] += segment.hours
            month_totals[month_key(d)] += segment.hours

    breakdown = []
    for d in sorted(lines):
        line = lines[d]
        total = line.base_cost + line.overtime_cost + line.premium_cost
        breakdown.append(DailyCost(
            date=d,
            hours=round(line.hours, 2),
            overtime_hours=round(line.overtime_hours, 2),
            premium_hours=round(line.premium_hours, 2),
            base_cost=round(line.base_cost, 2),
            overtime_cost=round(line.overtime_cost, 2),
            premium_cost=round(line.premium_cost, 2),
            total_cost=round(total, 2),
            is_weekend=line.is_weekend,
            holiday=line.holiday,
        ))

    hours = sum(line.hours for line in lines.values())
    base = sum(line.base_cost for line in lines.values())
    overtime = sum(line.overtime_cost for line in lines.values())
    premium = sum(line.premium_cost for line in lines.values())
    total = base + overtime + premium

    return WorkerCost(
        worker_id=worker.id,
        type=PayType.HOURLY,
        hours=round(hours, 2),
        base_cost=round(base, 2),
        overtime_cost=round(overtime, 2),
        premium_cost=round(premium, 2),
        total_cost=round(total, 2),
        effective_rate=round(total / hours, 2) if hours else rate,
        breakdown=breakdown,
    )


def cost_for(
    worker: Worker,
    shifts: Iterable[Shift],
    overtime_rules: Optional[OvertimeRules] = None,
    holidays: Iterable[PublicHoliday] = (),
    *,
    rules_for: Optional[Callable[[Shift], OvertimeRules]] = None,
    report_from: Optional[date] = None,
    report_to: Optional[date] = None,
) -> WorkerCost:
    """
    Compute the labor cost of one worker's shifts.

    Args:
        worker: the worker being costed
        shifts: shifts for the reporting period plus any earlier shifts of the same
            ISO week / month; shifts of other workers are ignored
        overtime_rules: rule set used for every shift when rules_for is not given;
            None = overtime disabled
        holidays: public holidays
        rules_for: effective rule set per shift (template override or organization
            default, resolved by the caller)
        report_from, report_to: only shifts dated in this range are costed; shifts
            outside it still feed the daily/weekly/monthly running totals

    Returns:
        WorkerCost with base/overtime/premium split and a per-date breakdown

    Raises:
        MissingPayFieldError: worker lacks pay fields for its pay type
        SchedulingInputError: malformed overtime rules or holiday multiplier
    """
    rules = overtime_rules or OvertimeRules()
    validate_overtime_rules(rules)
    if rules_for is None:
        rules_for = lambda shift: rules

    own_shifts = [s for s in shifts if s.worker_id == worker.id]
    for shift_rules in {id(r): r for r in map(rules_for, own_shifts)}.values():
        validate_overtime_rules(shift_rules)

    holiday_map = {}
    for holiday in holidays:
        if holiday.multiplier is not None and holiday.multiplier < 1:
            raise SchedulingInputError(f"Holiday {holiday.date} multiplier must be at least 1.0")
        holiday_map[holiday.date] = holiday

    if worker.is_salaried:
        reported = [s for s in own_shifts if _in_period(s.date, report_from, report_to)]
        result = _salaried_cost(worker, reported)
    else:
        result = _hourly_cost(worker, own_shifts, rules_for, holiday_map, report_from, report_to)

    logger.debug(
        "Cost for %s: %.2fh, total %.2f (overtime %.2f, premium %.2f)",
        worker.id, result.hours, result.total_cost, result.overtime_cost, result.premium_cost,
    )
    return result
