import pytest
from datetime import time, timedelta

from app.services.scheduling.types import (
    Shift,
    ScheduleContext,
    IncompatibleWorkers,
    MinRestHours,
)
from app.services.scheduling.constraints import (
    get_shifts_on_date,
    calculate_worker_hours,
    find_double_bookings,
    find_overfilled,
    find_cap_violations,
    find_rest_violations,
    find_incompatible_pairs,
    validate_schedule,
)

from conftest import get_test_monday, make_worker, make_template


def _shift(worker_id, day_offset, start=time(9, 0), end=time(17, 0), template_id="t1", hours=8.0):
    return Shift(worker_id=worker_id, date=get_test_monday() + timedelta(days=day_offset),
                 start_time=start, end_time=end, hours=hours, template_id=template_id)


class TestGetShiftsOnDate:

    def test_filters_by_date(self):
        shifts = [_shift("w1", 0), _shift("w2", 1)]
        assert [s.worker_id for s in get_shifts_on_date(shifts, get_test_monday())] == ["w1"]

    def test_filters_by_template(self):
        shifts = [_shift("w1", 0, template_id="t1"), _shift("w2", 0, template_id="t2")]
        found = get_shifts_on_date(shifts, get_test_monday(), "t2")
        assert [s.worker_id for s in found] == ["w2"]


class TestCalculateWorkerHours:

    def test_sums_paid_hours(self):
        shifts = [_shift("w1", 0, hours=7.5), _shift("w1", 1), _shift("w2", 1)]
        assert calculate_worker_hours(shifts, "w1") == 15.5

    def test_no_shifts(self):
        assert calculate_worker_hours([], "w1") == 0


class TestFinders:

    def test_double_booking(self):
        shifts = [_shift("w1", 0), _shift("w1", 0, start=time(18, 0), end=time(22, 0), template_id="t2")]
        assert find_double_bookings(shifts) == [("w1", get_test_monday())]

    def test_overfilled(self):
        template = make_template("t1", time(9, 0), time(17, 0), days_of_week=[0])
        shifts = [_shift("w1", 0), _shift("w2", 0)]
        days = [get_test_monday() + timedelta(days=i) for i in range(7)]
        assert find_overfilled(shifts, [template], days) == [("t1", get_test_monday(), 2, 1)]

    def test_cap_violation(self):
        worker = make_worker("w1", max_hours_week=10)
        shifts = [_shift("w1", 0), _shift("w1", 1)]
        assert find_cap_violations(shifts, [worker]) == {"w1": 6.0}

    def test_rest_violation(self):
        early = make_template("early", time(6, 0), time(14, 0), rules=[MinRestHours(hours=11)])
        shifts = [
            _shift("w1", 0, start=time(15, 0), end=time(23, 0), template_id="late"),
            _shift("w1", 1, start=time(6, 0), end=time(14, 0), template_id="early"),
        ]
        violations = find_rest_violations(shifts, [early])
        assert violations == [("w1", get_test_monday() + timedelta(days=1), 7.0)]

    def test_rest_rule_only_on_later_template(self):
        late = make_template("late", time(15, 0), time(23, 0), rules=[MinRestHours(hours=11)])
        shifts = [
            _shift("w1", 0, start=time(15, 0), end=time(23, 0), template_id="late"),
            _shift("w1", 1, start=time(6, 0), end=time(14, 0), template_id="early"),
        ]
        assert find_rest_violations(shifts, [late]) == []

    def test_incompatible_pair(self):
        template = make_template("t1", time(9, 0), time(17, 0), rules=[IncompatibleWorkers("w1", "w2")])
        shifts = [_shift("w1", 0), _shift("w2", 0), _shift("w2", 1)]
        assert find_incompatible_pairs(shifts, [template]) == [("t1", get_test_monday(), "w1", "w2")]


class TestValidateSchedule:

    def test_clean_roster(self):
        template = make_template("t1", time(9, 0), time(17, 0))
        context = ScheduleContext(week_start=get_test_monday(), workers=[make_worker("w1")], templates=[template])
        result = validate_schedule(context, [_shift("w1", i) for i in range(5)])

        assert result.valid is True

    def test_collects_violations(self):
        template = make_template("t1", time(9, 0), time(17, 0))
        context = ScheduleContext(
            week_start=get_test_monday(),
            workers=[make_worker("w1", max_hours_week=8)],
            templates=[template],
        )
        shifts = [_shift("w1", 0), _shift("w1", 0, template_id="t2"), _shift("w1", 1)]
        result = validate_schedule(context, shifts)

        assert result.valid is False
        assert result.double_bookings == [("w1", get_test_monday())]
        assert result.cap_violations == {"w1": 16.0}

    def test_ignores_shifts_outside_week(self):
        template = make_template("t1", time(9, 0), time(17, 0))
        context = ScheduleContext(
            week_start=get_test_monday(),
            workers=[make_worker("w1", max_hours_week=8)],
            templates=[template],
        )
        result = validate_schedule(context, [_shift("w1", -1), _shift("w1", 0)])

        assert result.valid is True
