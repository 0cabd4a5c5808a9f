import pytest
from datetime import date, time

from app.services.scheduling.types import (
    Worker,
    PayType,
    ShiftPreference,
    ShiftTemplate,
    OvertimeRules,
)


def get_test_monday() -> date:
    # returns a fixed Monday for deterministic tests
    return date(2025, 1, 20)


def make_worker(worker_id: str, **kwargs) -> Worker:
    # hourly worker with generous caps unless overridden
    defaults = dict(
        name=worker_id.upper(),
        cost_per_hour=10.0,
        contracted_hours=40,
        max_hours_week=60,
    )
    defaults.update(kwargs)
    return Worker(id=worker_id, **defaults)


def make_template(template_id: str, start: time, end: time, **kwargs) -> ShiftTemplate:
    defaults = dict(shop_id="shop-1", name=template_id)
    defaults.update(kwargs)
    return ShiftTemplate(id=template_id, start_time=start, end_time=end, **defaults)


@pytest.fixture
def hourly_worker() -> Worker:
    return make_worker("w1", cost_per_hour=10.0)


@pytest.fixture
def salaried_worker() -> Worker:
    return Worker(
        id="s1", name="Sal", pay_type=PayType.SALARIED,
        monthly_salary=3000.0, fixed_hours_week=40,
    )


@pytest.fixture
def three_workers() -> list[Worker]:
    return [
        make_worker("w1", shift_preference=ShiftPreference.MORNING),
        make_worker("w2", shift_preference=ShiftPreference.EVENING),
        make_worker("w3"),
    ]


@pytest.fixture
def morning_template() -> ShiftTemplate:
    return make_template("morning", time(8, 0), time(16, 0))


@pytest.fixture
def evening_template() -> ShiftTemplate:
    return make_template("evening", time(16, 0), time(23, 0))


@pytest.fixture
def night_template() -> ShiftTemplate:
    return make_template("night", time(22, 0), time(6, 0))


@pytest.fixture
def overtime_rules() -> OvertimeRules:
    return OvertimeRules(
        enabled=True,
        daily_threshold=8,
        daily_multiplier=1.5,
        daily_threshold_2=12,
        daily_multiplier_2=2.0,
    )
