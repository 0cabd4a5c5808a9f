import random
from datetime import time

from app.services.scheduling.types import Worker, PayType, ShiftPreference
from app.services.scheduling.scoring import (
    WEIGHT_PREFERENCE_ANY,
    WEIGHT_PREFERENCE_MATCH,
    WEIGHT_SALARIED,
    WEIGHT_HOURS_DEFICIT,
    WEIGHT_SHOP_MATCH,
    target_hours,
    weekly_cap,
    preference_score,
    deficit_score,
    score_candidate,
)

from conftest import make_worker, make_template


class TestTargetsAndCaps:

    def test_hourly_target_is_contracted(self):
        assert target_hours(make_worker("w1", contracted_hours=30)) == 30

    def test_hourly_defaults(self):
        worker = Worker(id="w1")
        assert target_hours(worker) == 20
        assert weekly_cap(worker) == 28

    def test_explicit_max(self):
        assert weekly_cap(make_worker("w1", max_hours_week=45)) == 45

    def test_salaried_capped_by_fixed_hours(self, salaried_worker):
        assert weekly_cap(salaried_worker) == 40

    def test_salaried_cap_uses_lower_of_max_and_fixed(self):
        worker = Worker(id="s1", pay_type=PayType.SALARIED, monthly_salary=3000,
                        fixed_hours_week=40, max_hours_week=35)
        assert weekly_cap(worker) == 35


class TestPreferenceScore:

    def test_match(self):
        worker = make_worker("w1", shift_preference=ShiftPreference.MORNING)
        template = make_template("t1", time(8, 0), time(16, 0))
        assert preference_score(worker, template) == WEIGHT_PREFERENCE_MATCH

    def test_mismatch(self):
        worker = make_worker("w1", shift_preference=ShiftPreference.EVENING)
        template = make_template("t1", time(8, 0), time(16, 0))
        assert preference_score(worker, template) == 0

    def test_any(self):
        worker = make_worker("w1")
        template = make_template("t1", time(8, 0), time(16, 0))
        assert preference_score(worker, template) == WEIGHT_PREFERENCE_ANY


class TestDeficitScore:

    def test_full_bonus_with_no_hours(self):
        assert deficit_score(make_worker("w1", contracted_hours=40), 0) == WEIGHT_HOURS_DEFICIT

    def test_half_way(self):
        assert deficit_score(make_worker("w1", contracted_hours=40), 20) == WEIGHT_HOURS_DEFICIT // 2

    def test_no_bonus_at_target(self):
        assert deficit_score(make_worker("w1", contracted_hours=40), 45) == 0


class TestScoreCandidate:

    def test_deterministic_without_jitter(self):
        worker = make_worker("w1")
        template = make_template("t1", time(8, 0), time(16, 0))
        score = score_candidate(worker, template, 0, jitter_max=0)
        assert score == WEIGHT_PREFERENCE_ANY + WEIGHT_HOURS_DEFICIT

    def test_salaried_priority(self, salaried_worker):
        template = make_template("t1", time(8, 0), time(16, 0))
        hourly = score_candidate(make_worker("w1"), template, 0, jitter_max=0)
        salaried = score_candidate(salaried_worker, template, 0, jitter_max=0)
        assert salaried - hourly == WEIGHT_SALARIED

    def test_shop_match(self):
        template = make_template("t1", time(8, 0), time(16, 0), shop_id="shop-1")
        home = score_candidate(make_worker("w1", shop_id="shop-1"), template, 0, jitter_max=0)
        away = score_candidate(make_worker("w2", shop_id="shop-2"), template, 0, jitter_max=0)
        assert home - away == WEIGHT_SHOP_MATCH

    def test_jitter_is_bounded(self):
        worker = make_worker("w1")
        template = make_template("t1", time(8, 0), time(16, 0))
        base = score_candidate(worker, template, 0, jitter_max=0)
        rng = random.Random(7)
        for _ in range(50):
            score = score_candidate(worker, template, 0, rng=rng, jitter_max=3)
            assert base <= score <= base + 3

    def test_seeded_rng_reproducible(self):
        worker = make_worker("w1")
        template = make_template("t1", time(8, 0), time(16, 0))
        first = [score_candidate(worker, template, 0, rng=random.Random(1)) for _ in range(5)]
        second = [score_candidate(worker, template, 0, rng=random.Random(1)) for _ in range(5)]
        assert first == second
