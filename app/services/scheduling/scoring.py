"""
Candidate scoring for (worker, template, day) triples.

Higher = better. Hard-ineligible pairs never reach the scorer.
The jitter is the only non-deterministic term; pass a seeded random.Random
or jitter_max=0 for reproducible runs.
"""

import random
from typing import Optional

from .types import (
    Worker,
    ShiftTemplate,
    ShiftPreference,
)
from .time_utils import shift_period


WEIGHT_PREFERENCE_MATCH = 25
WEIGHT_PREFERENCE_ANY = 10
WEIGHT_SALARIED = 50
WEIGHT_HOURS_DEFICIT = 20  # max bonus when the worker has no hours yet
WEIGHT_SHOP_MATCH = 8
DEFAULT_JITTER_MAX = 3

DEFAULT_SALARIED_TARGET = 40
DEFAULT_HOURLY_TARGET = 20
MAX_HOURS_SLACK = 8  # max_hours_week fallback is target + slack


def target_hours(worker: Worker) -> float:
    """Weekly target: fixed hours for salaried, contracted hours for hourly."""
    if worker.is_salaried:
        return worker.fixed_hours_week or DEFAULT_SALARIED_TARGET
    return worker.contracted_hours or DEFAULT_HOURLY_TARGET


def weekly_cap(worker: Worker) -> float:
    """
    Hard weekly cap on paid hours.
    max_hours_week (fallback target + 8); salaried workers are also capped by fixed_hours_week.
    """
    cap = worker.max_hours_week or target_hours(worker) + MAX_HOURS_SLACK
    if worker.is_salaried and worker.fixed_hours_week:
        cap = min(cap, worker.fixed_hours_week)
    return cap


def preference_score(worker: Worker, template: ShiftTemplate) -> int:
    pref = worker.shift_preference or ShiftPreference.ANY
    if pref == ShiftPreference.ANY:
        return WEIGHT_PREFERENCE_ANY
    if pref.value == shift_period(template.start_time).value:
        return WEIGHT_PREFERENCE_MATCH
    return 0


def deficit_score(worker: Worker, current_hours: float) -> int:
    """Bounded bonus for workers further below their weekly target."""
    target = target_hours(worker)
    deficit = max(0.0, target - current_hours)
    ratio = min(1.0, deficit / max(target, 1))
    return round(ratio * WEIGHT_HOURS_DEFICIT)


def score_candidate(
    worker: Worker,
    template: ShiftTemplate,
    current_hours: float,
    rng: Optional[random.Random] = None,
    jitter_max: int = DEFAULT_JITTER_MAX,
) -> int:
    """
    Score a potential assignment.

    Factors:
    - Shift preference vs template time-of-day bucket
    - Salaried priority (their contracted hours are filled first)
    - Distance below weekly target hours
    - Preferred shop
    - Small random tiebreaker
    """
    score = preference_score(worker, template)

    if worker.is_salaried:
        score += WEIGHT_SALARIED

    score += deficit_score(worker, current_hours)

    if worker.shop_id and worker.shop_id == template.shop_id:
        score += WEIGHT_SHOP_MATCH

    if jitter_max > 0:
        score += (rng or random).randint(0, jitter_max)

    return score
