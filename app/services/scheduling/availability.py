"""
Availability checking utilities.
Determines if a worker can be considered for any shift on a given date.
"""

from datetime import date
from typing import Iterable

from .types import (
    Worker,
    WorkerStatus,
    Leave,
)
from .time_utils import runs_on_day


def is_worker_on_leave(worker_id: str, target: date, leaves: Iterable[Leave]) -> bool:
    """Check if worker has approved leave covering the date."""
    for leave in leaves:
        if leave.worker_id != worker_id:
            continue
        if leave.covers(target):
            return True
    return False


def is_worker_available(
    worker: Worker,
    target: date,
    leaves: Iterable[Leave],
) -> tuple[bool, str]:
    """
    Check if a worker can be put in the candidate pool for a date.
    """
    if worker.status != WorkerStatus.ACTIVE:
        return False, f"Worker status is {worker.status.value}"

    if not runs_on_day(worker.available_days, target.weekday()):
        return False, "Worker not available on this weekday"

    if is_worker_on_leave(worker.id, target, leaves):
        return False, "Worker has approved leave"

    return True, "OK"


def get_available_workers(
    workers: list[Worker],
    target: date,
    leaves: list[Leave],
    busy_worker_ids: set[str],
) -> list[Worker]:
    """
    Candidate pool for a date: available workers not already holding a shift on it.
    Input order is preserved.
    """
    pool = []
    for worker in workers:
        if worker.id in busy_worker_ids:
            continue
        can_work, _ = is_worker_available(worker, target, leaves)
        if can_work:
            pool.append(worker)
    return pool
