import pytest
from datetime import timedelta

from app.services.scheduling.types import Leave, WorkerStatus
from app.services.scheduling.availability import (
    is_worker_on_leave,
    is_worker_available,
    get_available_workers,
)

from conftest import get_test_monday, make_worker


class TestIsWorkerOnLeave:

    def test_no_leave(self):
        assert is_worker_on_leave("w1", get_test_monday(), []) is False

    def test_inside_range(self):
        monday = get_test_monday()
        leaves = [Leave(worker_id="w1", start_date=monday, end_date=monday + timedelta(days=2))]
        assert is_worker_on_leave("w1", monday + timedelta(days=2), leaves) is True
        assert is_worker_on_leave("w1", monday + timedelta(days=3), leaves) is False

    def test_open_ended_leave_is_single_day(self):
        monday = get_test_monday()
        leaves = [Leave(worker_id="w1", start_date=monday)]
        assert is_worker_on_leave("w1", monday, leaves) is True
        assert is_worker_on_leave("w1", monday + timedelta(days=1), leaves) is False

    def test_other_workers_leave_ignored(self):
        monday = get_test_monday()
        leaves = [Leave(worker_id="w2", start_date=monday, end_date=monday)]
        assert is_worker_on_leave("w1", monday, leaves) is False


class TestIsWorkerAvailable:

    def test_active_worker_available(self):
        ok, _ = is_worker_available(make_worker("w1"), get_test_monday(), [])
        assert ok is True

    @pytest.mark.parametrize("status", [WorkerStatus.INACTIVE, WorkerStatus.ON_LEAVE])
    def test_non_active_excluded(self, status):
        ok, reason = is_worker_available(make_worker("w1", status=status), get_test_monday(), [])
        assert ok is False
        assert status.value in reason

    def test_available_days_respected(self):
        worker = make_worker("w1", available_days=[1, 2])  # Tue, Wed
        monday = get_test_monday()
        assert is_worker_available(worker, monday, [])[0] is False
        assert is_worker_available(worker, monday + timedelta(days=1), [])[0] is True

    def test_leave_excludes(self):
        monday = get_test_monday()
        leaves = [Leave(worker_id="w1", start_date=monday, end_date=monday)]
        ok, reason = is_worker_available(make_worker("w1"), monday, leaves)
        assert ok is False
        assert "leave" in reason


class TestGetAvailableWorkers:

    def test_skips_busy_and_preserves_order(self):
        workers = [make_worker("w3"), make_worker("w1"), make_worker("w2")]
        pool = get_available_workers(workers, get_test_monday(), [], busy_worker_ids={"w1"})
        assert [w.id for w in pool] == ["w3", "w2"]
