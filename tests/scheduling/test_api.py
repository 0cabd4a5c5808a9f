import pytest
from datetime import date, time, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.database import Base
from app.db.models import (
    Organizations,
    Workers,
    WorkerStatus,
    PayType,
    ShiftTemplates,
    Leaves,
    LeaveStatus,
    Shifts,
    ShiftStatus,
    ShiftSource,
    PublicHolidays,
)
from app.main import app
from app.services.scheduling import generate_schedule, calculate_worker_cost, SchedulingInputError
from app.services.scheduling.data_loader import history_days
from app.services.scheduling.types import MaxConsecutiveDays, MinRestHours

from conftest import get_test_monday, make_template


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db):
    monday = get_test_monday()
    db.add(Organizations(id="org-1", name="Corner Shop",
                         overtime_rules={"enabled": True, "daily_threshold": 8}))
    db.add_all([
        Workers(id="w1", organization_id="org-1", first_name="Ana", last_name="Lee",
                status=WorkerStatus.ACTIVE, pay_type=PayType.HOURLY,
                cost_per_hour=10.0, contracted_hours=30, max_hours_week=40),
        Workers(id="w2", organization_id="org-1", first_name="Ben", last_name="Ng",
                status=WorkerStatus.ACTIVE, pay_type=PayType.HOURLY,
                cost_per_hour=12.0, contracted_hours=30, max_hours_week=40),
    ])
    db.add_all([
        ShiftTemplates(id="t-reg", organization_id="org-1", shop_id="shop-1", name="Day",
                       start_time=time(9, 0), end_time=time(17, 0), days_of_week=[0, 1, 2],
                       required_workers=1, rules=[{"type": "min_rest_hours", "hours": 11}]),
        ShiftTemplates(id="t-ot", organization_id="org-1", shop_id="shop-1", name="Stock take",
                       start_time=time(8, 0), end_time=time(18, 0), days_of_week=[4],
                       required_workers=0, overtime_override={"enabled": False}),
    ])
    db.add(Leaves(worker_id="w1", start_date=monday, end_date=monday, status=LeaveStatus.APPROVED))
    db.add_all([
        Shifts(organization_id="org-1", worker_id="w2", template_id="t-reg", shop_id="shop-1",
               shift_date=monday + timedelta(days=2), start_time=time(9, 0), end_time=time(17, 0),
               hours=8.0, status=ShiftStatus.PUBLISHED, source=ShiftSource.MANUAL),
        Shifts(organization_id="org-1", worker_id="w1", template_id="t-reg", shop_id="shop-1",
               shift_date=monday + timedelta(days=1), start_time=time(9, 0), end_time=time(17, 0),
               hours=8.0, status=ShiftStatus.CANCELLED, source=ShiftSource.MANUAL),
    ])
    db.add(PublicHolidays(organization_id="org-1", holiday_date=monday + timedelta(days=3), name="Holiday"))
    db.commit()
    return db


def _payload(**overrides):
    payload = {
        "week_start": "2025-01-20",
        "workers": [{"id": "w1", "cost_per_hour": 10, "max_hours_week": 60}],
        "templates": [{
            "id": "t1", "shop_id": "shop-1", "start_time": "09:00", "end_time": "17:00",
            "days_of_week": [0, 1],
        }],
    }
    payload.update(overrides)
    return payload


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestGenerateFromPayload:

    def test_generates_assignments(self, client):
        response = client.post("/api/v1/schedules/generate", json=_payload())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [a["date"] for a in body["assignments"]] == ["2025-01-20", "2025-01-21"]
        assert body["stats"]["total_hours"] == 16.0
        assert body["stats"]["per_day"]["2025-01-20"]["day"] == "Mon"
        assert body["validation"]["valid"] is True

    def test_reports_shortage(self, client):
        templates = [{"id": "t1", "shop_id": "shop-1", "start_time": "09:00", "end_time": "17:00",
                      "days_of_week": [0], "required_workers": 2}]
        body = client.post("/api/v1/schedules/generate", json=_payload(templates=templates)).json()

        assert body["success"] is False
        assert body["warnings"][0]["short_by"] == 1

    def test_accepts_rule_worker_list(self, client):
        workers = [{"id": "w1", "cost_per_hour": 10}, {"id": "w2", "cost_per_hour": 10}]
        templates = [{"id": "t1", "shop_id": "shop-1", "start_time": "09:00", "end_time": "17:00",
                      "days_of_week": [0], "required_workers": 2,
                      "rules": [{"type": "incompatible_workers", "workers": ["w1", "w2"]}]}]
        body = client.post("/api/v1/schedules/generate", json=_payload(workers=workers, templates=templates)).json()

        assert len(body["assignments"]) == 1

    def test_non_monday_is_422(self, client):
        response = client.post("/api/v1/schedules/generate", json=_payload(week_start="2025-01-21"))

        assert response.status_code == 422
        assert "Monday" in response.json()["detail"]

    def test_unknown_rule_is_422(self, client):
        templates = [{"id": "t1", "shop_id": "shop-1", "start_time": "09:00", "end_time": "17:00",
                      "rules": [{"type": "overtime"}]}]
        response = client.post("/api/v1/schedules/generate", json=_payload(templates=templates))

        assert response.status_code == 422


class TestGenerateForOrganization:

    def test_uses_stored_data(self, client, seeded):
        response = client.post("/api/v1/schedules/generate/org-1", params={"week_start": "2025-01-20", "seed": 1})

        assert response.status_code == 200
        by_date = {a["date"]: a["worker_id"] for a in response.json()["assignments"]}
        # w1 is on leave Monday, Wednesday is already covered, the cancelled Tuesday shift is ignored
        assert by_date["2025-01-20"] == "w2"
        assert "2025-01-21" in by_date
        assert "2025-01-22" not in by_date

    def test_unknown_organization(self, client, seeded):
        response = client.post("/api/v1/schedules/generate/nope", params={"week_start": "2025-01-20"})
        assert response.status_code == 404

    def test_generate_schedule_service(self, seeded):
        result = generate_schedule(seeded, "org-1", get_test_monday(), seed=5)

        assert result.stats.total_shifts == 2

    def test_service_rejects_non_monday(self, seeded):
        with pytest.raises(SchedulingInputError):
            generate_schedule(seeded, "org-1", date(2025, 1, 22))


class TestWorkerCost:

    def test_cost_from_payload(self, client):
        payload = {
            "worker": {"id": "w1", "cost_per_hour": 10},
            "shifts": [{"worker_id": "w1", "date": "2025-01-20", "start_time": "08:00",
                        "end_time": "18:00", "hours": 10}],
            "overtime_rules": {"enabled": True, "daily_threshold": 8, "night_start": ""},
        }
        response = client.post("/api/v1/costs/worker", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["type"] == "hourly"
        assert body["total_cost"] == 110.0
        assert body["breakdown"][0]["overtime_hours"] == 2.0

    def test_missing_rate_is_422(self, client):
        payload = {"worker": {"id": "w1"}, "shifts": []}
        response = client.post("/api/v1/costs/worker", json=payload)

        assert response.status_code == 422
        assert "cost_per_hour" in response.json()["detail"]

    def test_cost_from_database_uses_template_override(self, client, seeded):
        monday = get_test_monday()
        seeded.add_all([
            Shifts(organization_id="org-1", worker_id="w1", template_id="t-reg", shop_id="shop-1",
                   shift_date=monday + timedelta(days=7), start_time=time(8, 0), end_time=time(18, 0),
                   hours=10.0, status=ShiftStatus.PUBLISHED, source=ShiftSource.AUTO),
            Shifts(organization_id="org-1", worker_id="w1", template_id="t-ot", shop_id="shop-1",
                   shift_date=monday + timedelta(days=8), start_time=time(8, 0), end_time=time(18, 0),
                   hours=10.0, status=ShiftStatus.PUBLISHED, source=ShiftSource.AUTO),
        ])
        seeded.commit()

        response = client.get(
            "/api/v1/costs/org-1/workers/w1",
            params={"start": "2025-01-27", "end": "2025-02-02"},
        )

        assert response.status_code == 200
        body = response.json()
        # organization rules put 2h into overtime, the override disables it
        assert body["total_cost"] == 210.0
        assert body["hours"] == 20.0

    def test_cost_service_unknown_worker(self, seeded):
        with pytest.raises(SchedulingInputError):
            calculate_worker_cost(seeded, "org-1", "ghost", get_test_monday(), get_test_monday())

    def test_unknown_worker_is_404(self, client, seeded):
        response = client.get(
            "/api/v1/costs/org-1/workers/ghost",
            params={"start": "2025-01-20", "end": "2025-01-26"},
        )
        assert response.status_code == 404


WEEKLY_RULES = {"enabled": True, "daily_threshold": 0, "daily_threshold_2": 0, "weekly_threshold": 40}


@pytest.fixture
def weekly_org(db):
    db.add(Organizations(id="org-2", name="Warehouse", overtime_rules=WEEKLY_RULES))
    db.add(Workers(id="w5", organization_id="org-2", first_name="Cy",
                   status=WorkerStatus.ACTIVE, pay_type=PayType.HOURLY, cost_per_hour=10.0))
    db.add_all([
        ShiftTemplates(id="t-a", organization_id="org-2", shop_id="shop-1", name="Day",
                       start_time=time(8, 0), end_time=time(18, 0), required_workers=0),
        ShiftTemplates(id="t-b", organization_id="org-2", shop_id="shop-1", name="Inventory",
                       start_time=time(8, 0), end_time=time(18, 0), required_workers=0,
                       overtime_override=dict(WEEKLY_RULES)),
    ])
    db.commit()
    return db


def _add_weekdays(db, template_ids):
    monday = get_test_monday()
    db.add_all([
        Shifts(organization_id="org-2", worker_id="w5", template_id=template_id, shop_id="shop-1",
               shift_date=monday + timedelta(days=i), start_time=time(8, 0), end_time=time(18, 0),
               hours=10.0, status=ShiftStatus.PUBLISHED, source=ShiftSource.MANUAL)
        for i, template_id in enumerate(template_ids)
    ])
    db.commit()


class TestStoredWorkerCostTotals:

    def test_weekly_total_spans_template_overrides(self, client, weekly_org):
        _add_weekdays(weekly_org, ["t-a", "t-a", "t-a", "t-b", "t-b"])

        body = client.get("/api/v1/costs/org-2/workers/w5",
                          params={"start": "2025-01-20", "end": "2025-01-26"}).json()

        assert body["hours"] == 50.0
        assert body["overtime_cost"] == 50.0
        assert body["total_cost"] == 550.0

    def test_mid_week_start_counts_earlier_hours(self, weekly_org):
        _add_weekdays(weekly_org, ["t-a"] * 5)

        result = calculate_worker_cost(weekly_org, "org-2", "w5", date(2025, 1, 22), date(2025, 1, 26))

        assert result.hours == 30.0
        assert result.overtime_cost == 50.0
        assert [line.date for line in result.breakdown] == [date(2025, 1, d) for d in (22, 23, 24)]

    def test_stored_holiday_multiplier(self, weekly_org):
        weekly_org.add(PublicHolidays(organization_id="org-2", holiday_date=get_test_monday(),
                                      name="Kings Day", multiplier=3.0))
        weekly_org.commit()
        _add_weekdays(weekly_org, ["t-a"])

        result = calculate_worker_cost(weekly_org, "org-2", "w5", get_test_monday(), get_test_monday())

        assert result.premium_cost == 200.0
        assert result.breakdown[0].holiday == "Kings Day"

    def test_holiday_multiplier_in_payload(self, client):
        payload = {
            "worker": {"id": "w1", "cost_per_hour": 10},
            "shifts": [{"worker_id": "w1", "date": "2025-01-20", "start_time": "09:00",
                        "end_time": "17:00", "hours": 8}],
            "overtime_rules": {"enabled": True},
            "holidays": [{"date": "2025-01-20", "name": "Kings Day", "multiplier": 1.5}],
        }
        body = client.post("/api/v1/costs/worker", json=payload).json()

        assert body["premium_cost"] == 40.0


class TestScheduleHistory:

    def test_history_days(self):
        templates = [
            make_template("a", time(9, 0), time(17, 0), rules=[MaxConsecutiveDays(days=5)]),
            make_template("b", time(9, 0), time(17, 0), rules=[MinRestHours(hours=36)]),
        ]
        assert history_days([]) == 1
        assert history_days(templates[1:]) == 3
        assert history_days(templates) == 5

    def test_consecutive_run_continues_from_previous_week(self, db):
        monday = get_test_monday()
        db.add(Organizations(id="org-3", name="Kiosk"))
        db.add(Workers(id="w7", organization_id="org-3", first_name="Dee",
                       status=WorkerStatus.ACTIVE, pay_type=PayType.HOURLY,
                       cost_per_hour=10.0, max_hours_week=40))
        db.add(ShiftTemplates(id="t-run", organization_id="org-3", shop_id="shop-1", name="Open",
                              start_time=time(9, 0), end_time=time(17, 0), days_of_week=[0],
                              required_workers=1, rules=[{"type": "max_consecutive_days", "days": 2}]))
        db.add_all([
            Shifts(organization_id="org-3", worker_id="w7", template_id="t-run", shop_id="shop-1",
                   shift_date=monday - timedelta(days=offset), start_time=time(9, 0), end_time=time(17, 0),
                   hours=8.0, status=ShiftStatus.PUBLISHED, source=ShiftSource.MANUAL)
            for offset in (1, 2)
        ])
        db.commit()

        result = generate_schedule(db, "org-3", monday, seed=1)

        assert result.assignments == []
        assert result.warnings[0].short_by == 1
