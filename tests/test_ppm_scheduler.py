"""
Tests: PPM scheduler — due-date arithmetic, task status derivation, overdue
sweep and the /ppm-schedules endpoints.

Uses shared fixtures from conftest.py: client, session (autouse), hotel, manager.
"""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import auth_headers, make_hotel, make_schedule, make_task, make_user
from facilities.models import db as _db
from facilities.models.ppm import PPMSchedule, PPMTask
from facilities.services import ppm_service

UTC = timezone.utc


# ── next_due_date ────────────────────────────────────────────────────────────


class TestNextDueDate:
    NOW = datetime(2024, 3, 15, 9, 30, tzinfo=UTC)

    @pytest.mark.parametrize("frequency,expected", [
        ("DAILY", datetime(2024, 3, 16, 9, 30, tzinfo=UTC)),
        ("WEEKLY", datetime(2024, 3, 22, 9, 30, tzinfo=UTC)),
        ("MONTHLY", datetime(2024, 4, 15, 9, 30, tzinfo=UTC)),
        ("QUARTERLY", datetime(2024, 6, 15, 9, 30, tzinfo=UTC)),
        ("YEARLY", datetime(2025, 3, 15, 9, 30, tzinfo=UTC)),
    ])
    def test_known_frequencies(self, frequency, expected):
        assert ppm_service.next_due_date(self.NOW, frequency) == expected

    def test_frequency_is_case_insensitive(self):
        assert ppm_service.next_due_date(self.NOW, "weekly") == self.NOW + timedelta(days=7)

    @pytest.mark.parametrize("frequency", ["FORTNIGHTLY", "", None])
    def test_unknown_frequency_falls_back_to_thirty_days(self, frequency):
        assert ppm_service.next_due_date(self.NOW, frequency) == self.NOW + timedelta(days=30)

    def test_month_end_clamps_in_leap_year(self):
        assert ppm_service.next_due_date(datetime(2024, 1, 31, tzinfo=UTC), "MONTHLY") == \
            datetime(2024, 2, 29, tzinfo=UTC)

    def test_leap_day_plus_one_year(self):
        assert ppm_service.next_due_date(datetime(2024, 2, 29, tzinfo=UTC), "YEARLY") == \
            datetime(2025, 2, 28, tzinfo=UTC)

    def test_quarter_from_november_crosses_year(self):
        assert ppm_service.next_due_date(datetime(2024, 11, 30, tzinfo=UTC), "QUARTERLY") == \
            datetime(2025, 2, 28, tzinfo=UTC)


# ── ppm_task_status ──────────────────────────────────────────────────────────


class TestTaskStatus:
    NOW = datetime(2024, 6, 1, tzinfo=UTC)

    def test_past_due_is_overdue(self):
        assert ppm_service.ppm_task_status(self.NOW, self.NOW - timedelta(hours=1), "SCHEDULED") == "OVERDUE"

    def test_future_due_is_scheduled(self):
        assert ppm_service.ppm_task_status(self.NOW, self.NOW + timedelta(days=2), "OVERDUE") == "SCHEDULED"

    @pytest.mark.parametrize("terminal", ["COMPLETED", "CANCELLED"])
    def test_terminal_statuses_are_kept(self, terminal):
        assert ppm_service.ppm_task_status(self.NOW, self.NOW - timedelta(days=30), terminal) == terminal

    def test_naive_due_date_is_read_as_utc(self):
        assert ppm_service.ppm_task_status(self.NOW, datetime(2024, 5, 31), "SCHEDULED") == "OVERDUE"


def test_mark_overdue_tasks_only_moves_past_scheduled(hotel):
    schedule = make_schedule(hotel)
    now = datetime(2024, 6, 1, tzinfo=UTC)
    past = make_task(schedule, now - timedelta(days=1))
    future = make_task(schedule, now + timedelta(days=1))
    done = make_task(schedule, now - timedelta(days=5), status="COMPLETED")

    assert ppm_service.mark_overdue_tasks(now) == 1

    assert _db.session.get(PPMTask, past.id).status == "OVERDUE"
    assert _db.session.get(PPMTask, future.id).status == "SCHEDULED"
    assert _db.session.get(PPMTask, done.id).status == "COMPLETED"


def test_mark_overdue_cli_command(app, hotel):
    schedule = make_schedule(hotel)
    make_task(schedule, datetime.now(UTC) - timedelta(days=3))

    result = app.test_cli_runner().invoke(args=["mark-overdue-ppm"])

    assert result.exit_code == 0
    assert "Marked 1 PPM task(s) OVERDUE." in result.output


# ── POST /ppm-schedules ──────────────────────────────────────────────────────


def _schedule_payload(hotel, **overrides):
    payload = {
        "name": "Chiller inspection",
        "description": "Check refrigerant and belts",
        "frequency": "monthly",
        "startDate": "2024-01-01",
        "hotelId": hotel.id,
    }
    payload.update(overrides)
    return payload


class TestCreateSchedule:
    def test_creates_active_schedule(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel),
                          headers=auth_headers(manager))

        assert res.status_code == 201
        body = res.get_json()
        assert body["frequency"] == "MONTHLY"
        assert body["isActive"] is True
        assert body["hotel"] == hotel.name
        assert body["taskCount"] == 0
        assert PPMSchedule.query.count() == 1

    def test_missing_fields_rejected(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json={"hotelId": hotel.id},
                          headers=auth_headers(manager))

        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_VALIDATION_REQUIRED"
        assert set(body["details"]) == {"name", "frequency", "startDate"}

    def test_unknown_frequency_rejected(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel, frequency="HOURLY"),
                          headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_end_before_start_rejected(self, client, hotel, manager):
        payload = _schedule_payload(hotel, startDate="2024-05-01", endDate="2024-04-01")
        res = client.post("/api/v1/ppm-schedules", json=payload, headers=auth_headers(manager))

        assert res.status_code == 400

    def test_unparseable_date_rejected(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel, startDate="soon"),
                          headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["details"] == {"startDate": "invalid date"}

    def test_unknown_hotel_is_404(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel, hotelId=9999),
                          headers=auth_headers(manager))

        assert res.status_code == 404

    def test_non_text_name_rejected(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel, name=123),
                          headers=auth_headers(manager))

        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_VALIDATION_INVALID"
        assert body["details"] == {"name": "invalid"}
        assert PPMSchedule.query.count() == 0

    @pytest.mark.parametrize("hotel_id", [{"id": 1}, [1], "first", True])
    def test_malformed_hotel_id_rejected(self, client, hotel, manager, hotel_id):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel, hotelId=hotel_id),
                          headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["details"] == {"hotelId": "invalid"}

    def test_numeric_string_hotel_id_accepted(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel, hotelId=str(hotel.id)),
                          headers=auth_headers(manager))

        assert res.status_code == 201
        assert res.get_json()["hotelId"] == hotel.id

    def test_non_text_description_rejected(self, client, hotel, manager):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel, description=["a"]),
                          headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["details"] == {"description": "invalid"}

    def test_staff_cannot_create(self, client, hotel, staff):
        res = client.post("/api/v1/ppm-schedules", json=_schedule_payload(hotel),
                          headers=auth_headers(staff))

        assert res.status_code == 403
        assert PPMSchedule.query.count() == 0


# ── GET /ppm-schedules ───────────────────────────────────────────────────────


def test_list_schedules_with_task_counters(client, hotel, staff):
    later = make_schedule(hotel, name="Later")
    later.start_date = datetime(2024, 6, 1, tzinfo=UTC)
    earlier = make_schedule(hotel, name="Earlier")
    earlier.start_date = datetime(2023, 6, 1, tzinfo=UTC)
    _db.session.commit()

    due = datetime(2024, 7, 1, tzinfo=UTC)
    make_task(later, due, status="SCHEDULED")
    make_task(later, due, status="OVERDUE")
    make_task(later, due, status="COMPLETED")

    res = client.get("/api/v1/ppm-schedules", headers=auth_headers(staff))

    assert res.status_code == 200
    body = res.get_json()["schedules"]
    assert [s["name"] for s in body] == ["Earlier", "Later"]
    assert body[0]["taskCount"] == 0
    assert (body[1]["taskCount"], body[1]["activeTasks"], body[1]["overdueTasks"]) == (3, 1, 1)


def test_list_schedules_filters_by_hotel(client, hotel, staff):
    other = make_hotel("Seaside Inn")
    make_schedule(hotel, name="Ours")
    make_schedule(other, name="Theirs")

    res = client.get(f"/api/v1/ppm-schedules?hotelId={hotel.id}", headers=auth_headers(staff))

    assert [s["name"] for s in res.get_json()["schedules"]] == ["Ours"]


# ── PATCH /ppm-schedules/<id> ────────────────────────────────────────────────


class TestToggleSchedule:
    def test_deactivate_leaves_tasks_untouched(self, client, hotel, manager):
        schedule = make_schedule(hotel)
        scheduled = make_task(schedule, datetime(2030, 1, 1, tzinfo=UTC), status="SCHEDULED")
        overdue = make_task(schedule, datetime(2020, 1, 1, tzinfo=UTC), status="OVERDUE")

        res = client.patch(f"/api/v1/ppm-schedules/{schedule.id}", json={"isActive": False},
                           headers=auth_headers(manager))

        assert res.status_code == 200
        assert res.get_json()["isActive"] is False
        _db.session.expire_all()
        assert _db.session.get(PPMTask, scheduled.id).status == "SCHEDULED"
        assert _db.session.get(PPMTask, overdue.id).status == "OVERDUE"

    def test_publishes_to_technicians(self, client, hotel, manager, monkeypatch):
        calls = []
        monkeypatch.setattr("facilities.services.realtime.publish",
                            lambda room, event, payload: calls.append((room, event, payload["id"])))
        schedule = make_schedule(hotel)

        client.patch(f"/api/v1/ppm-schedules/{schedule.id}", json={"isActive": False},
                     headers=auth_headers(manager))

        assert calls == [("technicians", "ppm-schedule-updated", schedule.id)]

    def test_non_boolean_rejected(self, client, hotel, manager):
        schedule = make_schedule(hotel)
        res = client.patch(f"/api/v1/ppm-schedules/{schedule.id}", json={"isActive": "no"},
                           headers=auth_headers(manager))

        assert res.status_code == 400

    def test_unknown_schedule_is_404(self, client, manager):
        res = client.patch("/api/v1/ppm-schedules/4242", json={"isActive": True},
                           headers=auth_headers(manager))

        assert res.status_code == 404

    def test_technician_cannot_toggle(self, client, hotel):
        schedule = make_schedule(hotel)
        tech = make_user(hotel, role="TECHNICIAN")
        res = client.patch(f"/api/v1/ppm-schedules/{schedule.id}", json={"isActive": False},
                           headers=auth_headers(tech))

        assert res.status_code == 403
