"""
Tests: dashboard counters and recent work orders for the caller's hotel.
"""

from datetime import datetime, timedelta, timezone

from conftest import auth_headers, make_hotel, make_schedule, make_task, make_user, make_work_order
from facilities.services import dashboard_service

UTC = timezone.utc
NOW = datetime(2024, 6, 1, 8, 0, tzinfo=UTC)


def test_stats_counts_only_this_hotel(hotel, staff):
    schedule = make_schedule(hotel)
    make_task(schedule, NOW - timedelta(days=3), status="OVERDUE")
    make_task(schedule, NOW - timedelta(days=1), status="OVERDUE")
    make_task(schedule, NOW + timedelta(days=3))
    make_task(schedule, NOW + timedelta(days=7))
    make_task(schedule, NOW + timedelta(days=10))
    make_task(schedule, NOW - timedelta(days=20), status="COMPLETED")

    other = make_hotel("Seaside Inn")
    make_task(make_schedule(other), NOW - timedelta(days=2), status="OVERDUE")

    make_work_order(hotel, staff, priority="HIGH", status="LOGGED")
    make_work_order(hotel, staff, priority="HIGH", status="ON_HOLD")
    make_work_order(hotel, staff, priority="HIGH", status="COMPLETED")
    make_work_order(hotel, staff, priority="HIGH", status="LOGGED", is_active=False)
    make_work_order(hotel, staff, priority="MEDIUM", status="LOGGED")

    stats = dashboard_service.get_stats(hotel.id, now=NOW)

    assert stats["overduePPM"] == 2
    assert stats["dueSoonPPM"] == 2
    assert stats["compliantPPM"] == 1
    assert stats["openHighPriority"] == 2
    assert (stats["averageResponseTime"], stats["monthlySpend"], stats["assetUptime"]) == (45, 12500, 98.5)


def test_stats_endpoint(client, hotel, manager):
    res = client.get("/api/v1/dashboard/stats", headers=auth_headers(manager))

    assert res.status_code == 200
    body = res.get_json()
    assert body["message"] == "Dashboard stats fetched successfully"
    assert body["stats"]["overduePPM"] == 0


def test_stats_without_hotel_is_400(client):
    drifter = make_user(None, role="MANAGER")

    res = client.get("/api/v1/dashboard/stats", headers=auth_headers(drifter))

    assert res.status_code == 400
    assert res.get_json()["details"] == {"hotelId": "required"}


def test_recent_work_orders_limited_to_ten(client, hotel, staff, manager):
    base = datetime(2024, 1, 1, tzinfo=UTC)
    for i in range(12):
        make_work_order(hotel, staff, title=f"WO {i:02d}", created_at=base + timedelta(hours=i))

    res = client.get("/api/v1/dashboard/recent-work-orders", headers=auth_headers(manager))

    titles = [w["title"] for w in res.get_json()["workOrders"]]
    assert len(titles) == 10
    assert titles[0] == "WO 11"
    assert titles[-1] == "WO 02"
