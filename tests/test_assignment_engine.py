"""
Tests: assignment engine — rule specificity, category case folding,
inactive assignees, SLA defaults and the /assignment-rules endpoints.
"""

import pytest

from conftest import auth_headers, make_hotel, make_location, make_user
from facilities.models import db as _db
from facilities.models.work_order import AssignmentRule
from facilities.services import assignment_engine


def _rule(hotel, assignee, category="HVAC", priority=None, location=None, is_active=True):
    rule = AssignmentRule(
        hotel_id=hotel.id, name=f"{category}/{priority}/{location.id if location else '*'}",
        category=category, priority=priority,
        location_id=location.id if location else None,
        assignee_id=assignee.id, is_active=is_active,
    )
    _db.session.add(rule)
    _db.session.commit()
    return rule


@pytest.fixture()
def techs(hotel):
    return [make_user(hotel, role="TECHNICIAN", name=f"Tech {i}") for i in range(4)]


class TestFindAssignee:
    def test_specificity_order(self, hotel, location, techs):
        full = _rule(hotel, techs[0], priority="HIGH", location=location)
        by_priority = _rule(hotel, techs[1], priority="HIGH")
        by_location = _rule(hotel, techs[2], location=location)
        _rule(hotel, techs[3])

        def pick():
            return assignment_engine.find_assignee("HVAC", "HIGH", location.id, hotel.id)

        assert pick().id == techs[0].id
        full.is_active = False
        _db.session.commit()
        assert pick().id == techs[1].id
        by_priority.is_active = False
        _db.session.commit()
        assert pick().id == techs[2].id
        by_location.is_active = False
        _db.session.commit()
        assert pick().id == techs[3].id

    def test_category_is_case_insensitive(self, hotel, techs):
        _rule(hotel, techs[0], category="Electrical")

        assert assignment_engine.find_assignee("eLeCtRiCaL", "LOW", None, hotel.id).id == techs[0].id

    def test_no_location_skips_location_rules(self, hotel, location, techs):
        _rule(hotel, techs[0], location=location)

        assert assignment_engine.find_assignee("HVAC", "LOW", None, hotel.id) is None

    def test_priority_mismatch_falls_to_category_rule(self, hotel, techs):
        _rule(hotel, techs[0], priority="CRITICAL")
        _rule(hotel, techs[1])

        assert assignment_engine.find_assignee("HVAC", "LOW", None, hotel.id).id == techs[1].id

    def test_inactive_assignee_yields_none(self, hotel, techs):
        retired = make_user(hotel, role="TECHNICIAN", is_active=False)
        _rule(hotel, retired, priority="HIGH")
        _rule(hotel, techs[0])

        assert assignment_engine.find_assignee("HVAC", "HIGH", None, hotel.id) is None

    def test_rules_are_hotel_scoped(self, hotel, techs):
        other = make_hotel("Seaside Inn")
        _rule(other, make_user(other, role="TECHNICIAN"))

        assert assignment_engine.find_assignee("HVAC", "HIGH", None, hotel.id) is None


@pytest.mark.parametrize("priority,expected", [
    ("CRITICAL", (60, 480)),
    ("HIGH", (120, 720)),
    ("MEDIUM", (240, 1440)),
    ("LOW", (480, 2880)),
    ("bogus", (240, 1440)),
])
def test_sla_targets(priority, expected):
    assert assignment_engine.sla_targets(priority) == expected


# ── /assignment-rules ────────────────────────────────────────────────────────


class TestRuleEndpoints:
    def test_create_and_list(self, client, hotel, manager, technician, location):
        res = client.post("/api/v1/assignment-rules", json={
            "name": "Boiler room HVAC", "hotelId": hotel.id, "category": "HVAC",
            "priority": "high", "locationId": location.id, "assigneeId": technician.id,
        }, headers=auth_headers(manager))

        assert res.status_code == 201
        rule = res.get_json()["rule"]
        assert rule["priority"] == "HIGH"
        assert rule["assignee"]["id"] == technician.id
        assert rule["isActive"] is True

        listed = client.get(f"/api/v1/assignment-rules?hotelId={hotel.id}", headers=auth_headers(manager))
        assert [r["id"] for r in listed.get_json()["rules"]] == [rule["id"]]

    def test_staff_assignee_rejected(self, client, hotel, manager, staff):
        res = client.post("/api/v1/assignment-rules", json={
            "name": "Bad", "hotelId": hotel.id, "category": "HVAC", "assigneeId": staff.id,
        }, headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["details"] == {"assigneeId": "invalid role"}

    def test_missing_fields(self, client, manager):
        res = client.post("/api/v1/assignment-rules", json={"name": "x"}, headers=auth_headers(manager))

        assert res.status_code == 400
        assert set(res.get_json()["details"]) == {"hotelId", "category", "assigneeId"}

    def test_update_and_delete(self, client, hotel, manager, technician):
        rule = _rule(hotel, technician)

        res = client.patch(f"/api/v1/assignment-rules/{rule.id}",
                           json={"isActive": False, "priority": "LOW"}, headers=auth_headers(manager))
        assert res.status_code == 200
        assert (res.get_json()["rule"]["isActive"], res.get_json()["rule"]["priority"]) == (False, "LOW")

        res = client.delete(f"/api/v1/assignment-rules/{rule.id}", headers=auth_headers(manager))
        assert res.status_code == 200
        assert AssignmentRule.query.count() == 0

    def test_technician_cannot_manage_rules(self, client, hotel, technician):
        rule = _rule(hotel, technician)

        res = client.delete(f"/api/v1/assignment-rules/{rule.id}", headers=auth_headers(technician))

        assert res.status_code == 403

    def test_update_unknown_location_is_404(self, client, hotel, manager, technician):
        rule = _rule(hotel, technician)
        make_location(hotel, name="Kitchen")

        res = client.patch(f"/api/v1/assignment-rules/{rule.id}", json={"locationId": 777},
                           headers=auth_headers(manager))

        assert res.status_code == 404

    def test_update_non_text_name_rejected(self, client, hotel, manager, technician):
        rule = _rule(hotel, technician)

        res = client.patch(f"/api/v1/assignment-rules/{rule.id}", json={"name": 5},
                           headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["details"] == {"name": "invalid"}

    def test_update_blank_category_rejected(self, client, hotel, manager, technician):
        rule = _rule(hotel, technician)

        res = client.patch(f"/api/v1/assignment-rules/{rule.id}", json={"category": "  "},
                           headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["details"] == {"category": "required"}

    def test_create_non_boolean_is_active_rejected(self, client, hotel, manager, technician):
        res = client.post("/api/v1/assignment-rules", json={
            "name": "HVAC", "hotelId": hotel.id, "category": "HVAC",
            "assigneeId": technician.id, "isActive": "yes",
        }, headers=auth_headers(manager))

        assert res.status_code == 400
        assert res.get_json()["details"] == {"isActive": "invalid"}
        assert AssignmentRule.query.count() == 0
