"""
Tests: GET /locations — hotel scoping, ordering, nesting depth and search.
"""

from conftest import auth_headers, make_hotel, make_location


def test_ordered_by_type_then_name(client, hotel, staff):
    make_location(hotel, name="Room 102", type="ROOM")
    make_location(hotel, name="Main Building", type="BUILDING")
    make_location(hotel, name="Room 101", type="ROOM")

    res = client.get("/api/v1/locations", headers=auth_headers(staff))

    body = res.get_json()
    assert body["message"] == "Locations fetched successfully"
    assert [loc["name"] for loc in body["locations"]] == ["Main Building", "Room 101", "Room 102"]


def test_children_nested_two_levels(client, hotel, staff):
    building = make_location(hotel, name="Main Building", type="BUILDING")
    floor = make_location(hotel, name="Floor 1", type="FLOOR", parent=building)
    room = make_location(hotel, name="Room 101", type="ROOM", parent=floor)
    make_location(hotel, name="Closet", type="AREA", parent=room)
    make_location(hotel, name="Old wing", type="FLOOR", parent=building, is_active=False)

    res = client.get("/api/v1/locations", headers=auth_headers(staff))

    top = next(loc for loc in res.get_json()["locations"] if loc["id"] == building.id)
    assert [c["name"] for c in top["children"]] == ["Floor 1"]
    grandchild = top["children"][0]["children"][0]
    assert grandchild["name"] == "Room 101"
    assert "children" not in grandchild


def test_scoped_to_session_hotel_and_active(client, hotel, staff):
    make_location(hotel, name="Lobby", type="AREA")
    make_location(hotel, name="Demolished", type="AREA", is_active=False)
    make_location(make_hotel("Seaside Inn"), name="Their lobby", type="AREA")

    res = client.get("/api/v1/locations", headers=auth_headers(staff))

    assert [loc["name"] for loc in res.get_json()["locations"]] == ["Lobby"]


def test_search(client, hotel, staff):
    make_location(hotel, name="Pool Deck", type="AREA")
    make_location(hotel, name="Kitchen", type="AREA")

    res = client.get("/api/v1/locations?search=pool", headers=auth_headers(staff))

    assert [loc["name"] for loc in res.get_json()["locations"]] == ["Pool Deck"]
