"""
Tests: work order comment thread.
"""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import auth_headers, make_work_order
from facilities.models import db as _db
from facilities.models.work_order import WorkOrderComment

UTC = timezone.utc


def _url(wo_id):
    return f"/api/v1/work-orders/{wo_id}/comments"


def test_add_comment_with_explicit_author(client, hotel, staff):
    wo = make_work_order(hotel, staff)

    res = client.post(_url(wo.id), json={"content": "Parts ordered", "author": "Front desk", "type": "update"},
                      headers=auth_headers(staff))

    assert res.status_code == 201
    body = res.get_json()
    assert (body["author"], body["type"], body["workOrderId"]) == ("Front desk", "update", wo.id)


def test_author_defaults_to_session_name(client, hotel, staff):
    wo = make_work_order(hotel, staff)

    res = client.post(_url(wo.id), json={"content": "Still dripping"}, headers=auth_headers(staff))

    assert res.get_json()["author"] == "Sam Staff"
    assert res.get_json()["type"] == "comment"


def test_author_falls_back_to_user_record(client, hotel, staff):
    wo = make_work_order(hotel, staff)

    res = client.post(_url(wo.id), json={"content": "Still dripping"}, headers=auth_headers(staff, name=None))

    assert res.get_json()["author"] == "Sam Staff"


def test_empty_content_rejected(client, hotel, staff):
    wo = make_work_order(hotel, staff)

    res = client.post(_url(wo.id), json={"content": "   "}, headers=auth_headers(staff))

    assert res.status_code == 400
    assert res.get_json()["details"] == {"content": "required"}
    assert WorkOrderComment.query.count() == 0


def test_invalid_type_rejected(client, hotel, staff):
    wo = make_work_order(hotel, staff)

    res = client.post(_url(wo.id), json={"content": "hi", "type": "shout"}, headers=auth_headers(staff))

    assert res.status_code == 400


@pytest.mark.parametrize("body,details", [
    ({"content": 42}, {"content": "invalid"}),
    ({"content": "hi", "author": 7}, {"author": "invalid"}),
    ({"content": "hi", "type": ["note"]}, {"type": "invalid"}),
])
def test_non_text_fields_rejected(client, hotel, staff, body, details):
    wo = make_work_order(hotel, staff)

    res = client.post(_url(wo.id), json=body, headers=auth_headers(staff))

    assert res.status_code == 400
    assert res.get_json()["details"] == details
    assert WorkOrderComment.query.count() == 0


def test_unknown_work_order_is_404(client, staff):
    assert client.post(_url(4040), json={"content": "hi"}, headers=auth_headers(staff)).status_code == 404
    assert client.get(_url(4040), headers=auth_headers(staff)).status_code == 404


def test_list_newest_first(client, hotel, staff):
    wo = make_work_order(hotel, staff)
    base = datetime(2024, 3, 1, tzinfo=UTC)
    for i in range(3):
        _db.session.add(WorkOrderComment(
            work_order_id=wo.id, content=f"c{i}", author="Sam", created_at=base + timedelta(minutes=i),
        ))
    _db.session.commit()

    res = client.get(_url(wo.id), headers=auth_headers(staff))

    assert [c["content"] for c in res.get_json()["comments"]] == ["c2", "c1", "c0"]
