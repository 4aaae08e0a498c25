"""
Tests: bearer-token session parsing, role guards, health checks and the
response middleware (request id, timing, security headers).
"""

from datetime import timedelta

from conftest import auth_headers, make_user, token_for


def test_missing_token_is_401(client):
    res = client.get("/api/v1/work-orders")

    assert res.status_code == 401
    assert res.get_json() == {"error": "Authentication required", "code": "ERR_UNAUTHENTICATED"}


def test_expired_token_is_401(client, staff):
    res = client.get("/api/v1/work-orders", headers=auth_headers(staff, expires_in=timedelta(seconds=-30)))

    assert res.status_code == 401


def test_wrong_signature_is_401(client, staff):
    headers = auth_headers(staff, secret="some-other-secret-that-is-long-enough")

    assert client.get("/api/v1/work-orders", headers=headers).status_code == 401


def test_unknown_role_claim_is_401(client, staff):
    assert client.get("/api/v1/work-orders", headers=auth_headers(staff, role="GUEST")).status_code == 401


def test_non_bearer_scheme_is_401(client, staff):
    headers = {"Authorization": f"Token {token_for(staff)}"}

    assert client.get("/api/v1/work-orders", headers=headers).status_code == 401


def test_role_below_minimum_is_403(client, technician):
    res = client.post("/api/v1/work-orders/bulk", json={"action": "cancel", "workOrderIds": []},
                      headers=auth_headers(technician))

    assert res.status_code == 403
    assert res.get_json()["code"] == "ERR_FORBIDDEN"


def test_admin_outranks_manager(client, hotel):
    admin = make_user(hotel, role="ADMIN")

    res = client.post("/api/v1/work-orders/bulk", json={"action": "cancel", "workOrderIds": []},
                      headers=auth_headers(admin))

    assert res.status_code == 200


def test_health_checks_need_no_session(client):
    ready = client.get("/api/v1/health/ready")
    live = client.get("/api/v1/health/live")

    assert ready.get_json() == {"status": "ok"}
    assert live.status_code == 200
    body = live.get_json()
    assert body["checks"]["database"]["status"] == "ok"
    assert body["checks"]["realtime"]["status"] == "skipped"


def test_unknown_route_is_json_404(client):
    res = client.get("/api/v1/nope")

    assert res.status_code == 404
    assert res.get_json()["code"] == "ERR_NOT_FOUND"


def test_response_carries_request_id_and_timing(client):
    res = client.get("/api/v1/health/ready", headers={"X-Request-ID": "abc-123"})

    assert res.headers["X-Request-ID"] == "abc-123"
    assert float(res.headers["X-Request-Duration-Ms"]) >= 0


def test_security_headers(client):
    res = client.get("/api/v1/health/ready")

    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "DENY"
    assert res.headers["Cache-Control"] == "no-store"
