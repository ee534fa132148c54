from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from monitor_web.api.main import app
from monitor_web.api.routes_alerts import get_dispatcher
from monitor_web.db.session import SessionLocal
from monitor_web.models.alert_models import Alert, HostAlert, MySQLAlert, RedisAlert, SystemAlert
from monitor_web.services.alert_dispatcher import AlertDispatcher


def _payload(**overrides):
    payload = {
        "timestamp": "2025-09-03T10:15:00Z",
        "module": "redis",
        "service_name": "redis-cache",
        "event_name": "big_keys_detected",
        "details": "3 keys above 10MB",
        "host_ip": "10.0.0.12",
        "alert_type": "warning",
        "cluster_name": "prod-a",
        "hostname": "cache-01",
    }
    payload.update(overrides)
    return payload


def test_receive_alert_stores_redis_event(client, row_count):
    resp = client.post("/api/alerts", json=_payload(big_keys_count=5))
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["status"] == "stored"
    assert body["module"] == "redis"
    assert body["collection"] == "redis_alerts"
    assert row_count(RedisAlert) == 1

    with SessionLocal() as session:
        stored = session.get(RedisAlert, body["id"])
        assert stored.big_keys_count == 5
        assert stored.failed_nodes == ""


def test_receive_alert_unknown_module_goes_to_general(client, row_count):
    resp = client.post("/api/alerts", json=_payload(module="unknown_module_x"))
    assert resp.status_code == 200, resp.text
    assert resp.json()["collection"] == "general_alerts"
    assert row_count(Alert) == 1
    assert row_count(RedisAlert) == 0


def test_receive_alert_missing_required_fields(client, row_count):
    payload = _payload()
    del payload["event_name"]
    resp = client.post("/api/alerts", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}
    assert row_count(RedisAlert) == 0


def test_receive_alert_rejects_malformed_body(client):
    resp = client.post(
        "/api/alerts",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON"}


def test_receive_alert_rejects_wrong_field_type(client, row_count):
    resp = client.post("/api/alerts", json=_payload(module="host", cpu_usage="very high"))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON"}
    assert row_count(HostAlert) == 0


@pytest.mark.parametrize(
    "overrides, model",
    [
        ({"module": "redis", "big_keys_count": 2**64}, RedisAlert),
        ({"module": "mysql", "connections": 2**63}, MySQLAlert),
        ({"module": "mysql", "connections": -(2**63) - 1}, MySQLAlert),
    ],
)
def test_receive_alert_rejects_counters_outside_int64(client, row_count, overrides, model):
    resp = client.post("/api/alerts", json=_payload(**overrides))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON"}
    assert row_count(model) == 0


def test_receive_alert_stores_counters_above_int32(client):
    resp = client.post("/api/alerts", json=_payload(module="mysql", connections=2**40))
    assert resp.status_code == 200, resp.text
    with SessionLocal() as db:
        stored = db.get(MySQLAlert, resp.json()["id"])
        assert stored.connections == 2**40


def test_receive_alert_rejects_non_object_body(client):
    resp = client.post("/api/alerts", json=[_payload()])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON"}


def test_receive_alert_storage_failure_returns_500(client, row_count):
    def _failing_dispatcher():
        db = SessionLocal()

        def boom():
            raise OperationalError("COMMIT", {}, Exception("disk full"))

        db.commit = boom
        try:
            yield AlertDispatcher(db)
        finally:
            db.close()

    app.dependency_overrides[get_dispatcher] = _failing_dispatcher
    resp = client.post("/api/alerts", json=_payload(module="system", added_users="mallory"))
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to store alert"}
    assert row_count(SystemAlert) == 0


def test_module_alerts_json_with_filters(client):
    for day in (1, 1, 1, 2, 9):
        client.post(
            "/api/alerts",
            json=_payload(module="mysql", timestamp=f"2025-09-0{day}T00:00:00", deadlocks_increment=day),
        )
    client.post("/api/alerts", json=_payload(module="mysql", timestamp="2025-09-02T00:00:00", alert_type="critical"))

    resp = client.get("/api/alerts/mysql", params={"from": "2025-09-01", "to": "2025-09-06", "alert_type": "warning"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["module"] == "mysql"
    assert body["count"] == 4
    timestamps = [a["timestamp"] for a in body["alerts"]]
    assert timestamps == sorted(timestamps, reverse=True)
    assert body["chart"]["labels"] == ["2025-09-01", "2025-09-02"]
    assert body["chart"]["datasets"][0]["data"] == [3, 1]


def test_module_alerts_invalid_module(client):
    resp = client.get("/api/alerts/kafka")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid module"}


def test_dashboard_renders_alerts(client, db_session, alert_row_factory):
    alert_row_factory(MySQLAlert, datetime(2025, 9, 1, 10, 0), event_name="deadlock_spike", deadlocks_increment=4)

    resp = client.get("/dashboard/mysql")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "deadlock_spike" in resp.text
    assert "deadlocks_increment" in resp.text
    assert "2025-09-01" in resp.text


def test_dashboard_escapes_alert_details(client, alert_row_factory):
    alert_row_factory(Alert, datetime(2025, 9, 1), module="nacos", details="<script>alert(1)</script>")
    resp = client.get("/dashboard/nacos")
    assert resp.status_code == 200
    assert "<script>alert(1)</script>" not in resp.text
    assert "&lt;script&gt;" in resp.text


def test_dashboard_invalid_module(client):
    resp = client.get("/dashboard/kafka")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid module"}


def test_static_assets_served(client):
    resp = client.get("/static/dashboard.css")
    assert resp.status_code == 200
