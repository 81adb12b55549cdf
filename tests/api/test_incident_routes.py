"""Tests for incident, assignment, notification, and audit routes."""

import pytest

DISPATCHER = {"X-User-Id": "dispatcher-1", "X-User-Role": "service_admin"}


@pytest.fixture
def incident(client, report_body):
    resp = client.post("/api/incidents", json=report_body, headers={"X-User-Id": "citizen-3"})
    assert resp.status_code == 201
    return resp.json()


class TestReporting:
    def test_reporter_defaults_to_caller(self, incident):
        assert incident["reporterId"] == "citizen-3"
        assert incident["status"] == "new"
        assert incident["location"]["ghanaPostGPS"] == "GA-016-5757"

    def test_anonymous_report(self, client, report_body):
        resp = client.post("/api/incidents", json=report_body)
        assert resp.status_code == 201
        assert resp.json()["reporterId"] is None

    def test_missing_location(self, client, report_body):
        del report_body["location"]
        resp = client.post("/api/incidents", json=report_body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid incident data"

    def test_get(self, client, incident):
        assert client.get(f"/api/incidents/{incident['id']}").json() == incident
        assert client.get("/api/incidents/nope").status_code == 404


class TestListings:
    def test_active_excludes_resolved(self, client, report_body, incident):
        other = client.post("/api/incidents", json=report_body).json()
        client.patch(f"/api/incidents/{other['id']}", json={"status": "resolved"})

        active = client.get("/api/incidents").json()
        everything = client.get("/api/incidents/all").json()
        assert [i["id"] for i in active] == [incident["id"]]
        assert len(everything) == 2

    def test_by_service_user_and_status(self, client, incident):
        assert len(client.get("/api/incidents/service/svc-fire").json()) == 1
        assert client.get("/api/incidents/service/svc-police").json() == []
        assert len(client.get("/api/incidents/user/citizen-3").json()) == 1
        assert len(client.get("/api/incidents/status/new").json()) == 1
        assert client.get("/api/incidents/status/closed").json() == []


class TestUpdates:
    def test_status_change(self, client, incident):
        resp = client.patch(
            f"/api/incidents/{incident['id']}", json={"status": "resolved"}, headers=DISPATCHER
        )
        assert resp.status_code == 200
        assert resp.json()["completedAt"] is not None

        logs = client.get("/api/audit-logs").json()
        status_log = next(entry for entry in logs if entry["action"] == "update_status")
        assert status_log["userId"] == "dispatcher-1"

        notes = client.get("/api/notifications/user/citizen-3").json()
        assert [n["type"] for n in notes] == ["status_update"]

    def test_unknown_status(self, client, incident):
        resp = client.patch(f"/api/incidents/{incident['id']}", json={"status": "gone"})
        assert resp.status_code == 400

    def test_missing(self, client):
        resp = client.patch("/api/incidents/nope", json={"priority": "low"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Incident not found"}


class TestAssignments:
    def test_assign_and_accept(self, client, incident):
        resp = client.post(
            f"/api/incidents/{incident['id']}/assign",
            json={"responderId": "responder-1", "notes": "Bring foam"},
            headers=DISPATCHER,
        )
        assert resp.status_code == 200
        assert resp.json()["assignedById"] == "dispatcher-1"

        (assignment,) = client.get(f"/api/incidents/{incident['id']}/assignments").json()
        assert assignment["notes"] == "Bring foam"

        resp = client.patch(f"/api/assignments/{assignment['id']}", json={"status": "accepted"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "accepted"
        assert client.get(f"/api/incidents/{incident['id']}").json()["status"] == "accepted"

        responder_notes = client.get("/api/notifications/user/responder-1").json()
        assert responder_notes[0]["type"] == "assignment"

    def test_assign_requires_responder(self, client, incident):
        resp = client.post(f"/api/incidents/{incident['id']}/assign", json={})
        assert resp.status_code == 400

    def test_assign_missing_incident(self, client):
        resp = client.post("/api/incidents/nope/assign", json={"responderId": "r1"})
        assert resp.status_code == 404

    def test_invalid_response(self, client):
        resp = client.patch("/api/assignments/any", json={"status": "maybe"})
        assert resp.status_code == 400

    def test_missing_assignment(self, client):
        resp = client.patch("/api/assignments/nope", json={"status": "declined"})
        assert resp.status_code == 404


class TestMedia:
    def test_attach_urls(self, client, incident):
        resp = client.post(
            f"/api/incidents/{incident['id']}/media",
            json={"urls": ["https://cdn.example/1.jpg"]},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "files": ["https://cdn.example/1.jpg"],
            "mediaUrls": ["https://cdn.example/1.jpg"],
        }

    def test_empty_list_rejected(self, client, incident):
        resp = client.post(f"/api/incidents/{incident['id']}/media", json={"urls": []})
        assert resp.status_code == 400


class TestNotifications:
    def test_create_and_mark_read(self, client):
        resp = client.post(
            "/api/notifications",
            json={
                "serviceId": "svc-fire",
                "recipientId": "u1",
                "type": "system",
                "title": "Drill",
                "message": "Fire drill at 14:00",
            },
        )
        assert resp.status_code == 201
        note = resp.json()
        assert note["isRead"] is False

        assert len(client.get("/api/notifications/service/svc-fire").json()) == 1
        resp = client.patch(f"/api/notifications/{note['id']}/read")
        assert resp.json()["isRead"] is True
        assert client.patch("/api/notifications/nope/read").status_code == 404

    def test_invalid_type(self, client):
        resp = client.post(
            "/api/notifications", json={"type": "spam", "title": "x", "message": "y"}
        )
        assert resp.status_code == 400


class TestAuditLogs:
    def test_limit(self, client, report_body):
        for _ in range(3):
            client.post("/api/incidents", json=report_body)
        assert len(client.get("/api/audit-logs", params={"limit": 2}).json()) == 2
        assert len(client.get("/api/audit-logs").json()) == 3

    def test_records_request_client(self, client, report_body):
        client.post("/api/incidents", json=report_body, headers={"User-Agent": "crisis-app/2.1"})
        (entry,) = client.get("/api/audit-logs").json()
        assert entry["ipAddress"] == "testclient"
        assert entry["userAgent"] == "crisis-app/2.1"

    @pytest.mark.parametrize("limit", ["abc", "0", "5000"])
    def test_invalid_limit(self, client, limit):
        resp = client.get("/api/audit-logs", params={"limit": limit})
        assert resp.status_code == 400
