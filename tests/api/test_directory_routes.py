"""Tests for emergency service, user, unit, and category routes."""


class TestEmergencyServices:
    def test_list_seeded(self, client):
        resp = client.get("/api/emergency-services")
        assert resp.status_code == 200
        assert [s["code"] for s in resp.json()][:1] == ["POLICE"]

    def test_get_by_code(self, client):
        resp = client.get("/api/emergency-services/ambulance")
        assert resp.status_code == 200
        assert resp.json()["serviceNumbers"] == ["193"]

    def test_unknown_code(self, client):
        assert client.get("/api/emergency-services/COAST").status_code == 404

    def test_create_and_update(self, client):
        resp = client.post(
            "/api/emergency-services",
            json={"name": "Coast Guard", "code": "coast", "serviceNumbers": ["118"]},
        )
        assert resp.status_code == 201
        created = resp.json()
        assert created["code"] == "COAST"
        assert created["isActive"] is True

        resp = client.patch(
            f"/api/emergency-services/id/{created['id']}", json={"isActive": False}
        )
        assert resp.status_code == 200
        assert resp.json()["isActive"] is False

    def test_update_missing(self, client):
        resp = client.patch("/api/emergency-services/id/nope", json={"name": "X"})
        assert resp.status_code == 404


class TestUsers:
    def _register(self, client, **overrides):
        body = {"phoneNumber": "+233 20 111 2222", "role": "responder", "serviceId": "svc-1"}
        body.update(overrides)
        return client.post("/api/users", json=body)

    def test_register_and_fetch(self, client):
        resp = self._register(client, name="Ama Mensah")
        assert resp.status_code == 201
        user = resp.json()
        assert user["phoneNumber"] == "+233201112222"
        assert user["preferredLanguage"] == "en"

        assert client.get(f"/api/users/{user['id']}").json()["name"] == "Ama Mensah"
        assert client.get("/api/users/phone/+233201112222").json()["id"] == user["id"]

    def test_duplicate_phone_conflicts(self, client):
        first = self._register(client).json()
        resp = self._register(client, phoneNumber="+233-20-111-2222")
        assert resp.status_code == 409
        assert resp.json()["existingId"] == first["id"]

    def test_update_and_delete(self, client):
        user = self._register(client).json()
        resp = client.patch(f"/api/users/{user['id']}", json={"preferredLanguage": "tw"})
        assert resp.json()["preferredLanguage"] == "tw"

        assert client.delete(f"/api/users/{user['id']}").status_code == 204
        assert client.get(f"/api/users/{user['id']}").status_code == 404
        assert client.delete(f"/api/users/{user['id']}").status_code == 404

    def test_invalid_language(self, client):
        user = self._register(client).json()
        resp = client.patch(f"/api/users/{user['id']}", json={"preferredLanguage": "fr"})
        assert resp.status_code == 400

    def test_lists(self, client):
        self._register(client)
        self._register(client, phoneNumber="0209999999", role="citizen", serviceId=None)
        assert len(client.get("/api/users/service/svc-1").json()) == 1
        assert len(client.get("/api/users/role/citizen").json()) == 1

    def test_assignments(self, client, report_body):
        user = self._register(client).json()
        incident = client.post("/api/incidents", json=report_body).json()
        client.post(f"/api/incidents/{incident['id']}/assign", json={"responderId": user["id"]})

        resp = client.get(f"/api/users/{user['id']}/assignments")
        assert [a["incidentId"] for a in resp.json()] == [incident["id"]]


class TestEmergencyUnits:
    def _unit(self, client, call_sign, service_id="svc-amb", **extra):
        body = {"serviceId": service_id, "callSign": call_sign, "unitType": "ambulance", **extra}
        resp = client.post("/api/emergency-units", json=body)
        assert resp.status_code == 201
        return resp.json()

    def test_filters(self, client):
        self._unit(client, "AMB-1")
        busy = self._unit(client, "AMB-2")
        self._unit(client, "FT-1", service_id="svc-fire")
        client.patch(f"/api/emergency-units/{busy['id']}", json={"status": "busy"})

        assert len(client.get("/api/emergency-units").json()) == 3
        service = client.get("/api/emergency-units", params={"serviceId": "svc-amb"}).json()
        assert [u["callSign"] for u in service] == ["AMB-1", "AMB-2"]
        only_busy = client.get(
            "/api/emergency-units", params={"serviceId": "svc-amb", "status": "busy"}
        ).json()
        assert [u["callSign"] for u in only_busy] == ["AMB-2"]

        available = client.get("/api/emergency-units/service/svc-amb/available").json()
        assert [u["callSign"] for u in available] == ["AMB-1"]
        assert len(client.get("/api/emergency-units/service/svc-fire").json()) == 1

    def test_update_location(self, client):
        unit = self._unit(client, "AMB-1")
        resp = client.patch(
            f"/api/emergency-units/{unit['id']}",
            json={"location": {"latitude": 5.6, "longitude": -0.2, "address": "Ridge"}},
        )
        assert resp.json()["location"]["address"] == "Ridge"

    def test_invalid_status(self, client):
        unit = self._unit(client, "AMB-1")
        resp = client.patch(f"/api/emergency-units/{unit['id']}", json={"status": "lost"})
        assert resp.status_code == 400

    def test_delete(self, client):
        unit = self._unit(client, "AMB-1")
        assert client.delete(f"/api/emergency-units/{unit['id']}").status_code == 204
        assert client.delete(f"/api/emergency-units/{unit['id']}").status_code == 404
        assert client.patch(f"/api/emergency-units/{unit['id']}", json={}).status_code == 404


class TestIncidentCategories:
    def test_create_list_update(self, client):
        for order, code in ((2, "robbery"), (1, "accident")):
            resp = client.post(
                "/api/incident-categories",
                json={
                    "serviceId": "svc-police",
                    "name": code.title(),
                    "code": code,
                    "sortOrder": order,
                    "questions": ["Is anyone injured?"],
                },
            )
            assert resp.status_code == 201

        categories = client.get("/api/incident-categories/svc-police").json()
        assert [c["code"] for c in categories] == ["accident", "robbery"]

        resp = client.patch(
            f"/api/incident-categories/id/{categories[0]['id']}", json={"priority": "high"}
        )
        assert resp.json()["priority"] == "high"

    def test_update_missing(self, client):
        resp = client.patch("/api/incident-categories/id/nope", json={"name": "X"})
        assert resp.status_code == 404
