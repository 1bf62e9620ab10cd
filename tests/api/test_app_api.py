import uuid

from fastapi.testclient import TestClient

from myday.main import app

client = TestClient(app)

OTHER_USER = {"x-test-user-id": "user_other"}


class TestHealth:
    def test_root_and_health(self):
        assert client.get("/").json()["status"] == "ok"
        assert client.get("/healthz").json() == {"status": "ok"}
        r = client.get("/api/v1/health")
        assert r.status_code == 200
        assert r.json()["storageMode"] == "database"


class TestDashboardAPI:
    def test_today(self):
        name = f"Dashboard task {uuid.uuid4().hex[:6]}"
        task = client.post("/api/v1/tasks", json={"name": name, "weightage": 10}).json()

        r = client.get("/api/v1/dashboard/today")

        assert r.status_code == 200
        body = r.json()
        items = {t["id"]: t for t in body["tasks"]}
        assert items[task["id"]]["priorityLevel"] == "critical"
        assert items[task["id"]]["isCompleted"] is False
        assert 0 <= body["progress"] <= 100

    def test_streak(self):
        r = client.get("/api/v1/stats/streak", params={"date": "2030-01-07"})

        assert r.status_code == 200
        assert r.json()["asOf"] == "2030-01-07"
        assert r.json()["streak"] >= 0

    def test_bad_day(self):
        assert client.get("/api/v1/dashboard/today", params={"date": "tomorrow"}).status_code == 400


class TestSettingsAPI:
    def test_settings_round_trip(self):
        r = client.patch("/api/v1/settings", json={"theme": "ocean", "location": {"city": "Porto"}})
        assert r.status_code == 200

        body = client.get("/api/v1/settings").json()
        assert body["theme"] == "ocean"
        assert body["location"]["city"] == "Porto"

    def test_profile(self):
        r = client.get("/api/v1/settings/profile", headers=OTHER_USER)
        assert r.json()["email"] == "other@example.com"

        r = client.patch("/api/v1/settings/profile", headers=OTHER_USER, json={"email": "test@example.com"})
        assert r.status_code == 409

    def test_onboarding(self):
        r = client.post("/api/v1/settings/preferences/onboarding-complete")
        assert r.json()["isFirstTimeUser"] is False


class TestJournalAPI:
    def test_upsert_and_fetch(self):
        client.put("/api/v1/journal", json={"entryDate": "2030-02-01", "content": "Draft"})
        r = client.put("/api/v1/journal", json={"entryDate": "2030-02-01", "content": "Final", "mood": "great"})
        assert r.status_code == 200

        entry = client.get("/api/v1/journal/2030-02-01").json()
        assert entry["content"] == "Final"
        assert entry["mood"] == "great"
        assert client.get("/api/v1/journal/2030-02-01", headers=OTHER_USER).json() is None

    def test_unknown_mood(self):
        r = client.put("/api/v1/journal", json={"entryDate": "2030-02-02", "mood": "ecstatic"})
        assert r.status_code == 422


class TestFamilyAPI:
    def test_invite_and_accept(self):
        r = client.post("/api/v1/families", json={"name": f"Family {uuid.uuid4().hex[:6]}"})
        assert r.status_code == 201
        family_id = r.json()["family"]["id"]
        assert r.json()["myRole"] == "admin"

        r = client.post(f"/api/v1/families/{family_id}/invitations", json={"email": "other@example.com"})
        assert r.status_code == 201
        invitation_id = r.json()["id"]

        pending = client.get("/api/v1/invitations", headers=OTHER_USER).json()
        assert invitation_id in [i["id"] for i in pending]
        assert client.get(f"/api/v1/families/{family_id}", headers=OTHER_USER).status_code == 404

        r = client.post(f"/api/v1/invitations/{invitation_id}/respond", headers=OTHER_USER, json={"accept": True})
        assert r.json()["status"] == "accepted"

        family = client.get(f"/api/v1/families/{family_id}", headers=OTHER_USER).json()
        assert family["myRole"] == "member"
        r = client.patch(f"/api/v1/families/{family_id}", headers=OTHER_USER, json={"name": "Mine now"})
        assert r.status_code == 403

    def test_notifications_unread_count(self):
        r = client.get("/api/v1/notifications/unread-count")
        assert r.status_code == 200
        assert r.json()["count"] >= 0
        assert "updated" in client.post("/api/v1/notifications/read-all").json()
