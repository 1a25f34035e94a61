from tests.conftest import USER_ID


def progress_row(fake_db):
    rows = [r for r in fake_db.rows("user_onboarding") if r["user_id"] == USER_ID]
    assert len(rows) == 1
    return rows[0]


class TestOnboardingState:
    def test_fresh_subscriber(self, client):
        response = client.get("/api/v1/onboarding/state")
        assert response.status_code == 200
        body = response.json()
        assert body["module"] == "core"
        assert body["step_id"] == "welcome"
        assert body["active_modules"] == ["core", "agents"]
        assert body["redirect"] is None
        assert [m["key"] for m in body["modules"]] == ["core", "agents", "callcenter"]

    def test_complete_user_is_redirected(self, client, fake_db):
        fake_db.rows("user_onboarding").append({
            "user_id": USER_ID, "onboarding_completed": True, "agent_onboarding_completed": True,
        })
        body = client.get("/api/v1/onboarding/state").json()
        assert body["complete"] is True
        assert body["redirect"] == "/dashboard"


class TestAdvance:
    def test_advance_persists_completed_steps(self, client, fake_db):
        response = client.post("/api/v1/onboarding/advance", json={
            "module": "core", "step_index": 0, "step_data": {"seen": True},
        })
        assert response.status_code == 200
        assert response.json()["step_id"] == "market"
        assert progress_row(fake_db)["completed_steps"] == ["welcome"]

    def test_finishing_core_sets_flags(self, client, fake_db):
        fake_db.rows("user_onboarding").append({
            "user_id": USER_ID, "completed_steps": ["welcome", "market", "preferences"],
        })
        response = client.post("/api/v1/onboarding/advance", json={"module": "core", "step_index": 3})
        assert response.status_code == 200
        body = response.json()
        assert body["module"] == "agents"
        row = progress_row(fake_db)
        assert row["onboarding_completed"] is True
        assert row["profile_completed"] is True
        assert row["onboarding_completion_date"]

    def test_persistence_failure_blocks_advance(self, client, fake_db):
        fake_db.fail("user_onboarding", "upsert")
        response = client.post("/api/v1/onboarding/advance", json={"module": "core", "step_index": 0})
        assert response.status_code == 500
        assert response.json()["code"] == "PERSISTENCE_FAILED"

    def test_inactive_module_is_invalid_state(self, client):
        response = client.post("/api/v1/onboarding/advance", json={"module": "callcenter", "step_index": 0})
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_ONBOARDING_STATE"

    def test_skipping_ahead_is_invalid_state(self, client, fake_db):
        response = client.post("/api/v1/onboarding/advance", json={"module": "core", "step_index": 3})
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_ONBOARDING_STATE"
        assert fake_db.writes("user_onboarding", "upsert") == []

    def test_jumping_to_later_module_is_invalid_state(self, client, fake_db):
        response = client.post("/api/v1/onboarding/advance", json={"module": "agents", "step_index": 0})
        assert response.status_code == 409

    def test_step_data_survives_reload(self, client, fake_db):
        client.post("/api/v1/onboarding/advance", json={
            "module": "core", "step_index": 0, "step_data": {"seen": True},
        })
        client.post("/api/v1/onboarding/advance", json={
            "module": "core", "step_index": 1, "step_data": {"market": "Austin"},
        })
        body = client.get("/api/v1/onboarding/state").json()
        assert body["step_data"] == {"welcome": {"seen": True}, "market": {"market": "Austin"}}
        assert progress_row(fake_db)["step_data"]["market"] == {"market": "Austin"}

    def test_retreat(self, client, fake_db):
        fake_db.rows("user_onboarding").append({"user_id": USER_ID, "onboarding_completed": True})
        response = client.post("/api/v1/onboarding/retreat", json={"module": "agents", "step_index": 0})
        assert response.status_code == 200
        assert response.json()["step_id"] == "core-confirm"

    def test_reset(self, client, fake_db):
        fake_db.rows("user_onboarding").append({"user_id": USER_ID, "onboarding_completed": True})
        body = client.post("/api/v1/onboarding/reset").json()
        assert body["module"] == "core"
        assert body["step_index"] == 0


class TestProgress:
    def test_missing_progress_data(self, client):
        response = client.post("/api/v1/onboarding/progress", json={})
        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELD"

    def test_completion_flags_never_regress(self, client, fake_db):
        fake_db.rows("user_onboarding").append({
            "user_id": USER_ID, "onboarding_completed": True, "completed_steps": ["welcome"],
        })
        response = client.post("/api/v1/onboarding/progress", json={
            "progress_data": {"onboarding_completed": False, "completed_steps": ["welcome", "market"]},
        })
        assert response.status_code == 200
        row = progress_row(fake_db)
        assert row["onboarding_completed"] is True
        assert row["completed_steps"] == ["welcome", "market"]

    def test_user_id_cannot_be_overwritten(self, client, fake_db):
        client.post("/api/v1/onboarding/progress", json={"progress_data": {"user_id": "someone_else", "a": 1}})
        assert progress_row(fake_db)["a"] == 1
