import pytest

from pulse.modules.entities.tables import Table, CATALOGUE_TABLES
from tests.conftest import USER_ID

ENDPOINT = "/api/v1/entities"


def seed_actions(fake_db):
    fake_db.rows("daily_actions").extend([
        {"id": "a1", "user_id": USER_ID, "title": "Call Sam", "status": "todo", "due_date": "2025-03-02"},
        {"id": "a2", "user_id": USER_ID, "title": "Email Kim", "status": "done", "due_date": "2025-03-01"},
        {"id": "a3", "user_id": "someone_else", "title": "Not mine", "status": "todo", "due_date": "2025-03-03"},
    ])


class TestTables:
    def test_unknown_name(self):
        assert Table.parse("pg_shadow") is None
        assert Table.parse(None) is None

    def test_owner_columns(self):
        assert Table.PROFILES.owner_column == "id"
        assert Table.GOALS.owner_column == "user_id"
        assert Table.TASK_TEMPLATES.owner_column is None

    def test_catalogue_tables_are_shared(self):
        assert all(t.is_catalogue for t in CATALOGUE_TABLES)
        assert not Table.DAILY_ACTIONS.is_catalogue


class TestValidation:
    def test_table_not_allowed(self, client):
        response = client.post(ENDPOINT, json={"table": "secrets", "operation": "list"})
        assert response.status_code == 403
        assert response.json()["code"] == "TABLE_NOT_ALLOWED"

    def test_missing_operation(self, client):
        response = client.post(ENDPOINT, json={"table": "goals"})
        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELD"

    def test_invalid_operation(self, client):
        response = client.post(ENDPOINT, json={"table": "goals", "operation": "truncate"})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_OPERATION"

    def test_get_requires_id(self, client):
        response = client.post(ENDPOINT, json={"table": "goals", "operation": "get"})
        assert response.status_code == 400

    @pytest.mark.parametrize("limit", ["ten", -1, 0])
    def test_invalid_limit_is_400(self, client, limit):
        response = client.post(ENDPOINT, json={"table": "goals", "operation": "list", "filters": {"limit": limit}})
        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELD"


class TestOwnerScoping:
    def test_list_returns_only_own_rows(self, client, fake_db):
        seed_actions(fake_db)
        body = client.post(ENDPOINT, json={"table": "daily_actions", "operation": "list"}).json()
        assert {r["id"] for r in body["data"]} == {"a1", "a2"}

    def test_filter_with_order_and_limit(self, client, fake_db):
        seed_actions(fake_db)
        body = client.post(ENDPOINT, json={
            "table": "daily_actions", "operation": "filter",
            "filters": {"status": "todo", "order": "due_date", "ascending": False, "limit": 5},
        }).json()
        assert [r["id"] for r in body["data"]] == ["a1"]

    def test_get_other_users_row_is_404(self, client, fake_db):
        seed_actions(fake_db)
        response = client.post(ENDPOINT, json={"table": "daily_actions", "operation": "get", "id": "a3"})
        assert response.status_code == 404

    def test_create_stamps_owner(self, client, fake_db):
        response = client.post(ENDPOINT, json={
            "table": "daily_actions", "operation": "create",
            "data": {"title": "Door knock", "user_id": "someone_else"},
        })
        assert response.status_code == 200
        assert response.json()["data"]["user_id"] == USER_ID

    def test_update_cannot_move_ownership(self, client, fake_db):
        seed_actions(fake_db)
        response = client.post(ENDPOINT, json={
            "table": "daily_actions", "operation": "update", "id": "a1",
            "data": {"status": "done", "user_id": "someone_else"},
        })
        assert response.status_code == 200
        row = next(r for r in fake_db.rows("daily_actions") if r["id"] == "a1")
        assert row["status"] == "done"
        assert row["user_id"] == USER_ID

    def test_update_other_users_row_is_404(self, client, fake_db):
        seed_actions(fake_db)
        response = client.post(ENDPOINT, json={
            "table": "daily_actions", "operation": "update", "id": "a3", "data": {"status": "done"},
        })
        assert response.status_code == 404

    def test_delete_other_users_row_is_noop(self, client, fake_db):
        seed_actions(fake_db)
        response = client.post(ENDPOINT, json={"table": "daily_actions", "operation": "delete", "id": "a3"})
        assert response.json() == {"success": True}
        assert len(fake_db.rows("daily_actions")) == 3

    def test_profiles_scoped_by_id(self, client, fake_db):
        fake_db.rows("profiles").append({"id": "someone_else", "email": "x@example.com"})
        body = client.post(ENDPOINT, json={"table": "profiles", "operation": "list"}).json()
        assert [r["id"] for r in body["data"]] == [USER_ID]


class TestCatalogueTables:
    def test_readable_without_owner_filter(self, client, fake_db):
        fake_db.rows("objection_scripts").append({"id": "o1", "title": "Commission too high"})
        body = client.post(ENDPOINT, json={"table": "objection_scripts", "operation": "list"}).json()
        assert [r["id"] for r in body["data"]] == ["o1"]

    def test_write_requires_admin(self, client, fake_db):
        response = client.post(ENDPOINT, json={
            "table": "objection_scripts", "operation": "create", "data": {"title": "New"},
        })
        assert response.status_code == 403
        assert fake_db.rows("objection_scripts") == []

    def test_admin_can_write(self, client, fake_db):
        fake_db.rows("user_roles").append({"user_id": USER_ID, "role": "admin"})
        response = client.post(ENDPOINT, json={
            "table": "objection_scripts", "operation": "create", "data": {"title": "New"},
        })
        assert response.status_code == 200
        assert "user_id" not in fake_db.rows("objection_scripts")[0]


class TestDatabaseErrors:
    def test_query_failure_is_500(self, client, fake_db):
        fake_db.fail("daily_actions")
        response = client.post(ENDPOINT, json={"table": "daily_actions", "operation": "list"})
        assert response.status_code == 500
