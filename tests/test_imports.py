import pytest
from fastapi import HTTPException

from pulse.modules.imports.coercion import batches, coerce_value, map_row, parse_csv
from pulse.modules.imports.service import ImportService
from tests.conftest import USER_ID

MAPPING = {"Title": "title", "Priority": "priority_score", "Tags": "tags"}


def make_csv(rows):
    lines = ["Title,Priority,Tags"]
    lines += [f"{title},{priority},{tags}" for title, priority, tags in rows]
    return "\n".join(lines)


def ten_rows(malformed_at=None):
    rows = [(f"Action {i}", str(i), "call|follow-up") for i in range(1, 11)]
    if malformed_at is not None:
        rows[malformed_at - 1] = ("", "x", "")
    return make_csv(rows)


def reject_untitled(payload):
    return any(not row.get("title") for row in payload)


class TestCoercion:
    @pytest.mark.parametrize("column,value,expected", [
        ("notes", "", None),
        ("tags", "a| b |c", ["a", "b", "c"]),
        ("is_active", "true", True),
        ("is_active", "false", False),
        ("metadata", '{"a": 1}', {"a": 1}),
        ("metadata", "{not json", "{not json"),
        ("items", "[1, 2]", [1, 2]),
        ("sort_order", "3", 3),
        ("weight", "2.5", 2.5),
        ("score", "high", "high"),
        ("title", "42", "42"),
        ("primary_color", "#1A2B3C", "1A2B3C"),
        ("primary_color", "#123", "#123"),
    ])
    def test_coerce_value(self, column, value, expected):
        assert coerce_value(column, value) == expected

    def test_parse_csv_strips_bom(self):
        rows = parse_csv("\ufeffname,age\nSam,30\n")
        assert rows == [{"name": "Sam", "age": "30"}]

    def test_map_row_owned_table(self):
        mapped = map_row({"Title": "Call", "created_date": "2024-01-01"}, {"Title": "title"}, "daily_actions",
                         USER_ID, "user_id", now="2025-01-01T00:00:00")
        assert mapped["user_id"] == USER_ID
        assert mapped["id"]
        assert mapped["created_at"] == "2024-01-01"
        assert mapped["updated_at"] == "2025-01-01T00:00:00"

    def test_map_row_catalogue_table_has_no_owner(self):
        mapped = map_row({"Title": "Script"}, {"Title": "title"}, "objection_scripts", USER_ID, None)
        assert "user_id" not in mapped

    def test_map_row_profiles_uses_id(self):
        mapped = map_row({"Name": "Sam"}, {"Name": "full_name"}, "profiles", USER_ID, "id")
        assert mapped["id"] == USER_ID
        assert "user_id" not in mapped

    def test_map_row_overwrites_mapped_owner(self):
        mapped = map_row({"Title": "x", "Owner": "victim_user"}, {"Title": "title", "Owner": "user_id"},
                         "goals", USER_ID, "user_id")
        assert mapped["user_id"] == USER_ID

    def test_map_row_profiles_ignores_mapped_id(self):
        mapped = map_row({"Pid": "victim_user"}, {"Pid": "id"}, "profiles", USER_ID, "id")
        assert mapped["id"] == USER_ID

    def test_agent_voice_fields(self):
        mapped = map_row({"Name": "Ava", "previewAudioUrl": "https://cdn/x.mp3", "isActive": "true"},
                         {"Name": "name"}, "agent_voices", USER_ID, "user_id")
        assert mapped["voice_settings"] == {"previewAudioUrl": "https://cdn/x.mp3", "isActive": True}

    def test_call_log_fields(self):
        mapped = map_row({"callSid": "CA1", "transcript": '[{"role": "agent"}]', "analysis": "n/a"},
                         {}, "call_logs", USER_ID, "user_id")
        assert mapped["metadata"]["callSid"] == "CA1"
        assert mapped["metadata"]["transcript"] == [{"role": "agent"}]
        assert mapped["metadata"]["analysis"] == "n/a"
        assert mapped["metadata"]["formData"] is None

    def test_batches(self):
        chunks = list(batches(list(range(7)), 3))
        assert [(n, first, last) for n, first, last, _ in chunks] == [(1, 1, 3), (2, 4, 6), (3, 7, 7)]


class TestImportService:
    def test_all_rows_imported(self, fake_db):
        result = ImportService(fake_db, batch_size=5).import_csv("daily_actions", ten_rows(), MAPPING, USER_ID)
        assert result.success is True
        assert (result.imported, result.total) == (10, 10)
        assert result.errors == []
        assert len(fake_db.writes("daily_actions", "insert")) == 2
        assert all(r["user_id"] == USER_ID for r in fake_db.rows("daily_actions"))

    def test_malformed_row_fails_only_its_batch(self, fake_db):
        fake_db.fail("daily_actions", "insert", when=reject_untitled, message="null value in column title")
        result = ImportService(fake_db, batch_size=5).import_csv(
            "daily_actions", ten_rows(malformed_at=3), MAPPING, USER_ID
        )
        assert result.success is True
        assert (result.imported, result.total) == (5, 10)
        assert len(result.errors) == 1
        error = result.errors[0]
        assert (error.batch, error.rows) == (1, "1 to 5")
        assert "title" in error.error

    def test_every_batch_failing_is_unsuccessful(self, fake_db):
        fake_db.fail("daily_actions", "insert")
        result = ImportService(fake_db, batch_size=5).import_csv("daily_actions", ten_rows(), MAPPING, USER_ID)
        assert result.success is False
        assert result.imported == 0
        assert len(result.errors) == 2

    def test_header_only_csv(self, fake_db):
        result = ImportService(fake_db).import_csv("daily_actions", "Title,Priority,Tags\n", MAPPING, USER_ID)
        assert result.success is True
        assert result.total == 0

    def test_missing_parameters(self, fake_db):
        with pytest.raises(HTTPException) as exc:
            ImportService(fake_db).import_csv("daily_actions", None, MAPPING, USER_ID)
        assert exc.value.status_code == 400

    def test_unknown_table(self, fake_db):
        with pytest.raises(HTTPException) as exc:
            ImportService(fake_db).import_csv("auth_users", ten_rows(), MAPPING, USER_ID)
        assert exc.value.status_code == 403

    def test_catalogue_import_requires_admin(self, fake_db):
        with pytest.raises(HTTPException) as exc:
            ImportService(fake_db).import_csv("objection_scripts", ten_rows(), MAPPING, USER_ID)
        assert exc.value.status_code == 403
        result = ImportService(fake_db).import_csv("objection_scripts", ten_rows(), MAPPING, USER_ID, admin=True)
        assert result.imported == 10

    def test_csv_cannot_import_into_another_account(self, fake_db):
        result = ImportService(fake_db).import_csv(
            "goals", "title,owner\nx,victim_user\n", {"title": "title", "owner": "user_id"}, USER_ID
        )
        assert result.imported == 1
        assert [r["user_id"] for r in fake_db.rows("goals")] == [USER_ID]

    def test_csv_cannot_create_foreign_profile(self, fake_db):
        ImportService(fake_db).import_csv("profiles", "pid,name\nvictim_user,Eve\n",
                                          {"pid": "id", "name": "full_name"}, USER_ID)
        assert "victim_user" not in [p["id"] for p in fake_db.rows("profiles")]


class TestImportRoute:
    def test_bulk_import(self, client, fake_db):
        response = client.post("/api/v1/imports", json={
            "entityType": "daily_actions",
            "csvData": ten_rows(),
            "columnMapping": MAPPING,
        })
        assert response.status_code == 200
        assert response.json() == {"success": True, "imported": 10, "total": 10, "errors": []}

    def test_missing_mapping(self, client):
        response = client.post("/api/v1/imports", json={"entityType": "daily_actions", "csvData": "a\n1"})
        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELD"
