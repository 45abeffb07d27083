from fastapi.testclient import TestClient

from app.core.constants import RoleEnum
from tests.helpers.asserts import api_call, assert_error, data_of


class TestAdminUsers:
    def test_list_users_is_paginated(self, client: TestClient, admin_headers, faculty, student):
        page = data_of(api_call(client, "GET", "/admin/users?limit=2", headers=admin_headers))
        assert page["total"] == 3
        assert len(page["items"]) == 2
        assert page["pages"] == 2
        assert page["has_next"] is True
        assert {u["role"] for u in page["items"]} <= {"admin", "faculty", "student"}

    def test_non_admins_forbidden(self, client: TestClient, faculty_headers, student_headers):
        for headers in (faculty_headers, student_headers):
            assert_error(client.get("/admin/users", headers=headers), 403)
            assert_error(client.get("/admin/settings", headers=headers), 403)

    def test_create_user_with_role(self, client: TestClient, admin_headers, login):
        payload = {
            "email": "new.faculty@test.com",
            "password": "faculty123",
            "full_name": "New Faculty",
            "faculty_id": "FAC-900",
            "role": "faculty",
        }
        created = data_of(api_call(client, "POST", "/admin/users", headers=admin_headers, json=payload))
        assert created["role"] == "faculty"
        assert created["faculty_id"] == "FAC-900"
        assert login("new.faculty@test.com", "faculty123")

        r = client.post("/admin/users", headers=admin_headers, json=payload)
        assert_error(r, 409, "already exists")

    def test_change_role_applies_to_live_token(self, client: TestClient, admin_headers, student, student_headers):
        user, _ = student
        assert_error(client.post("/courses/", headers=student_headers, json={"title": "Before"}), 403)

        updated = data_of(api_call(client, "PUT", f"/admin/users/{user.id}/role", headers=admin_headers,
                                   json={"role": "faculty"}))
        assert updated["role"] == "faculty"

        r = client.post("/courses/", headers=student_headers, json={"title": "After promotion"})
        assert r.status_code == 201

    def test_admin_cannot_change_or_delete_self(self, client: TestClient, admin, admin_headers):
        user, _ = admin
        r = client.put(f"/admin/users/{user.id}/role", headers=admin_headers, json={"role": "student"})
        assert_error(r, 400, "your own role")
        r = client.delete(f"/admin/users/{user.id}", headers=admin_headers)
        assert_error(r, 400, "your own account")

    def test_delete_user(self, client: TestClient, admin_headers, token_for_role):
        victim, victim_headers = token_for_role(RoleEnum.STUDENT)
        api_call(client, "DELETE", f"/admin/users/{victim.id}", headers=admin_headers)

        assert_error(client.get("/account/me", headers=victim_headers), 401, "User not found")
        assert_error(client.delete(f"/admin/users/{victim.id}", headers=admin_headers), 404)

    def test_invalid_role_rejected(self, client: TestClient, admin_headers, student):
        user, _ = student
        r = client.put(f"/admin/users/{user.id}/role", headers=admin_headers, json={"role": "superuser"})
        assert_error(r, 422)


class TestSiteSettings:
    def test_defaults_when_nothing_saved(self, client: TestClient, admin_headers):
        settings = data_of(api_call(client, "GET", "/admin/settings", headers=admin_headers))
        assert settings["site_name"] == "VIDHYA HUB"
        assert settings["registration_enabled"] is True
        assert settings["default_user_role"] == "student"
        assert settings["max_file_upload_size"] == 5

    def test_save_only_provided_keys(self, client: TestClient, admin_headers):
        r = api_call(client, "PUT", "/admin/settings", headers=admin_headers,
                     json={"site_name": "Campus Hub", "maintenance_mode": True})
        assert r.json()["message"] == "Settings saved successfully"
        result = data_of(r)
        assert sorted(result["saved"]) == ["maintenance_mode", "site_name"]
        assert result["errors"] == {}
        assert result["settings"]["site_name"] == "Campus Hub"
        assert result["settings"]["maintenance_mode"] is True
        assert result["settings"]["session_timeout"] == 30

        again = data_of(api_call(client, "PUT", "/admin/settings", headers=admin_headers, json={"site_name": "Hub 2"}))
        assert again["settings"]["site_name"] == "Hub 2"
        assert again["settings"]["maintenance_mode"] is True

    def test_invalid_values_rejected(self, client: TestClient, admin_headers):
        r = client.put("/admin/settings", headers=admin_headers, json={"session_timeout": 0})
        assert_error(r, 422)
        r = client.put("/admin/settings", headers=admin_headers, json={"default_user_role": "guest"})
        assert_error(r, 422)
