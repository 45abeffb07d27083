from fastapi.testclient import TestClient

from tests.helpers.asserts import api_call, assert_error, data_of


def test_read_own_profile(client: TestClient, student, student_headers):
    user, _ = student
    data = data_of(api_call(client, "GET", "/account/me", headers=student_headers))
    assert data["id"] == user.id
    assert data["role"] == "student"
    assert data["year"] == "1st Year"
    assert data["dept"] == "CSE"


def test_student_updates_student_fields(client: TestClient, student_headers):
    payload = {"full_name": "Renamed Student", "section": "B", "phone": "555-0101"}
    data = data_of(api_call(client, "PUT", "/account/me", headers=student_headers, json=payload))
    assert data["full_name"] == "Renamed Student"
    assert data["section"] == "B"
    assert data["phone"] == "555-0101"


def test_faculty_cannot_set_student_fields(client: TestClient, faculty_headers):
    payload = {"regno": "REG-999", "faculty_id": "FAC-777"}
    data = data_of(api_call(client, "PUT", "/account/me", headers=faculty_headers, json=payload))
    assert data["regno"] is None
    assert data["faculty_id"] == "FAC-777"


def test_student_cannot_set_faculty_id(client: TestClient, student_headers):
    data = data_of(api_call(client, "PUT", "/account/me", headers=student_headers, json={"faculty_id": "FAC-1"}))
    assert data["faculty_id"] is None


def test_empty_update_rejected(client: TestClient, student_headers):
    r = client.put("/account/me", headers=student_headers, json={})
    assert_error(r, 422)
