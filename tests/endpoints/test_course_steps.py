from fastapi.testclient import TestClient

from app.core.constants import RoleEnum
from tests.helpers.asserts import api_call, assert_error, data_of
from tests.helpers.builders import create_course, create_step, enroll, get_steps, question


class TestStepAuthoring:
    def test_create_step_with_lesson_and_quiz(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        step = create_step(
            client, faculty_headers, course["id"], "Variables",
            questions=[question("What is x?", ["A", "B"], [0])], passing_score=60,
        )

        assert step["title"] == "Variables"
        assert step["position"] == 0
        assert step["lesson"]["title"] == "Variables"
        assert step["lesson"]["media_url"] == "https://cdn.test/video.mp4"
        assert step["lesson"]["content_type"] == "video"
        assert step["quiz"]["title"] == "Quiz for Variables"
        assert step["quiz"]["passing_score"] == 60
        assert step["quiz"]["is_published"] is True
        options = step["quiz"]["questions"][0]["options"]
        assert [(o["text"], o["is_correct"]) for o in options] == [("A", True), ("B", False)]

    def test_steps_are_appended_in_order(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        first = create_step(client, faculty_headers, course["id"], "One")
        second = create_step(client, faculty_headers, course["id"], "Two")
        assert (first["position"], second["position"]) == (0, 1)

        detail = data_of(api_call(client, "GET", f"/courses/{course['id']}", headers=faculty_headers))
        assert detail["step_count"] == 2

    def test_title_required(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        r = client.post(f"/courses/{course['id']}/steps", headers=faculty_headers, json={"title": "  "})
        assert_error(r, 400, "Please enter step title")

    def test_blank_questions_and_options_are_dropped(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        step = create_step(
            client, faculty_headers, course["id"], "Loops",
            questions=[question("", ["x"], [0]), question("Pick one", ["Yes", "  ", "No"], [0])],
        )
        questions = step["quiz"]["questions"]
        assert len(questions) == 1
        assert [o["text"] for o in questions[0]["options"]] == ["Yes", "No"]

    def test_quiz_without_questions_is_not_created(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        step = create_step(client, faculty_headers, course["id"], "Reading", questions=[question("  ", [], [])])
        assert step["quiz"] is None

    def test_update_replaces_questions(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        step = create_step(
            client, faculty_headers, course["id"], "Functions",
            questions=[question("Old 1", ["A", "B"], [0]), question("Old 2", ["A", "B"], [1])],
        )
        quiz_id = step["quiz"]["id"]

        payload = {
            "title": "Functions II",
            "content": "updated",
            "quiz": {"passing_score": 80, "questions": [question("New", ["P", "Q", "R"], [1, 2], "multiple")]},
        }
        updated = data_of(api_call(client, "PUT", f"/courses/{course['id']}/steps/{step['module_id']}",
                                   headers=faculty_headers, json=payload))

        assert updated["title"] == "Functions II"
        assert updated["lesson"]["title"] == "Functions II"
        assert updated["lesson"]["content"] == "updated"
        assert updated["lesson"]["media_url"] is None
        assert updated["quiz"]["id"] == quiz_id
        assert updated["quiz"]["passing_score"] == 80
        assert [q["text"] for q in updated["quiz"]["questions"]] == ["New"]
        assert updated["quiz"]["questions"][0]["qtype"] == "multiple"

        fetched = data_of(api_call(client, "GET", f"/courses/{course['id']}/steps/{step['module_id']}",
                                   headers=faculty_headers))
        assert fetched == updated

    def test_delete_step(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        step = create_step(client, faculty_headers, course["id"], "Temp", questions=[question("Q", ["A"], [0])])
        api_call(client, "DELETE", f"/courses/{course['id']}/steps/{step['module_id']}", headers=faculty_headers)

        r = client.get(f"/courses/{course['id']}/steps/{step['module_id']}", headers=faculty_headers)
        assert_error(r, 404, "Step not found")
        r = client.get(f"/quizzes/{step['quiz']['id']}", headers=faculty_headers)
        assert_error(r, 404)

    def test_step_from_other_course_not_found(self, client: TestClient, faculty_headers):
        course_a = create_course(client, faculty_headers)
        course_b = create_course(client, faculty_headers)
        step = create_step(client, faculty_headers, course_a["id"], "Only in A")
        r = client.get(f"/courses/{course_b['id']}/steps/{step['module_id']}", headers=faculty_headers)
        assert_error(r, 404)

    def test_non_owner_cannot_author(self, client: TestClient, faculty_headers, student_headers, token_for_role):
        _, other_faculty = token_for_role(RoleEnum.FACULTY)
        course = create_course(client, faculty_headers)
        for headers in (other_faculty, student_headers):
            r = client.post(f"/courses/{course['id']}/steps", headers=headers, json={"title": "Sneaky"})
            assert_error(r, 403)

    def test_admin_can_author_any_course(self, client: TestClient, faculty_headers, admin_headers):
        course = create_course(client, faculty_headers)
        step = create_step(client, admin_headers, course["id"], "Admin step")
        assert step["course_id"] == course["id"]


class TestStepsView:
    def test_student_must_enroll_first(self, client: TestClient, faculty_headers, student_headers):
        course = create_course(client, faculty_headers)
        create_step(client, faculty_headers, course["id"], "Intro")
        r = client.get(f"/courses/{course['id']}/steps", headers=student_headers)
        assert_error(r, 403, "enroll in this course first")

    def test_later_steps_start_locked(self, client: TestClient, faculty_headers, student_headers):
        course = create_course(client, faculty_headers)
        for title in ("One", "Two", "Three"):
            create_step(client, faculty_headers, course["id"], title)
        enroll(client, student_headers, course["id"])

        view = get_steps(client, student_headers, course["id"])
        assert view["is_enrolled"] is True
        assert [s["is_locked"] for s in view["steps"]] == [False, True, True]
        assert [s["is_completed"] for s in view["steps"]] == [False, False, False]
        assert view["active_step_index"] == 0

    def test_student_view_hides_correct_answers(self, client: TestClient, faculty_headers, student_headers):
        course = create_course(client, faculty_headers)
        create_step(client, faculty_headers, course["id"], "Quiz step", questions=[question("Q", ["A", "B"], [0])])
        enroll(client, student_headers, course["id"])

        step = get_steps(client, student_headers, course["id"])["steps"][0]
        assert step["quiz_passed"] is False
        assert all("is_correct" not in o for o in step["quiz"]["questions"][0]["options"])

    def test_complete_lesson_unlocks_next(self, client: TestClient, faculty_headers, student_headers):
        course = create_course(client, faculty_headers)
        first = create_step(client, faculty_headers, course["id"], "One")
        create_step(client, faculty_headers, course["id"], "Two")
        enroll(client, student_headers, course["id"])

        view = data_of(api_call(client, "POST", f"/courses/{course['id']}/steps/{first['module_id']}/complete",
                                headers=student_headers))
        assert view["steps"][0]["is_completed"] is True
        assert view["steps"][1]["is_locked"] is False
        assert view["active_step_index"] == 1

    def test_locked_step_cannot_be_completed(self, client: TestClient, faculty_headers, student_headers):
        course = create_course(client, faculty_headers)
        create_step(client, faculty_headers, course["id"], "One")
        second = create_step(client, faculty_headers, course["id"], "Two")
        enroll(client, student_headers, course["id"])

        r = client.post(f"/courses/{course['id']}/steps/{second['module_id']}/complete", headers=student_headers)
        assert_error(r, 403, "This step is locked")

    def test_quiz_step_requires_passing_quiz(self, client: TestClient, faculty_headers, student_headers):
        course = create_course(client, faculty_headers)
        step = create_step(client, faculty_headers, course["id"], "Quizzed", questions=[question("Q", ["A"], [0])])
        enroll(client, student_headers, course["id"])

        r = client.post(f"/courses/{course['id']}/steps/{step['module_id']}/complete", headers=student_headers)
        assert_error(r, 400, "Pass this step's quiz")

    def test_instructor_previews_without_enrolling(self, client: TestClient, faculty_headers):
        course = create_course(client, faculty_headers)
        create_step(client, faculty_headers, course["id"], "One")
        view = get_steps(client, faculty_headers, course["id"])
        assert view["is_enrolled"] is False
        assert len(view["steps"]) == 1

    def test_missing_course(self, client: TestClient, student_headers):
        assert_error(client.get("/courses/999999/steps", headers=student_headers), 404, "Course not found")
