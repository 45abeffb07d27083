from fastapi.testclient import TestClient

from app.core.constants import RoleEnum
from tests.helpers.asserts import api_call, assert_error, data_of
from tests.helpers.builders import create_course, create_step, enroll, option_ids_by_text, question, submit


def _course_with_quiz(client, faculty_headers, title="Reported course"):
    course = create_course(client, faculty_headers, title=title)
    step = create_step(client, faculty_headers, course["id"], "Only step", questions=[question("Q", ["A", "B"], [0])])
    return course, step


def _answer(client, headers, step, text):
    qid = step["quiz"]["questions"][0]["id"]
    return data_of(submit(client, headers, step["quiz"]["id"], {qid: [option_ids_by_text(step)[text]]}))


class TestDashboard:
    def test_admin_dashboard_counts(self, client: TestClient, admin_headers, faculty_headers, student_headers):
        _course_with_quiz(client, faculty_headers)
        dashboard = data_of(api_call(client, "GET", "/reports/dashboard", headers=admin_headers))
        assert dashboard["role"] == "admin"
        assert dashboard["faculty"] is None
        totals = dashboard["admin"]
        assert totals["total_users"] == 3
        assert totals["total_students"] == 1
        assert totals["total_faculty"] == 1
        assert totals["total_courses"] == 1
        assert totals["total_quizzes"] == 1

    def test_faculty_dashboard(self, client: TestClient, faculty_headers, student_headers):
        course, step = _course_with_quiz(client, faculty_headers)
        empty = data_of(api_call(client, "GET", "/reports/dashboard", headers=faculty_headers))["faculty"]
        assert empty["average_score"] is None

        enroll(client, student_headers, course["id"])
        _answer(client, student_headers, step, "B")
        _answer(client, student_headers, step, "A")

        totals = data_of(api_call(client, "GET", "/reports/dashboard", headers=faculty_headers))["faculty"]
        assert totals["total_courses"] == 1
        assert totals["total_students"] == 1
        assert totals["total_quizzes"] == 1
        assert totals["average_score"] == 50.0

    def test_student_dashboard(self, client: TestClient, faculty_headers, student_headers):
        course, step = _course_with_quiz(client, faculty_headers, title="Student view")
        enroll(client, student_headers, course["id"])
        _answer(client, student_headers, step, "A")

        overview = data_of(api_call(client, "GET", "/reports/dashboard", headers=student_headers))["student"]
        assert overview["enrolled_courses"] == 1
        assert overview["completed_courses"] == 1
        assert overview["courses"][0]["title"] == "Student view"
        assert overview["courses"][0]["progress"] == 100
        assert overview["recent_quiz_results"][0]["passed"] is True
        assert overview["recent_quiz_results"][0]["percentage"] == 100.0


class TestAnalytics:
    def test_admin_analytics(self, client: TestClient, admin_headers, faculty_headers, student_headers, token_for_role):
        course, step = _course_with_quiz(client, faculty_headers, title="A very long course title that needs trimming")
        _, second_student = token_for_role(RoleEnum.STUDENT)
        enroll(client, student_headers, course["id"])
        enroll(client, second_student, course["id"])
        _answer(client, student_headers, step, "A")
        _answer(client, second_student, step, "B")

        analytics = data_of(api_call(client, "GET", "/reports/admin/analytics", headers=admin_headers))
        assert analytics["totals"]["total_users"] == 4
        assert analytics["top_courses"] == [
            {"title": "A very long course title that ...", "enrollments": 2}
        ]
        assert analytics["quiz_performance"] == {"passed": 1, "failed": 1, "total": 2, "pass_rate": 50.0}
        assert analytics["completion_rates"] == [{"course": "A very long course title ...", "rate": 50}]
        assert sum(b["count"] for b in analytics["enrollment_trends"]) == 2
        assert analytics["user_growth"][-1]["count"] == 4

    def test_admin_analytics_forbidden_for_others(self, client: TestClient, faculty_headers, student_headers):
        for headers in (faculty_headers, student_headers):
            assert_error(client.get("/reports/admin/analytics", headers=headers), 403)

    def test_faculty_analytics(self, client: TestClient, faculty_headers, student_headers):
        course, step = _course_with_quiz(client, faculty_headers, title="Networks")
        create_course(client, faculty_headers, title="Empty course")
        enroll(client, student_headers, course["id"])
        _answer(client, student_headers, step, "A")

        analytics = data_of(api_call(client, "GET", "/reports/faculty/analytics", headers=faculty_headers))
        performance = {p["course"]: p for p in analytics["course_performance"]}
        assert performance["Networks"] == {"course": "Networks", "students": 1, "avg_progress": 100}
        assert performance["Empty course"]["students"] == 0
        assert analytics["quiz_scores"] == [{"quiz": "Quiz for Only step", "avg_score": 100}]
        assert sum(b["count"] for b in analytics["student_engagement"]) == 1

    def test_faculty_analytics_requires_faculty(self, client: TestClient, admin_headers, student_headers):
        for headers in (admin_headers, student_headers):
            assert_error(client.get("/reports/faculty/analytics", headers=headers), 403, "Only faculty")

    def test_zero_threshold_attempt_counts_as_passed(self, client: TestClient, admin_headers, faculty_headers, student_headers):
        course = create_course(client, faculty_headers, title="Open door")
        step = create_step(client, faculty_headers, course["id"], "Warm up",
                           questions=[question("Q", ["A", "B"], [0])], passing_score=0)
        enroll(client, student_headers, course["id"])
        assert _answer(client, student_headers, step, "B")["passed"] is True

        analytics = data_of(api_call(client, "GET", "/reports/admin/analytics", headers=admin_headers))
        assert analytics["quiz_performance"] == {"passed": 1, "failed": 0, "total": 1, "pass_rate": 100.0}

    def test_faculty_completion_and_quiz_pass_rates(self, client: TestClient, faculty_headers, student_headers, token_for_role):
        course, step = _course_with_quiz(client, faculty_headers, title="Distributed systems fundamentals")
        lenient = create_step(client, faculty_headers, course["id"], "Second",
                              questions=[question("Q", ["A", "B"], [0])], passing_score=0)
        _, other_student = token_for_role(RoleEnum.STUDENT)
        enroll(client, student_headers, course["id"])
        enroll(client, other_student, course["id"])
        _answer(client, student_headers, step, "A")
        _answer(client, student_headers, lenient, "A")
        _answer(client, other_student, step, "B")

        analytics = data_of(api_call(client, "GET", "/reports/faculty/analytics", headers=faculty_headers))
        assert analytics["completion_rates"] == [{"course": "Distributed systems funda...", "rate": 50}]
        assert analytics["top_performing_quizzes"] == [
            {"quiz": "Quiz for Second", "pass_rate": 100},
            {"quiz": "Quiz for Only step", "pass_rate": 50},
        ]

    def test_faculty_analytics_keeps_top_five(self, client: TestClient, faculty_headers):
        for i in range(7):
            create_course(client, faculty_headers, title=f"Course {i}")
        analytics = data_of(api_call(client, "GET", "/reports/faculty/analytics", headers=faculty_headers))
        assert len(analytics["course_performance"]) == 5
        assert analytics["completion_rates"] == []
        assert analytics["top_performing_quizzes"] == []
