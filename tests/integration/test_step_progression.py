from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.enrollment import Enrollment
from app.models.lesson_progress import LessonProgress
from app.models.question_response import QuestionResponse
from app.models.quiz_attempt import QuizAttempt
from tests.helpers.asserts import api_call, data_of
from tests.helpers.builders import (
    create_course, create_step, enroll, get_steps, option_ids_by_text, question, submit,
)


def _two_step_course(client, faculty_headers):
    course = create_course(client, faculty_headers, title="Progression Course")
    first = create_step(
        client, faculty_headers, course["id"], "Step One",
        questions=[question("Pick A", ["A", "B"], [0])],
    )
    second = create_step(client, faculty_headers, course["id"], "Step Two")
    return course, first, second


def test_quiz_gated_progression(client: TestClient, faculty_headers, student, student_headers, db_session: Session):
    """
    Fail the first step's quiz, stay locked, retry and pass, then the second step opens.
    """
    print("\n[TEST] Quiz gated progression")
    user, _ = student

    print("[1] Building a two-step course")
    course, first, second = _two_step_course(client, faculty_headers)
    quiz_id = first["quiz"]["id"]
    qid = first["quiz"]["questions"][0]["id"]
    opts = option_ids_by_text(first)
    print(f"[OK] Course {course['id']} with quiz {quiz_id}")

    print("[2] Enrolling student")
    enroll(client, student_headers, course["id"])
    view = get_steps(client, student_headers, course["id"])
    assert [s["is_locked"] for s in view["steps"]] == [False, True]
    print("[OK] Second step locked on entry")

    print("[3] Failing the quiz")
    failed = data_of(submit(client, student_headers, quiz_id, {qid: [opts["B"]]}))
    assert failed["passed"] is False
    assert failed["attempt"]["percentage"] == 0.0
    steps = failed["course_steps"]["steps"]
    assert steps[0]["is_completed"] is False
    assert steps[1]["is_locked"] is True
    assert failed["course_steps"]["active_step_index"] == 0
    print("[OK] Still locked after failing")

    print("[4] Retrying with the right answer")
    passed = data_of(submit(client, student_headers, quiz_id, {qid: [opts["A"]]}))
    assert passed["passed"] is True
    assert passed["can_retry"] is False
    assert passed["attempt"]["percentage"] == 100.0
    steps = passed["course_steps"]["steps"]
    assert steps[0]["is_completed"] is True
    assert steps[0]["quiz_passed"] is True
    assert steps[1]["is_locked"] is False
    assert passed["course_steps"]["active_step_index"] == 1
    print("[OK] Second step unlocked")

    print("[5] Completing the plain lesson")
    final = data_of(api_call(client, "POST", f"/courses/{course['id']}/steps/{second['module_id']}/complete",
                             headers=student_headers))
    assert all(s["is_completed"] for s in final["steps"])

    enrollment = db_session.query(Enrollment).filter_by(course_id=course["id"], student_id=user.id).one()
    assert enrollment.progress == 100
    assert enrollment.completed_at is not None
    print("[OK] Course completed")


def test_retry_history_kept_and_latest_attempt_decides(client: TestClient, faculty_headers, student, student_headers,
                                                       db_session: Session):
    print("\n[TEST] Attempt history")
    user, _ = student
    course, first, _ = _two_step_course(client, faculty_headers)
    quiz_id = first["quiz"]["id"]
    qid = first["quiz"]["questions"][0]["id"]
    opts = option_ids_by_text(first)
    enroll(client, student_headers, course["id"])

    data_of(submit(client, student_headers, quiz_id, {qid: [opts["A"]]}))
    latest = data_of(submit(client, student_headers, quiz_id, {qid: [opts["B"]]}))
    assert latest["passed"] is False

    attempts = db_session.query(QuizAttempt).filter_by(quiz_id=quiz_id, student_id=user.id).all()
    assert len(attempts) == 2
    print(f"[OK] {len(attempts)} attempts stored")

    view = get_steps(client, student_headers, course["id"])
    # Lesson completion is permanent but the quiz outcome follows the latest attempt
    assert view["steps"][0]["is_completed"] is True
    assert view["steps"][0]["quiz_passed"] is False
    assert view["steps"][1]["is_locked"] is True
    print("[OK] Latest failing attempt relocks the next step")


def test_unanswered_questions_store_no_response(client: TestClient, faculty_headers, student_headers,
                                                db_session: Session):
    course = create_course(client, faculty_headers)
    step = create_step(
        client, faculty_headers, course["id"], "Three questions",
        questions=[question(f"Q{i}", ["A", "B"], [0]) for i in range(3)],
    )
    enroll(client, student_headers, course["id"])
    q = step["quiz"]["questions"]
    answers = {
        q[0]["id"]: [option_ids_by_text(step, 0)["A"]],
        q[1]["id"]: [option_ids_by_text(step, 1)["A"]],
    }

    result = data_of(submit(client, student_headers, step["quiz"]["id"], answers))
    assert round(result["attempt"]["percentage"], 2) == 66.67
    assert result["results"][2]["selected_options"] == []

    stored = db_session.query(QuestionResponse).filter_by(attempt_id=result["attempt"]["id"]).all()
    assert sorted(r.question_id for r in stored) == sorted(answers)


def test_completing_twice_keeps_one_progress_row(client: TestClient, faculty_headers, student, student_headers,
                                                 db_session: Session):
    user, _ = student
    course = create_course(client, faculty_headers)
    step = create_step(client, faculty_headers, course["id"], "Lesson only")
    enroll(client, student_headers, course["id"])

    path = f"/courses/{course['id']}/steps/{step['module_id']}/complete"
    first = data_of(api_call(client, "POST", path, headers=student_headers))
    second = data_of(api_call(client, "POST", path, headers=student_headers))
    assert first == second

    rows = db_session.query(LessonProgress).filter_by(student_id=user.id, lesson_id=step["lesson"]["id"]).all()
    assert len(rows) == 1
    assert rows[0].completed is True


def test_steps_view_is_stable(client: TestClient, faculty_headers, student_headers):
    course, first, _ = _two_step_course(client, faculty_headers)
    enroll(client, student_headers, course["id"])
    qid = first["quiz"]["questions"][0]["id"]
    submit(client, student_headers, first["quiz"]["id"], {qid: [option_ids_by_text(first)["A"]]})

    assert get_steps(client, student_headers, course["id"]) == get_steps(client, student_headers, course["id"])


def test_enrollment_progress_tracks_lessons(client: TestClient, faculty_headers, student, student_headers,
                                            db_session: Session):
    user, _ = student
    course = create_course(client, faculty_headers)
    steps = [create_step(client, faculty_headers, course["id"], f"Part {i}") for i in range(4)]
    enroll(client, student_headers, course["id"])

    expected = [25, 50, 75, 100]
    for step, progress in zip(steps, expected):
        api_call(client, "POST", f"/courses/{course['id']}/steps/{step['module_id']}/complete", headers=student_headers)
        db_session.expire_all()
        enrollment = db_session.query(Enrollment).filter_by(course_id=course["id"], student_id=user.id).one()
        assert enrollment.progress == progress

    mine = data_of(api_call(client, "GET", "/reports/dashboard", headers=student_headers))["student"]
    assert mine["completed_courses"] == 1


def test_new_step_after_completion_locks_behind_last(client: TestClient, faculty_headers, student_headers):
    course = create_course(client, faculty_headers)
    step = create_step(client, faculty_headers, course["id"], "First")
    enroll(client, student_headers, course["id"])
    api_call(client, "POST", f"/courses/{course['id']}/steps/{step['module_id']}/complete", headers=student_headers)

    create_step(client, faculty_headers, course["id"], "Added later")
    create_step(client, faculty_headers, course["id"], "Added even later")
    view = get_steps(client, student_headers, course["id"])
    assert [s["is_locked"] for s in view["steps"]] == [False, False, True]
    assert view["active_step_index"] == 0
