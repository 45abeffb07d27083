import logging
from collections import OrderedDict
from datetime import datetime
from typing import Iterable, List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.quiz import quiz as crud_quiz
from app.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt
from app.crud.user import user as crud_user
from app.schemas.report import (
    AdminDashboard, FacultyDashboard, StudentDashboard, StudentCourseProgress, RecentQuizResult,
    Dashboard, MonthlyCount, CourseEnrollmentStat, QuizPerformance, CompletionRate,
    AdminAnalytics, CoursePerformance, QuizScore, QuizPassRate, FacultyAnalytics,
)
from app.schemas.user import UserContext
from app.utils.grading import is_passed
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)

ANALYTICS_WINDOW_MONTHS = 6
TOP_COURSES_LIMIT = 5


def months_ago(now: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` back, clamped to 28 so every month has it."""
    year, month = now.year, now.month - months
    while month <= 0:
        month += 12
        year -= 1
    return now.replace(year=year, month=month, day=min(now.day, 28))


def month_label(value: datetime) -> str:
    return value.strftime("%b %Y")


def truncate(title: str, length: int) -> str:
    return title[:length] + "..." if len(title) > length else title


def count_by_month(dates: Iterable[datetime]) -> List[MonthlyCount]:
    """Buckets dates by month in first-seen order; callers pass dates sorted ascending."""
    buckets = OrderedDict()
    for value in dates:
        if value is None:
            continue
        label = month_label(value)
        buckets[label] = buckets.get(label, 0) + 1
    return [MonthlyCount(month=label, count=count) for label, count in buckets.items()]


def completion_rates_for(courses) -> List[CompletionRate]:
    """Share of each course's enrollments that finished it, highest first; zero rates are left out."""
    rates = []
    for course in courses:
        if not course.enrollments:
            continue
        completed = sum(1 for e in course.enrollments if e.completed_at is not None)
        rate = round(completed / len(course.enrollments) * 100)
        if rate > 0:
            rates.append(CompletionRate(course=truncate(course.title, 25), rate=rate))
    rates.sort(key=lambda item: item.rate, reverse=True)
    return rates[:TOP_COURSES_LIMIT]


class ReportService:

    def _admin_totals(self, db: Session) -> AdminDashboard:
        return AdminDashboard(
            total_users=crud_user.count(db),
            total_courses=crud_course.count(db),
            total_students=crud_user.count_by_role(db, role=RoleEnum.STUDENT),
            total_faculty=crud_user.count_by_role(db, role=RoleEnum.FACULTY),
            total_quizzes=crud_quiz.count(db),
        )

    def _faculty_totals(self, db: Session, user_id: int) -> FacultyDashboard:
        courses = crud_course.get_by_instructor(db, instructor_id=user_id)
        quizzes = crud_quiz.get_filtered(db, created_by=user_id, limit=None)
        attempts = crud_quiz_attempt.get_by_quizzes(db, quiz_ids=[q.id for q in quizzes])
        scores = [a.percentage for a in attempts if a.percentage is not None]
        return FacultyDashboard(
            total_courses=len(courses),
            total_students=crud_enrollment.count_by_courses(db, course_ids=[c.id for c in courses]),
            total_quizzes=len(quizzes),
            average_score=round(sum(scores) / len(scores), 1) if scores else None,
        )

    def _student_overview(self, db: Session, user_id: int) -> StudentDashboard:
        enrollments = crud_enrollment.get_by_student(db, student_id=user_id)
        recent = crud_quiz_attempt.get_recent_by_student(db, student_id=user_id)
        return StudentDashboard(
            enrolled_courses=len(enrollments),
            completed_courses=sum(1 for e in enrollments if e.completed_at is not None),
            courses=[
                StudentCourseProgress(
                    course_id=e.course_id,
                    title=e.course.title,
                    progress=e.progress,
                    completed_at=e.completed_at,
                )
                for e in enrollments
            ],
            recent_quiz_results=[
                RecentQuizResult(
                    attempt_id=a.id,
                    quiz_id=a.quiz_id,
                    quiz_title=a.quiz.title,
                    percentage=a.percentage,
                    passed=is_passed(a.percentage, a.quiz.passing_score),
                    submitted_at=a.submitted_at,
                )
                for a in recent
            ],
        )

    def get_dashboard(self, db: Session, current_user_context: UserContext) -> Dashboard:
        user_id = current_user_context.user.id
        dashboard = Dashboard(role=current_user_context.role)
        if permission_helper.is_admin(current_user_context):
            dashboard.admin = self._admin_totals(db)
        elif permission_helper.is_faculty(current_user_context):
            dashboard.faculty = self._faculty_totals(db, user_id)
        else:
            dashboard.student = self._student_overview(db, user_id)
        return dashboard

    def get_admin_analytics(self, db: Session, current_user_context: UserContext) -> AdminAnalytics:
        permission_helper.require_admin(current_user_context, "Only admins can view platform analytics.")
        since = months_ago(datetime.now(), ANALYTICS_WINDOW_MONTHS)

        user_growth = []
        cumulative = 0
        for bucket in count_by_month(u.created_at for u in crud_user.get_created_since(db, since=since)):
            cumulative += bucket.count
            user_growth.append(MonthlyCount(month=bucket.month, count=cumulative))

        enrollments = crud_enrollment.get_all_with_course(db)
        per_course = OrderedDict()
        for e in enrollments:
            title, count = per_course.get(e.course_id, (e.course.title, 0))
            per_course[e.course_id] = (title, count + 1)
        ranked = sorted(per_course.values(), key=lambda item: item[1], reverse=True)
        top_courses = [
            CourseEnrollmentStat(title=truncate(title, 30), enrollments=count)
            for title, count in ranked[:TOP_COURSES_LIMIT]
        ]

        enrollment_trends = count_by_month(
            e.enrolled_at for e in crud_enrollment.get_enrolled_since(db, since=since)
        )

        passed = failed = 0
        for attempt in crud_quiz_attempt.get_all_with_quiz(db):
            if is_passed(attempt.percentage, attempt.quiz.passing_score):
                passed += 1
            else:
                failed += 1
        total = passed + failed
        quiz_performance = QuizPerformance(
            passed=passed,
            failed=failed,
            total=total,
            pass_rate=round(passed / total * 100, 1) if total else 0.0,
        )

        return AdminAnalytics(
            totals=self._admin_totals(db),
            user_growth=user_growth,
            top_courses=top_courses,
            enrollment_trends=enrollment_trends,
            quiz_performance=quiz_performance,
            completion_rates=completion_rates_for(crud_course.get_all(db, limit=None)),
        )

    def get_faculty_analytics(self, db: Session, current_user_context: UserContext) -> FacultyAnalytics:
        if not permission_helper.is_faculty(current_user_context):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only faculty members can view teaching analytics."
            )
        user_id = current_user_context.user.id
        courses = crud_course.get_by_instructor(db, instructor_id=user_id)

        course_performance = []
        for course in courses:
            enrollments = course.enrollments
            avg_progress = sum(e.progress or 0 for e in enrollments) / len(enrollments) if enrollments else 0
            course_performance.append(CoursePerformance(
                course=truncate(course.title, 20),
                students=len(enrollments),
                avg_progress=round(avg_progress),
            ))

        quizzes = crud_quiz.get_filtered(db, created_by=user_id, limit=None)
        attempts = crud_quiz_attempt.get_by_quizzes(db, quiz_ids=[q.id for q in quizzes])
        attempts_by_quiz = {}
        for attempt in attempts:
            attempts_by_quiz.setdefault(attempt.quiz_id, []).append(attempt)
        quiz_scores = []
        quiz_pass_rates = []
        for quiz in quizzes:
            quiz_attempts = attempts_by_quiz.get(quiz.id, [])
            scores = [a.percentage for a in quiz_attempts if a.percentage is not None]
            avg_score = round(sum(scores) / len(scores)) if scores else 0
            if avg_score > 0:
                quiz_scores.append(QuizScore(quiz=truncate(quiz.title, 20), avg_score=avg_score))
            passed = sum(
                1 for a in quiz_attempts
                if a.percentage is not None and is_passed(a.percentage, quiz.passing_score)
            )
            pass_rate = round(passed / len(quiz_attempts) * 100) if quiz_attempts else 0
            if pass_rate > 0:
                quiz_pass_rates.append(QuizPassRate(quiz=truncate(quiz.title, 20), pass_rate=pass_rate))
        quiz_pass_rates.sort(key=lambda item: item.pass_rate, reverse=True)

        course_ids = [c.id for c in courses]
        student_engagement = []
        if course_ids:
            since = months_ago(datetime.now(), ANALYTICS_WINDOW_MONTHS)
            student_engagement = count_by_month(
                e.enrolled_at for e in crud_enrollment.get_enrolled_since(db, since=since, course_ids=course_ids)
            )

        return FacultyAnalytics(
            totals=self._faculty_totals(db, user_id),
            course_performance=course_performance[:TOP_COURSES_LIMIT],
            quiz_scores=quiz_scores[:TOP_COURSES_LIMIT],
            student_engagement=student_engagement,
            completion_rates=completion_rates_for(courses),
            top_performing_quizzes=quiz_pass_rates[:TOP_COURSES_LIMIT],
        )


report_service = ReportService()
