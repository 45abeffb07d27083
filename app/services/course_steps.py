import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.lesson import lesson as crud_lesson
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.crud.module import module as crud_module
from app.crud.quiz import quiz as crud_quiz
from app.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt
from app.models.course import Course
from app.models.lesson import Lesson
from app.schemas.step import CourseSteps, Step, StepLesson, StepQuiz
from app.schemas.user import UserContext
from app.utils.grading import StepState, derive_locks, first_unlocked_index, is_passed
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class CourseStepsService:

    def _get_course_or_404(self, db: Session, course_id: int) -> Course:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found.")
        return course

    def require_step_access(self, db: Session, course: Course, current_user_context: UserContext) -> bool:
        """Checks view permission and, for students, enrollment. Returns whether the user is enrolled."""
        permission_helper.require_course_view_permission(db, current_user_context, course)
        enrolled = permission_helper.is_enrolled(db, current_user_context, course.id)
        if permission_helper.is_student(current_user_context) and not enrolled:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must enroll in this course first."
            )
        return enrolled

    def assemble(self, db: Session, course: Course, student_id: int, is_enrolled: bool,
                 focus_module_id: Optional[int] = None) -> CourseSteps:
        """Builds the ordered step list with completion and lock state for one learner.

        Progress and quizzes are read in one batch each; quiz outcomes come from the
        latest submitted attempt per quiz.
        """
        modules = crud_module.get_by_course(db, course_id=course.id)
        lesson_ids = [m.lesson.id for m in modules if m.lesson]
        completed_ids = set(
            crud_lesson_progress.get_completed_lesson_ids(db, student_id=student_id, lesson_ids=lesson_ids)
        )

        quizzes = crud_quiz.get_published_by_modules(db, module_ids=[m.id for m in modules])
        # A published quiz without questions does not gate anything
        quiz_by_module = {q.module_id: q for q in quizzes if q.questions}

        quiz_passed = {}
        for quiz in quiz_by_module.values():
            latest = crud_quiz_attempt.get_latest_submitted(db, student_id=student_id, quiz_id=quiz.id)
            quiz_passed[quiz.id] = latest is not None and is_passed(latest.percentage, quiz.passing_score)

        states = []
        for m in modules:
            quiz = quiz_by_module.get(m.id)
            states.append(StepState(
                has_lesson=m.lesson is not None,
                lesson_completed=m.lesson is not None and m.lesson.id in completed_ids,
                has_quiz=quiz is not None,
                quiz_passed=quiz is not None and quiz_passed[quiz.id],
            ))
        locks = derive_locks(states)

        steps = []
        for m, state, locked in zip(modules, states, locks):
            quiz = quiz_by_module.get(m.id)
            steps.append(Step(
                module_id=m.id,
                title=m.title,
                description=m.description,
                position=m.position,
                lesson=StepLesson.model_validate(m.lesson) if m.lesson else None,
                quiz=StepQuiz.model_validate(quiz) if quiz else None,
                is_completed=state.lesson_completed,
                is_locked=locked,
                quiz_passed=quiz_passed[quiz.id] if quiz else None,
            ))

        active_index = first_unlocked_index(locks)
        if focus_module_id is not None:
            index = next((i for i, m in enumerate(modules) if m.id == focus_module_id), None)
            if index is not None and index + 1 < len(steps) and not locks[index + 1]:
                active_index = index + 1

        return CourseSteps(
            course_id=course.id,
            course_title=course.title,
            is_enrolled=is_enrolled,
            steps=steps,
            active_step_index=active_index,
        )

    def build_steps(self, db: Session, course_id: int, current_user_context: UserContext) -> CourseSteps:
        course = self._get_course_or_404(db, course_id)
        enrolled = self.require_step_access(db, course, current_user_context)
        return self.assemble(db, course, current_user_context.user.id, enrolled)

    def update_enrollment_progress(self, db: Session, student_id: int, course_id: int) -> None:
        enrollment = crud_enrollment.get_by_student_and_course(db, student_id=student_id, course_id=course_id)
        if not enrollment:
            return

        lesson_ids = crud_lesson.get_ids_by_course(db, course_id=course_id)
        completed = crud_lesson_progress.get_completed_lesson_ids(db, student_id=student_id, lesson_ids=lesson_ids)
        progress = round(len(completed) / len(lesson_ids) * 100) if lesson_ids else 0

        update_data = {"progress": progress}
        if progress >= 100 and enrollment.completed_at is None:
            update_data["completed_at"] = datetime.now()
        crud_enrollment.update(db, db_obj=enrollment, obj_in=update_data, commit=False)

    def record_lesson_completion(self, db: Session, student_id: int, lesson: Lesson, course_id: int) -> None:
        crud_lesson_progress.mark_completed(db, student_id=student_id, lesson_id=lesson.id, commit=False)
        self.update_enrollment_progress(db, student_id, course_id)
        logger.info(f"User {student_id} completed lesson {lesson.id} in course {course_id}")

    def complete_step(self, db: Session, course_id: int, module_id: int, current_user_context: UserContext) -> CourseSteps:
        course = self._get_course_or_404(db, course_id)
        enrolled = self.require_step_access(db, course, current_user_context)

        module = crud_module.get_in_course(db, course_id=course.id, module_id=module_id)
        if not module:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Step not found.")

        if not module.lesson:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This step has no lesson to complete."
            )

        if module.quiz and module.quiz.is_published and module.quiz.questions:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Pass this step's quiz to complete it."
            )

        user_id = current_user_context.user.id
        current = self.assemble(db, course, user_id, enrolled)
        step = next(s for s in current.steps if s.module_id == module.id)
        if step.is_locked:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="This step is locked. Complete the previous step first."
            )

        self.record_lesson_completion(db, user_id, module.lesson, course.id)
        return self.assemble(db, course, user_id, enrolled, focus_module_id=module.id)


course_steps_service = CourseStepsService()
