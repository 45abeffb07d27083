import logging
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.constants import QuizAttemptStatusEnum
from app.crud.quiz import quiz as crud_quiz
from app.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt
from app.crud.question_response import question_response as crud_question_response
from app.models.course import Course
from app.models.module import Module
from app.models.quiz import Quiz
from app.models.quiz_attempt import QuizAttempt
from app.schemas.quiz_attempt import (
    QuizSubmission, QuizSubmissionResult, QuizAttemptCreate, QuestionResponseCreate,
    QuestionResult, QuizAttempt as QuizAttemptSchema, QuizAttemptDetail, QuestionResponse,
)
from app.schemas.user import UserContext
from app.services.course_steps import course_steps_service
from app.utils.grading import AnswerSheet, InvalidSelection, QuestionKey, is_passed
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class QuizAttemptService:

    def _get_quiz_or_404(self, db: Session, quiz_id: int, current_user_context: UserContext) -> Quiz:
        quiz = crud_quiz.get(db, id=quiz_id)
        # Unpublished quizzes are invisible to students
        if not quiz or (permission_helper.is_student(current_user_context) and not quiz.is_published):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found.")
        return quiz

    def _resolve_placement(self, db: Session, quiz: Quiz) -> Tuple[Optional[Course], Optional[Module]]:
        if quiz.module_id:
            return quiz.module.course, quiz.module
        return quiz.course, None

    def _require_attempt_view_permission(self, db: Session, attempt: QuizAttempt, current_user_context: UserContext):
        if attempt.student_id == current_user_context.user.id:
            return
        if not permission_helper.can_manage_quiz(current_user_context, attempt.quiz):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only view your own quiz attempts."
            )

    def _collect_answers(self, submission: QuizSubmission) -> dict:
        answers = {}
        for answer in submission.answers:
            if answer.question_id in answers:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Question {answer.question_id} was answered more than once."
                )
            answers[answer.question_id] = answer.selected_options
        return answers

    def submit_quiz(self, db: Session, quiz_id: int, submission: QuizSubmission, current_user_context: UserContext) -> QuizSubmissionResult:
        """Grades a submission and records it in the caller's transaction.

        The attempt, its responses and any resulting lesson completion either all
        persist or none do.
        """
        quiz = self._get_quiz_or_404(db, quiz_id, current_user_context)
        if not quiz.is_published:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This quiz is not published.")
        if not quiz.questions:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This quiz has no questions.")

        user_id = current_user_context.user.id
        course, module = self._resolve_placement(db, quiz)
        enrolled = False
        if course is not None:
            enrolled = course_steps_service.require_step_access(db, course, current_user_context)
        if module is not None:
            current = course_steps_service.assemble(db, course, user_id, enrolled)
            step = next((s for s in current.steps if s.module_id == module.id), None)
            if step is not None and step.is_locked:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="This step is locked. Complete the previous step first."
                )

        sheet = AnswerSheet([QuestionKey.from_question(q) for q in quiz.questions], quiz.passing_score)
        try:
            sheet.replay(self._collect_answers(submission))
        except InvalidSelection as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
        result = sheet.submit()

        now = datetime.now()
        attempt = crud_quiz_attempt.create(
            db,
            obj_in=QuizAttemptCreate(
                quiz_id=quiz.id,
                student_id=user_id,
                status=QuizAttemptStatusEnum.SUBMITTED.value,
                score=result.correct,
                max_score=result.total,
                percentage=result.percentage,
                started_at=now,
                submitted_at=now,
            ),
            commit=False,
        )

        results = []
        for question_id in sheet.order:
            selected = sheet.selected(question_id)
            verdict = result.verdicts[question_id]
            if selected:
                crud_question_response.create(
                    db,
                    obj_in=QuestionResponseCreate(
                        attempt_id=attempt.id,
                        question_id=question_id,
                        selected_options=selected,
                        is_correct=verdict,
                        marks_obtained=1 if verdict else 0,
                    ),
                    commit=False,
                )
            results.append(QuestionResult(
                question_id=question_id,
                selected_options=selected,
                correct_options=sorted(sheet.keys[question_id].correct_ids),
                is_correct=verdict,
            ))

        # Threshold is read back at decision time
        db.refresh(quiz, ["passing_score"])
        passed = is_passed(result.percentage, quiz.passing_score)

        if passed and module is not None and module.lesson is not None:
            course_steps_service.record_lesson_completion(db, user_id, module.lesson, course.id)

        logger.info(
            f"User {user_id} submitted quiz {quiz.id}: {result.correct}/{result.total} "
            f"({result.percentage:.1f}%), {'passed' if passed else 'failed'}"
        )

        course_steps = None
        if module is not None:
            course_steps = course_steps_service.assemble(
                db, course, user_id, enrolled, focus_module_id=module.id if passed else None
            )

        return QuizSubmissionResult(
            attempt=QuizAttemptSchema.model_validate(attempt),
            passed=passed,
            passing_score=quiz.passing_score,
            can_retry=not passed,
            # Step quizzes always reveal the answer key after submit
            results=results if quiz.show_results or module is not None else [],
            course_steps=course_steps,
        )

    def list_attempts(self, db: Session, quiz_id: int, current_user_context: UserContext) -> List[QuizAttempt]:
        quiz = self._get_quiz_or_404(db, quiz_id, current_user_context)
        if permission_helper.can_manage_quiz(current_user_context, quiz):
            return crud_quiz_attempt.get_by_quiz(db, quiz_id=quiz.id)
        return crud_quiz_attempt.get_by_student_and_quiz(db, student_id=current_user_context.user.id, quiz_id=quiz.id)

    def get_attempt_detail(self, db: Session, attempt_id: int, current_user_context: UserContext) -> QuizAttemptDetail:
        attempt = crud_quiz_attempt.get_with_responses(db, id=attempt_id)
        if not attempt:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz attempt not found.")
        self._require_attempt_view_permission(db, attempt, current_user_context)

        quiz = attempt.quiz
        return QuizAttemptDetail(
            **QuizAttemptSchema.model_validate(attempt).model_dump(),
            quiz_title=quiz.title,
            passing_score=quiz.passing_score,
            passed=is_passed(attempt.percentage, quiz.passing_score),
            responses=[QuestionResponse.model_validate(r) for r in attempt.responses],
        )


quiz_attempt_service = QuizAttemptService()
