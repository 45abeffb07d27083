import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.crud.base import PaginatedResponse
from app.crud.course import course as crud_course
from app.crud.module import module as crud_module
from app.crud.quiz import quiz as crud_quiz
from app.models.course import Course
from app.models.quiz import Quiz as QuizModel
from app.schemas.quiz import QuizCreate, QuizUpdate, Quiz, QuizDetail
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class QuizService:

    def _get_quiz_or_404(self, db: Session, quiz_id: int) -> QuizModel:
        quiz = crud_quiz.get(db, id=quiz_id)
        if not quiz:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found.")
        return quiz

    def _validate_placement(self, db: Session, current_user_context: UserContext,
                            course_id: Optional[int], module_id: Optional[int],
                            quiz_id: Optional[int] = None) -> Optional[int]:
        """Checks the target course/module and returns the course id the quiz should carry."""
        course: Optional[Course] = None
        if course_id is not None:
            course = crud_course.get(db, id=course_id)
            if not course:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found.")

        if module_id is not None:
            module = crud_module.get(db, id=module_id)
            if not module:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Step not found.")
            if course is not None and module.course_id != course.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Step does not belong to the selected course."
                )
            course = module.course
            existing = crud_quiz.get_by_module(db, module_id=module_id)
            if existing and existing.id != quiz_id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="This step already has a quiz."
                )

        if course is not None:
            permission_helper.require_course_management_permission(current_user_context, course)
            return course.id
        return None

    def list_quizzes(self, db: Session, current_user_context: UserContext, skip: int = 0, limit: int = 100) -> PaginatedResponse[Quiz]:
        permission_helper.require_not_student(current_user_context, "Students cannot manage quizzes.")
        if permission_helper.is_admin(current_user_context):
            quizzes = crud_quiz.get_filtered(db, skip=skip, limit=limit)
            total = crud_quiz.count(db)
        else:
            user_id = current_user_context.user.id
            quizzes = crud_quiz.get_filtered(db, created_by=user_id, skip=skip, limit=limit)
            total = crud_quiz.count_by_creator(db, created_by=user_id)
        return PaginatedResponse.build(
            [Quiz.model_validate(q) for q in quizzes], total=total, skip=skip, limit=limit
        )

    def get_quiz(self, db: Session, quiz_id: int, current_user_context: UserContext) -> QuizDetail:
        quiz = self._get_quiz_or_404(db, quiz_id)
        permission_helper.require_quiz_management_permission(current_user_context, quiz)
        return QuizDetail.model_validate(quiz)

    def create_quiz(self, db: Session, quiz_in: QuizCreate, current_user_context: UserContext) -> QuizModel:
        permission_helper.require_not_student(current_user_context, "Students cannot create quizzes.")

        quiz_data = quiz_in.model_dump()
        quiz_data["course_id"] = self._validate_placement(
            db, current_user_context, quiz_in.course_id, quiz_in.module_id
        )
        quiz_data["created_by"] = current_user_context.user.id

        new_quiz = crud_quiz.create(db, obj_in=quiz_data, commit=False)
        logger.info(f"User {current_user_context.user.id} created quiz {new_quiz.id}")
        return new_quiz

    def update_quiz(self, db: Session, quiz_id: int, quiz_in: QuizUpdate, current_user_context: UserContext) -> QuizModel:
        quiz = self._get_quiz_or_404(db, quiz_id)
        permission_helper.require_quiz_management_permission(current_user_context, quiz)

        update_data = quiz_in.model_dump(exclude_unset=True)
        if "course_id" in update_data or "module_id" in update_data:
            course_id = update_data.get("course_id", quiz.course_id)
            module_id = update_data.get("module_id", quiz.module_id)
            update_data["course_id"] = self._validate_placement(
                db, current_user_context, course_id, module_id, quiz_id=quiz.id
            )

        quiz = crud_quiz.update(db, db_obj=quiz, obj_in=update_data, commit=False)
        logger.info(f"User {current_user_context.user.id} updated quiz {quiz.id}")
        return quiz

    def delete_quiz(self, db: Session, quiz_id: int, current_user_context: UserContext) -> None:
        quiz = self._get_quiz_or_404(db, quiz_id)
        permission_helper.require_quiz_management_permission(current_user_context, quiz)
        crud_quiz.delete(db, id=quiz.id, commit=False)
        logger.info(f"User {current_user_context.user.id} deleted quiz {quiz_id}")


quiz_service = QuizService()
