import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.constants import ContentTypeEnum
from app.crud.course import course as crud_course
from app.crud.lesson import lesson as crud_lesson
from app.crud.module import module as crud_module
from app.crud.question import question as crud_question, option as crud_option
from app.crud.quiz import quiz as crud_quiz
from app.models.course import Course
from app.models.module import Module
from app.models.quiz import Quiz
from app.schemas.lesson import LessonCreate
from app.schemas.step import StepSave, StepEditorView, StepEditorQuiz, StepLesson, QuizDraft
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class StepService:

    def _get_course_for_edit(self, db: Session, course_id: int, current_user_context: UserContext) -> Course:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found.")
        permission_helper.require_course_management_permission(current_user_context, course)
        return course

    def _get_module_or_404(self, db: Session, course_id: int, module_id: int) -> Module:
        module = crud_module.get_in_course(db, course_id=course_id, module_id=module_id)
        if not module:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Step not found.")
        return module

    def _editor_view(self, db: Session, course_id: int, module_id: int) -> StepEditorView:
        module = crud_module.get_in_course(db, course_id=course_id, module_id=module_id)
        return StepEditorView(
            module_id=module.id,
            course_id=module.course_id,
            title=module.title,
            description=module.description,
            position=module.position,
            lesson=StepLesson.model_validate(module.lesson) if module.lesson else None,
            quiz=StepEditorQuiz.model_validate(module.quiz) if module.quiz else None,
        )

    def _save_lesson(self, db: Session, module: Module, step_in: StepSave):
        lesson_data = {
            "title": module.title,
            "content": step_in.content or None,
            "media_url": step_in.video_url or None,
            "content_type": ContentTypeEnum.VIDEO.value,
        }
        existing = crud_lesson.get_by_module(db, module_id=module.id)
        if existing:
            crud_lesson.update(db, db_obj=existing, obj_in=lesson_data, commit=False)
        else:
            crud_lesson.create(db, obj_in=LessonCreate(module_id=module.id, position=0, **lesson_data), commit=False)

    def _save_quiz(self, db: Session, course: Course, module: Module, draft: QuizDraft, current_user_context: UserContext) -> Quiz:
        """Upserts the step's quiz, then replaces its questions wholesale.

        Question and option ids do not survive an edit.
        """
        quiz_data = {
            "title": (draft.title or "").strip() or f"Quiz for {module.title}",
            "course_id": course.id,
            "module_id": module.id,
            "is_published": True,
            "passing_score": draft.passing_score,
        }
        quiz = crud_quiz.get_by_module(db, module_id=module.id)
        if quiz:
            quiz = crud_quiz.update(db, db_obj=quiz, obj_in=quiz_data, commit=False)
        else:
            quiz_data["created_by"] = current_user_context.user.id
            quiz = crud_quiz.create(db, obj_in=quiz_data, commit=False)

        crud_question.delete_by_quiz(db, quiz_id=quiz.id)
        for q_index, question in enumerate(draft.questions):
            if not question.text.strip():
                continue
            new_question = crud_question.create(
                db,
                obj_in={
                    "quiz_id": quiz.id,
                    "text": question.text,
                    "qtype": question.qtype,
                    "explanation": question.explanation,
                    "position": q_index,
                    "marks": 1,
                },
                commit=False,
            )
            options = [o for o in question.options if o.text.strip()]
            for o_index, option in enumerate(options):
                crud_option.create(
                    db,
                    obj_in={
                        "question_id": new_question.id,
                        "text": option.text,
                        "is_correct": option.is_correct,
                        "position": o_index,
                    },
                    commit=False,
                )
        db.expire(quiz, ["questions"])
        return quiz

    def _save(self, db: Session, course: Course, module: Optional[Module], step_in: StepSave, current_user_context: UserContext) -> Module:
        title = step_in.title.strip()
        if not title:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please enter step title.")

        module_data = {"title": title, "description": step_in.description or None}
        if module is None:
            module_data["course_id"] = course.id
            module_data["position"] = crud_module.count_by_course(db, course_id=course.id)
            module = crud_module.create(db, obj_in=module_data, commit=False)
        else:
            if step_in.position is not None:
                module_data["position"] = step_in.position
            module = crud_module.update(db, db_obj=module, obj_in=module_data, commit=False)

        self._save_lesson(db, module, step_in)

        if step_in.quiz is not None and step_in.quiz.has_questions():
            self._save_quiz(db, course, module, step_in.quiz, current_user_context)

        # Relationships loaded before the save are stale
        db.expire(module)
        return module

    def get_step(self, db: Session, course_id: int, module_id: int, current_user_context: UserContext) -> StepEditorView:
        self._get_course_for_edit(db, course_id, current_user_context)
        self._get_module_or_404(db, course_id, module_id)
        return self._editor_view(db, course_id, module_id)

    def create_step(self, db: Session, course_id: int, step_in: StepSave, current_user_context: UserContext) -> StepEditorView:
        course = self._get_course_for_edit(db, course_id, current_user_context)
        module = self._save(db, course, None, step_in, current_user_context)
        logger.info(f"User {current_user_context.user.id} created step {module.id} in course {course.id}")
        return self._editor_view(db, course.id, module.id)

    def update_step(self, db: Session, course_id: int, module_id: int, step_in: StepSave, current_user_context: UserContext) -> StepEditorView:
        course = self._get_course_for_edit(db, course_id, current_user_context)
        module = self._get_module_or_404(db, course.id, module_id)
        self._save(db, course, module, step_in, current_user_context)
        logger.info(f"User {current_user_context.user.id} updated step {module_id} in course {course.id}")
        return self._editor_view(db, course.id, module_id)

    def delete_step(self, db: Session, course_id: int, module_id: int, current_user_context: UserContext) -> None:
        course = self._get_course_for_edit(db, course_id, current_user_context)
        module = self._get_module_or_404(db, course.id, module_id)
        crud_module.delete(db, id=module.id, commit=False)
        logger.info(f"User {current_user_context.user.id} deleted step {module_id} from course {course.id}")


step_service = StepService()
