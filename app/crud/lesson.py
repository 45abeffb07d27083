from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.lesson import Lesson
from app.models.module import Module
from app.schemas.lesson import LessonCreate, LessonUpdate

class CRUDLesson(CRUDBase[Lesson, LessonCreate, LessonUpdate]):
    def get_by_module(self, db: Session, *, module_id: int) -> Optional[Lesson]:
        return db.query(Lesson).filter(Lesson.module_id == module_id).first()

    def get_ids_by_course(self, db: Session, *, course_id: int) -> List[int]:
        rows = (
            db.query(Lesson.id)
            .join(Module, Module.id == Lesson.module_id)
            .filter(Module.course_id == course_id)
            .all()
        )
        return [row[0] for row in rows]

    def count_by_courses(self, db: Session, *, course_ids: List[int]) -> Dict[int, int]:
        if not course_ids:
            return {}
        rows = (
            db.query(Module.course_id, func.count(Lesson.id))
            .join(Lesson, Lesson.module_id == Module.id)
            .filter(Module.course_id.in_(course_ids))
            .group_by(Module.course_id)
            .all()
        )
        return {course_id: count for course_id, count in rows}

lesson = CRUDLesson(Lesson)
