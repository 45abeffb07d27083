from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.lesson_progress import LessonProgress
from app.schemas.lesson_progress import LessonProgressCreate, LessonProgressUpdate

class CRUDLessonProgress(CRUDBase[LessonProgress, LessonProgressCreate, LessonProgressUpdate]):

    def get_by_student_and_lesson(self, db: Session, *, student_id: int, lesson_id: int) -> Optional[LessonProgress]:
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.student_id == student_id, LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def get_by_student_and_lessons(self, db: Session, *, student_id: int, lesson_ids: List[int]) -> List[LessonProgress]:
        if not lesson_ids:
            return []
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.student_id == student_id, LessonProgress.lesson_id.in_(lesson_ids))
            .all()
        )

    def get_completed_lesson_ids(self, db: Session, *, student_id: int, lesson_ids: List[int]) -> List[int]:
        return [
            lp.lesson_id
            for lp in self.get_by_student_and_lessons(db, student_id=student_id, lesson_ids=lesson_ids)
            if lp.completed
        ]

    def mark_completed(self, db: Session, *, student_id: int, lesson_id: int, commit: bool = True) -> LessonProgress:
        """Upsert keyed on (lesson, student); repeated calls touch the same row."""
        now = datetime.now()
        existing = self.get_by_student_and_lesson(db, student_id=student_id, lesson_id=lesson_id)
        if existing:
            return self.update(db, db_obj=existing, obj_in={"completed": True, "completed_at": now}, commit=commit)
        progress_in = LessonProgressCreate(
            lesson_id=lesson_id,
            student_id=student_id,
            completed=True,
            completed_at=now,
        )
        return self.create(db, obj_in=progress_in, commit=commit)

lesson_progress = CRUDLessonProgress(LessonProgress)
