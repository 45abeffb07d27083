from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.module import Module
from app.models.quiz import Quiz
from app.models.question import Question
from app.schemas.step import StepSave

class CRUDModule(CRUDBase[Module, StepSave, StepSave]):

    def get_by_course(self, db: Session, *, course_id: int) -> List[Module]:
        return (
            db.query(Module)
            .options(selectinload(Module.lesson))
            .filter(Module.course_id == course_id)
            .order_by(Module.position.asc(), Module.id.asc())
            .all()
        )

    def get_in_course(self, db: Session, *, course_id: int, module_id: int) -> Optional[Module]:
        return (
            db.query(Module)
            .options(
                selectinload(Module.lesson),
                selectinload(Module.quiz).selectinload(Quiz.questions).selectinload(Question.options),
            )
            .filter(Module.course_id == course_id, Module.id == module_id)
            .first()
        )

    def count_by_course(self, db: Session, *, course_id: int) -> int:
        return db.query(Module).filter(Module.course_id == course_id).count()

module = CRUDModule(Module)
