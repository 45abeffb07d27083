from typing import List
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.question import Question, Option
from app.schemas.step import QuestionDraft, OptionDraft

class CRUDQuestion(CRUDBase[Question, QuestionDraft, QuestionDraft]):
    def get_by_quiz(self, db: Session, *, quiz_id: int) -> List[Question]:
        return (
            db.query(Question)
            .filter(Question.quiz_id == quiz_id)
            .order_by(Question.position.asc(), Question.id.asc())
            .all()
        )

    def delete_by_quiz(self, db: Session, *, quiz_id: int) -> int:
        # ORM deletes so that options cascade on backends without FK enforcement
        questions = self.get_by_quiz(db, quiz_id=quiz_id)
        for q in questions:
            db.delete(q)
        db.flush()
        return len(questions)

class CRUDOption(CRUDBase[Option, OptionDraft, OptionDraft]):
    pass

question = CRUDQuestion(Question)
option = CRUDOption(Option)
