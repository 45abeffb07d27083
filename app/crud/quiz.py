from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.quiz import Quiz
from app.models.question import Question
from app.schemas.quiz import QuizCreate, QuizUpdate

class CRUDQuiz(CRUDBase[Quiz, QuizCreate, QuizUpdate]):

    def _query_with_questions(self, db: Session):
        return db.query(Quiz).options(
            selectinload(Quiz.questions).selectinload(Question.options)
        )

    def get(self, db: Session, id: int) -> Optional[Quiz]:
        return self._query_with_questions(db).filter(Quiz.id == id).first()

    def get_by_module(self, db: Session, *, module_id: int) -> Optional[Quiz]:
        return self._query_with_questions(db).filter(Quiz.module_id == module_id).first()

    def get_published_by_modules(self, db: Session, *, module_ids: List[int]) -> List[Quiz]:
        if not module_ids:
            return []
        return (
            self._query_with_questions(db)
            .filter(Quiz.module_id.in_(module_ids), Quiz.is_published == True)
            .all()
        )

    def get_filtered(self, db: Session, *, created_by: Optional[int] = None, skip: int = 0, limit: Optional[int] = 100) -> List[Quiz]:
        query = self._query_with_questions(db)
        if created_by is not None:
            query = query.filter(Quiz.created_by == created_by)
        return query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).offset(skip).limit(limit).all()

    def count_by_creator(self, db: Session, *, created_by: int) -> int:
        return db.query(Quiz).filter(Quiz.created_by == created_by).count()

quiz = CRUDQuiz(Quiz)
