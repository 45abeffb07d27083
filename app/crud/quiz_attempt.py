from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.core.constants import QuizAttemptStatusEnum
from app.crud.base import CRUDBase
from app.models.quiz_attempt import QuizAttempt
from app.schemas.quiz_attempt import QuizAttemptCreate

class CRUDQuizAttempt(CRUDBase[QuizAttempt, QuizAttemptCreate, QuizAttemptCreate]):

    def get_with_responses(self, db: Session, *, id: int) -> Optional[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .options(selectinload(QuizAttempt.responses), selectinload(QuizAttempt.quiz))
            .filter(QuizAttempt.id == id)
            .first()
        )

    def get_latest_submitted(self, db: Session, *, student_id: int, quiz_id: int) -> Optional[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.student_id == student_id,
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.status == QuizAttemptStatusEnum.SUBMITTED.value,
            )
            .order_by(QuizAttempt.submitted_at.desc(), QuizAttempt.id.desc())
            .first()
        )

    def get_by_student_and_quiz(self, db: Session, *, student_id: int, quiz_id: int) -> List[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.student_id == student_id, QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.submitted_at.desc(), QuizAttempt.id.desc())
            .all()
        )

    def get_by_quiz(self, db: Session, *, quiz_id: int) -> List[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.submitted_at.desc(), QuizAttempt.id.desc())
            .all()
        )

    def get_by_quizzes(self, db: Session, *, quiz_ids: List[int]) -> List[QuizAttempt]:
        if not quiz_ids:
            return []
        return db.query(QuizAttempt).filter(QuizAttempt.quiz_id.in_(quiz_ids)).all()

    def get_recent_by_student(self, db: Session, *, student_id: int, limit: int = 5) -> List[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .options(selectinload(QuizAttempt.quiz))
            .filter(QuizAttempt.student_id == student_id)
            .order_by(QuizAttempt.submitted_at.desc(), QuizAttempt.id.desc())
            .limit(limit)
            .all()
        )

    def get_all_with_quiz(self, db: Session) -> List[QuizAttempt]:
        return db.query(QuizAttempt).options(selectinload(QuizAttempt.quiz)).all()

quiz_attempt = CRUDQuizAttempt(QuizAttempt)
