from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.enrollment import Enrollment
from app.schemas.enrollment import EnrollmentCreate, EnrollmentUpdate

class CRUDEnrollment(CRUDBase[Enrollment, EnrollmentCreate, EnrollmentUpdate]):

    def get_by_student_and_course(self, db: Session, *, student_id: int, course_id: int) -> Optional[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .first()
        )

    def get_by_student(self, db: Session, *, student_id: int) -> List[Enrollment]:
        return (
            db.query(Enrollment)
            .options(selectinload(Enrollment.course))
            .filter(Enrollment.student_id == student_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
            .all()
        )

    def count_by_courses(self, db: Session, *, course_ids: List[int]) -> int:
        if not course_ids:
            return 0
        return db.query(Enrollment).filter(Enrollment.course_id.in_(course_ids)).count()

    def get_enrolled_since(self, db: Session, *, since, course_ids: Optional[List[int]] = None) -> List[Enrollment]:
        query = db.query(Enrollment).filter(Enrollment.enrolled_at >= since)
        if course_ids is not None:
            query = query.filter(Enrollment.course_id.in_(course_ids))
        return query.order_by(Enrollment.enrolled_at.asc()).all()

    def get_all_with_course(self, db: Session) -> List[Enrollment]:
        return db.query(Enrollment).options(selectinload(Enrollment.course)).all()

enrollment = CRUDEnrollment(Enrollment)
