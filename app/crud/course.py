from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.core.constants import VisibilityEnum
from app.crud.base import CRUDBase
from app.models.course import Course, course_target_students
from app.schemas.course import CourseCreate, CourseUpdate

class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):

    def _query_with_relationships(self, db: Session):
        return db.query(Course).options(
            selectinload(Course.instructor),
            selectinload(Course.enrollments),
            selectinload(Course.target_students),
        )

    def get(self, db: Session, id: int) -> Optional[Course]:
        return self._query_with_relationships(db).filter(Course.id == id).first()

    def get_all(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Course]:
        return (
            self._query_with_relationships(db)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_visible_to_faculty(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100) -> List[Course]:
        return (
            self._query_with_relationships(db)
            .filter(or_(Course.visibility == VisibilityEnum.PUBLIC, Course.instructor_id == user_id))
            .order_by(Course.created_at.desc(), Course.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_visible_to_student(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100) -> List[Course]:
        targeted_ids = (
            db.query(course_target_students.c.course_id)
            .filter(course_target_students.c.student_id == user_id)
        )
        return (
            self._query_with_relationships(db)
            .filter(
                or_(
                    Course.visibility == VisibilityEnum.PUBLIC,
                    (Course.visibility == VisibilityEnum.TARGETED) & Course.id.in_(targeted_ids),
                )
            )
            .order_by(Course.created_at.desc(), Course.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_instructor(self, db: Session, *, instructor_id: int) -> List[Course]:
        return (
            self._query_with_relationships(db)
            .filter(Course.instructor_id == instructor_id)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .all()
        )

    def is_targeted_to(self, db: Session, *, course_id: int, student_id: int) -> bool:
        return db.query(course_target_students).filter(
            course_target_students.c.course_id == course_id,
            course_target_students.c.student_id == student_id,
        ).first() is not None

    def replace_target_students(self, db: Session, *, course: Course, student_ids: List[int]) -> int:
        db.execute(course_target_students.delete().where(course_target_students.c.course_id == course.id))
        if student_ids:
            db.execute(
                course_target_students.insert(),
                [{"course_id": course.id, "student_id": sid} for sid in student_ids],
            )
        db.flush()
        db.expire(course, ["target_students"])
        return len(student_ids)

course = CRUDCourse(Course)
