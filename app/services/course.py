import logging
import re
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum, VisibilityEnum
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.module import module as crud_module
from app.crud.user import user as crud_user
from app.models.course import Course as CourseModel
from app.models.enrollment import Enrollment as EnrollmentModel
from app.schemas.course import CourseCreate, CourseUpdate, CourseDetail, TargetingCriteria
from app.schemas.enrollment import EnrollmentCreate
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


def generate_slug(title: str) -> str:
    """Lowercase, collapse non-alphanumeric runs into '-', trim leading/trailing '-'."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def match_students(students, criteria: TargetingCriteria) -> List[int]:
    """OR within a category, AND across categories; an empty category matches everyone."""
    matched = []
    for student in students:
        if criteria.years and student.year not in criteria.years:
            continue
        if criteria.sections and student.section not in criteria.sections:
            continue
        if criteria.departments and student.dept not in criteria.departments:
            continue
        matched.append(student.id)
    return matched


class CourseService:

    def _get_or_404(self, db: Session, course_id: int) -> CourseModel:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found.")
        return course

    def _resolve_instructor(self, db: Session, instructor_id: Optional[int], current_user_context: UserContext) -> int:
        if permission_helper.is_faculty(current_user_context) or instructor_id is None:
            return current_user_context.user.id

        instructor = crud_user.get(db, id=instructor_id)
        if not instructor:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Instructor not found.")
        if instructor.role_name not in (RoleEnum.FACULTY, RoleEnum.ADMIN):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Instructor must be a faculty member or admin.")
        return instructor.id

    def _flush_or_conflict(self, db: Session):
        try:
            db.flush()
        except IntegrityError:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A course with this slug already exists.",
            )

    def apply_targeting(self, db: Session, course: CourseModel, criteria: TargetingCriteria) -> int:
        if criteria.is_empty():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please select at least one targeting criteria.",
            )
        students = crud_user.get_by_role(db, role=RoleEnum.STUDENT)
        student_ids = match_students(students, criteria)
        count = crud_course.replace_target_students(db, course=course, student_ids=student_ids)
        logger.info(f"Course {course.id} targeted to {count} students")
        return count

    def list_courses(self, db: Session, current_user_context: UserContext, skip: int = 0, limit: int = 100) -> List[CourseModel]:
        user_id = current_user_context.user.id
        if permission_helper.is_admin(current_user_context):
            return crud_course.get_all(db, skip=skip, limit=limit)
        if permission_helper.is_faculty(current_user_context):
            return crud_course.get_visible_to_faculty(db, user_id=user_id, skip=skip, limit=limit)
        return crud_course.get_visible_to_student(db, user_id=user_id, skip=skip, limit=limit)

    def list_my_courses(self, db: Session, current_user_context: UserContext) -> List[CourseModel]:
        if permission_helper.is_student(current_user_context):
            enrollments = crud_enrollment.get_by_student(db, student_id=current_user_context.user.id)
            return [e.course for e in enrollments]
        return crud_course.get_by_instructor(db, instructor_id=current_user_context.user.id)

    def get_course_detail(self, db: Session, course_id: int, current_user_context: UserContext) -> CourseDetail:
        course = self._get_or_404(db, course_id)
        permission_helper.require_course_view_permission(db, current_user_context, course)

        detail = CourseDetail.model_validate(course)
        detail.step_count = crud_module.count_by_course(db, course_id=course.id)
        detail.is_enrolled = permission_helper.is_enrolled(db, current_user_context, course.id)
        detail.can_edit = permission_helper.can_manage_course(current_user_context, course)
        return detail

    def create_course(self, db: Session, course_in: CourseCreate, current_user_context: UserContext) -> CourseModel:
        permission_helper.require_not_student(current_user_context, "Students cannot create courses.")

        slug = course_in.slug or generate_slug(course_in.title)
        if not slug:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug is required.")

        if course_in.visibility == VisibilityEnum.TARGETED and (course_in.targeting is None or course_in.targeting.is_empty()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please select at least one targeting criteria.",
            )

        course_data = course_in.model_dump(exclude={"targeting", "slug", "instructor_id"})
        course_data["slug"] = slug
        course_data["instructor_id"] = self._resolve_instructor(db, course_in.instructor_id, current_user_context)

        new_course = CourseModel(**course_data)
        db.add(new_course)
        self._flush_or_conflict(db)

        if course_in.visibility == VisibilityEnum.TARGETED:
            self.apply_targeting(db, new_course, course_in.targeting)

        db.refresh(new_course)
        logger.info(f"User {current_user_context.user.id} created course {new_course.id} ({new_course.slug})")
        return new_course

    def update_course(self, db: Session, course_id: int, course_in: CourseUpdate, current_user_context: UserContext) -> CourseModel:
        course = self._get_or_404(db, course_id)
        permission_helper.require_course_management_permission(current_user_context, course)

        update_data = course_in.model_dump(exclude_unset=True, exclude={"targeting", "instructor_id"})
        if "instructor_id" in course_in.model_fields_set and permission_helper.is_admin(current_user_context):
            update_data["instructor_id"] = self._resolve_instructor(db, course_in.instructor_id, current_user_context)

        was_targeted = course.visibility == VisibilityEnum.TARGETED
        for field, value in update_data.items():
            setattr(course, field, value)
        self._flush_or_conflict(db)

        if course.visibility == VisibilityEnum.TARGETED:
            if course_in.targeting is not None:
                self.apply_targeting(db, course, course_in.targeting)
            elif not was_targeted:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Please select at least one targeting criteria.",
                )
        elif was_targeted:
            crud_course.replace_target_students(db, course=course, student_ids=[])

        db.refresh(course)
        return course

    def delete_course(self, db: Session, course_id: int, current_user_context: UserContext) -> None:
        course = self._get_or_404(db, course_id)
        permission_helper.require_course_management_permission(current_user_context, course)
        crud_course.replace_target_students(db, course=course, student_ids=[])
        crud_course.delete(db, id=course.id, commit=False)
        logger.info(f"User {current_user_context.user.id} deleted course {course_id}")

    def enroll(self, db: Session, course_id: int, current_user_context: UserContext) -> EnrollmentModel:
        if not permission_helper.is_student(current_user_context):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only students can enroll in courses."
            )

        course = self._get_or_404(db, course_id)
        permission_helper.require_course_view_permission(db, current_user_context, course)

        if permission_helper.is_enrolled(db, current_user_context, course.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You are already enrolled in this course."
            )

        enrollment = crud_enrollment.create(
            db,
            obj_in=EnrollmentCreate(course_id=course.id, student_id=current_user_context.user.id),
            commit=False,
        )
        logger.info(f"Student {current_user_context.user.id} enrolled in course {course.id}")
        return enrollment


course_service = CourseService()
