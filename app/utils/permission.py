from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.course import Course
from app.models.quiz import Quiz
from app.schemas.user import UserContext
from app.core.constants import RoleEnum, VisibilityEnum
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment


class PermissionHelper:
    @staticmethod
    def is_admin(context: UserContext) -> bool:
        return context.role == RoleEnum.ADMIN

    @staticmethod
    def is_faculty(context: UserContext) -> bool:
        return context.role == RoleEnum.FACULTY

    @staticmethod
    def is_student(context: UserContext) -> bool:
        return context.role == RoleEnum.STUDENT

    @staticmethod
    def is_instructor_of_course(context: UserContext, course: Course) -> bool:
        return course.instructor_id is not None and course.instructor_id == context.user.id

    @staticmethod
    def is_enrolled(db: Session, context: UserContext, course_id: int) -> bool:
        return crud_enrollment.get_by_student_and_course(
            db, student_id=context.user.id, course_id=course_id
        ) is not None

    @staticmethod
    def can_manage_course(context: UserContext, course: Course) -> bool:
        if PermissionHelper.is_admin(context):
            return True
        return PermissionHelper.is_faculty(context) and PermissionHelper.is_instructor_of_course(context, course)

    @staticmethod
    def can_view_course(db: Session, context: UserContext, course: Course) -> bool:
        if PermissionHelper.is_admin(context):
            return True
        if course.visibility == VisibilityEnum.PUBLIC:
            return True
        if PermissionHelper.is_faculty(context):
            return PermissionHelper.is_instructor_of_course(context, course)
        if course.visibility == VisibilityEnum.TARGETED and crud_course.is_targeted_to(
            db, course_id=course.id, student_id=context.user.id
        ):
            return True
        # Students keep access to courses they joined before visibility changed
        return PermissionHelper.is_enrolled(db, context, course.id)

    @staticmethod
    def can_manage_quiz(context: UserContext, quiz: Quiz) -> bool:
        if PermissionHelper.is_admin(context):
            return True
        if not PermissionHelper.is_faculty(context):
            return False
        if quiz.created_by == context.user.id:
            return True
        return quiz.course is not None and PermissionHelper.is_instructor_of_course(context, quiz.course)

    @staticmethod
    def require_admin(context: UserContext, error_message: str = "Only admins can perform this action."):
        if not PermissionHelper.is_admin(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_message)

    @staticmethod
    def require_not_student(context: UserContext, error_message: str = "Students cannot perform this action."):
        if PermissionHelper.is_student(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_message)

    @staticmethod
    def require_course_management_permission(context: UserContext, course: Course):
        if not PermissionHelper.can_manage_course(context, course):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to manage this course."
            )

    @staticmethod
    def require_course_view_permission(db: Session, context: UserContext, course: Course):
        if not PermissionHelper.can_view_course(db, context, course):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to view this course."
            )

    @staticmethod
    def require_quiz_management_permission(context: UserContext, quiz: Quiz):
        if not PermissionHelper.can_manage_quiz(context, quiz):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to manage this quiz."
            )


permission_helper = PermissionHelper()
