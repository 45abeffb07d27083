from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.course import Course, CourseCreate, CourseUpdate, CourseDetail
from app.schemas.enrollment import Enrollment
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.course import course_service
from app.utils import deps

router = APIRouter()


@router.post("/", response_model=APIResponse[Course], status_code=status.HTTP_201_CREATED)
def create_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_in: CourseCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    new_course = course_service.create_course(db, course_in=course_in, current_user_context=context)
    return APIResponse(message="Course created successfully", data=Course.model_validate(new_course))


@router.get("/", response_model=APIResponse[List[Course]])
def get_all_courses(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    skip: int = 0,
    limit: int = 100
):
    courses = course_service.list_courses(db, current_user_context=context, skip=skip, limit=limit)
    return APIResponse(message="Courses retrieved successfully", data=[Course.model_validate(c) for c in courses])


@router.get("/mine", response_model=APIResponse[List[Course]])
def get_my_courses(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    """Enrolled courses for students, taught courses for faculty and admins."""
    courses = course_service.list_my_courses(db, current_user_context=context)
    return APIResponse(message="Your courses retrieved successfully", data=[Course.model_validate(c) for c in courses])


@router.get("/{course_id}", response_model=APIResponse[CourseDetail])
def read_course(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    course = course_service.get_course_detail(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Course retrieved successfully", data=course)


@router.put("/{course_id}", response_model=APIResponse[Course])
def update_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    course_in: CourseUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    updated_course = course_service.update_course(db, course_id=course_id, course_in=course_in, current_user_context=context)
    return APIResponse(message="Course updated successfully", data=Course.model_validate(updated_course))


@router.delete("/{course_id}", response_model=APIResponse[None])
def delete_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    course_service.delete_course(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Course deleted successfully")


@router.post("/{course_id}/enroll", response_model=APIResponse[Enrollment], status_code=status.HTTP_201_CREATED)
def enroll_in_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    enrollment = course_service.enroll(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Enrolled successfully", data=Enrollment.model_validate(enrollment))
