from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.step import CourseSteps, StepSave, StepEditorView
from app.schemas.user import UserContext
from app.services.course_steps import course_steps_service
from app.services.step import step_service
from app.utils import deps

router = APIRouter()


@router.get("/{course_id}/steps", response_model=APIResponse[CourseSteps])
def get_course_steps(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    """Ordered steps with the caller's completion and lock state."""
    steps = course_steps_service.build_steps(db, course_id=course_id, current_user_context=context)
    return APIResponse(message="Course steps retrieved successfully", data=steps)


@router.post("/{course_id}/steps/{module_id}/complete", response_model=APIResponse[CourseSteps])
def complete_step(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    module_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    steps = course_steps_service.complete_step(db, course_id=course_id, module_id=module_id, current_user_context=context)
    return APIResponse(message="Step marked as complete", data=steps)


@router.post("/{course_id}/steps", response_model=APIResponse[StepEditorView], status_code=status.HTTP_201_CREATED)
def create_step(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    step_in: StepSave,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    step = step_service.create_step(db, course_id=course_id, step_in=step_in, current_user_context=context)
    return APIResponse(message="Step created successfully", data=step)


@router.get("/{course_id}/steps/{module_id}", response_model=APIResponse[StepEditorView])
def read_step(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    module_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    step = step_service.get_step(db, course_id=course_id, module_id=module_id, current_user_context=context)
    return APIResponse(message="Step retrieved successfully", data=step)


@router.put("/{course_id}/steps/{module_id}", response_model=APIResponse[StepEditorView])
def update_step(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    module_id: int,
    step_in: StepSave,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    step = step_service.update_step(db, course_id=course_id, module_id=module_id, step_in=step_in, current_user_context=context)
    return APIResponse(message="Step updated successfully", data=step)


@router.delete("/{course_id}/steps/{module_id}", response_model=APIResponse[None])
def delete_step(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    module_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    step_service.delete_step(db, course_id=course_id, module_id=module_id, current_user_context=context)
    return APIResponse(message="Step deleted successfully")
