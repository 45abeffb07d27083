from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.crud.base import PaginatedResponse
from app.schemas.quiz import Quiz, QuizCreate, QuizUpdate, QuizDetail
from app.schemas.quiz_attempt import QuizSubmission, QuizSubmissionResult, QuizAttempt, QuizAttemptDetail
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.quiz import quiz_service
from app.services.quiz_attempt import quiz_attempt_service
from app.utils import deps

router = APIRouter()


@router.post("/", response_model=APIResponse[Quiz], status_code=status.HTTP_201_CREATED)
def create_quiz(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_in: QuizCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    new_quiz = quiz_service.create_quiz(db, quiz_in=quiz_in, current_user_context=context)
    return APIResponse(message="Quiz created successfully", data=Quiz.model_validate(new_quiz))


@router.get("/", response_model=APIResponse[PaginatedResponse[Quiz]])
def get_quizzes(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    skip: int = 0,
    limit: int = 100
):
    quizzes = quiz_service.list_quizzes(db, current_user_context=context, skip=skip, limit=limit)
    return APIResponse(message="Quizzes retrieved successfully", data=quizzes)


@router.get("/attempts/{attempt_id}", response_model=APIResponse[QuizAttemptDetail])
def read_quiz_attempt(
    *,
    db: Session = Depends(deps.get_db),
    attempt_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempt = quiz_attempt_service.get_attempt_detail(db, attempt_id=attempt_id, current_user_context=context)
    return APIResponse(message="Quiz attempt retrieved successfully", data=attempt)


@router.get("/{quiz_id}", response_model=APIResponse[QuizDetail])
def read_quiz(
    *,
    db: Session = Depends(deps.get_db),
    quiz_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quiz = quiz_service.get_quiz(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz retrieved successfully", data=quiz)


@router.put("/{quiz_id}", response_model=APIResponse[Quiz])
def update_quiz(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: int,
    quiz_in: QuizUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    updated_quiz = quiz_service.update_quiz(db, quiz_id=quiz_id, quiz_in=quiz_in, current_user_context=context)
    return APIResponse(message="Quiz updated successfully", data=Quiz.model_validate(updated_quiz))


@router.delete("/{quiz_id}", response_model=APIResponse[None])
def delete_quiz(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quiz_service.delete_quiz(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz deleted successfully")


@router.post("/{quiz_id}/attempts", response_model=APIResponse[QuizSubmissionResult], status_code=status.HTTP_201_CREATED)
def submit_quiz(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: int,
    submission: QuizSubmission,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    """Grade a submission. Every call records a new attempt."""
    result = quiz_attempt_service.submit_quiz(db, quiz_id=quiz_id, submission=submission, current_user_context=context)
    message = "Quiz passed" if result.passed else "Quiz submitted"
    return APIResponse(message=message, data=result)


@router.get("/{quiz_id}/attempts", response_model=APIResponse[List[QuizAttempt]])
def get_quiz_attempts(
    *,
    db: Session = Depends(deps.get_db),
    quiz_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempts = quiz_attempt_service.list_attempts(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz attempts retrieved successfully", data=[QuizAttempt.model_validate(a) for a in attempts])
