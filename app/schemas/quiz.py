from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import DEFAULT_PASSING_SCORE
from app.schemas.step import QuestionWithAnswer


class QuizBase(BaseModel):
    title: str
    description: Optional[str] = None
    course_id: Optional[int] = None
    module_id: Optional[int] = None
    time_limit_seconds: Optional[int] = None
    passing_score: float = DEFAULT_PASSING_SCORE
    max_attempts: Optional[int] = None
    show_results: bool = True
    randomize_questions: bool = False
    randomize_options: bool = False
    negative_marking: bool = False
    negative_marks_value: float = 0.0
    is_published: bool = False

class QuizCreate(QuizBase):
    @field_validator("title")
    def title_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("passing_score")
    def score_in_range(cls, v):
        if v < 0 or v > 100:
            raise ValueError("Passing score must be between 0 and 100")
        return v

    @field_validator("max_attempts", "time_limit_seconds")
    def positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Value must be positive")
        return v

class QuizUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    course_id: Optional[int] = None
    module_id: Optional[int] = None
    time_limit_seconds: Optional[int] = None
    passing_score: Optional[float] = None
    max_attempts: Optional[int] = None
    show_results: Optional[bool] = None
    randomize_questions: Optional[bool] = None
    randomize_options: Optional[bool] = None
    negative_marking: Optional[bool] = None
    negative_marks_value: Optional[float] = None
    is_published: Optional[bool] = None

    # Omit a field to leave it unchanged; these columns never hold null
    @field_validator(
        "title", "passing_score", "show_results", "randomize_questions",
        "randomize_options", "negative_marking", "negative_marks_value", "is_published",
    )
    def not_null(cls, v):
        if v is None:
            raise ValueError("Value cannot be null")
        return v

    @field_validator("title")
    def title_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Title cannot be blank")
        return v

    @field_validator("passing_score")
    def score_in_range(cls, v):
        if v < 0 or v > 100:
            raise ValueError("Passing score must be between 0 and 100")
        return v

class Quiz(QuizBase):
    id: int
    created_by: Optional[int] = None
    question_count: int = 0
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class QuizDetail(Quiz):
    questions: List[QuestionWithAnswer] = []
