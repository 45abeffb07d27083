from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime

from app.schemas.step import CourseSteps


class AnswerSubmission(BaseModel):
    question_id: int
    selected_options: List[int] = []

class QuizSubmission(BaseModel):
    answers: List[AnswerSubmission] = []

class QuizAttemptCreate(BaseModel):
    quiz_id: int
    student_id: int
    status: str
    score: float
    max_score: float
    percentage: float
    started_at: datetime
    submitted_at: datetime

class QuestionResponseCreate(BaseModel):
    attempt_id: int
    question_id: int
    selected_options: List[int]
    is_correct: bool
    marks_obtained: float

class QuestionResponse(BaseModel):
    id: int
    question_id: int
    selected_options: List[int] = []
    is_correct: bool
    marks_obtained: float
    model_config = ConfigDict(from_attributes=True)

class QuizAttempt(BaseModel):
    id: int
    quiz_id: int
    student_id: int
    status: str
    score: float
    max_score: float
    percentage: float
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class QuizAttemptDetail(QuizAttempt):
    quiz_title: str
    passing_score: float
    passed: bool
    responses: List[QuestionResponse] = []

class QuestionResult(BaseModel):
    question_id: int
    selected_options: List[int]
    correct_options: List[int]
    is_correct: bool

class QuizSubmissionResult(BaseModel):
    attempt: QuizAttempt
    passed: bool
    passing_score: float
    can_retry: bool
    results: List[QuestionResult] = []
    course_steps: Optional[CourseSteps] = None
