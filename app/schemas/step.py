from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List

from app.core.constants import QuestionTypeEnum, DEFAULT_PASSING_SCORE


class OptionView(BaseModel):
    id: int
    text: str
    position: int
    model_config = ConfigDict(from_attributes=True)

class OptionWithAnswer(OptionView):
    is_correct: bool

class QuestionView(BaseModel):
    id: int
    text: str
    qtype: QuestionTypeEnum
    position: int
    options: List[OptionView] = []
    model_config = ConfigDict(from_attributes=True)

class QuestionWithAnswer(QuestionView):
    marks: float
    explanation: Optional[str] = None
    options: List[OptionWithAnswer] = []

class StepLesson(BaseModel):
    id: int
    title: str
    content: Optional[str] = None
    media_url: Optional[str] = None
    content_type: str
    duration_seconds: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)

class StepQuiz(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    passing_score: float
    time_limit_seconds: Optional[int] = None
    questions: List[QuestionView] = []
    model_config = ConfigDict(from_attributes=True)

class Step(BaseModel):
    """A module as the learner sees it, with derived completion and lock state."""
    module_id: int
    title: str
    description: Optional[str] = None
    position: int
    lesson: Optional[StepLesson] = None
    quiz: Optional[StepQuiz] = None
    is_completed: bool = False
    is_locked: bool = False
    quiz_passed: Optional[bool] = None

class CourseSteps(BaseModel):
    course_id: int
    course_title: str
    is_enrolled: bool
    steps: List[Step] = []
    active_step_index: int = 0


# Authoring

class OptionDraft(BaseModel):
    text: str = ""
    is_correct: bool = False

class QuestionDraft(BaseModel):
    text: str = ""
    qtype: QuestionTypeEnum = QuestionTypeEnum.SINGLE
    explanation: Optional[str] = None
    options: List[OptionDraft] = []

class QuizDraft(BaseModel):
    title: Optional[str] = None
    passing_score: float = DEFAULT_PASSING_SCORE
    questions: List[QuestionDraft] = []

    @field_validator("passing_score")
    def score_in_range(cls, v):
        if v < 0 or v > 100:
            raise ValueError("Passing score must be between 0 and 100")
        return v

    def has_questions(self) -> bool:
        return any(q.text.strip() for q in self.questions)

class StepSave(BaseModel):
    title: str = ""
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    position: Optional[int] = None
    quiz: Optional[QuizDraft] = None

class StepEditorQuiz(BaseModel):
    id: int
    title: str
    passing_score: float
    is_published: bool
    questions: List[QuestionWithAnswer] = []
    model_config = ConfigDict(from_attributes=True)

class StepEditorView(BaseModel):
    module_id: int
    course_id: int
    title: str
    description: Optional[str] = None
    position: int
    lesson: Optional[StepLesson] = None
    quiz: Optional[StepEditorQuiz] = None
