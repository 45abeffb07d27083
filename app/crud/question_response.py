from app.crud.base import CRUDBase
from app.models.question_response import QuestionResponse
from app.schemas.quiz_attempt import QuestionResponseCreate

class CRUDQuestionResponse(CRUDBase[QuestionResponse, QuestionResponseCreate, QuestionResponseCreate]):
    pass

question_response = CRUDQuestionResponse(QuestionResponse)
