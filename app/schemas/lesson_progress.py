from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class LessonProgressCreate(BaseModel):
    lesson_id: int
    student_id: int
    completed: bool = False
    completed_at: Optional[datetime] = None

class LessonProgressUpdate(BaseModel):
    completed: Optional[bool] = None
    completed_at: Optional[datetime] = None
