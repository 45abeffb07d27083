from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class EnrollmentCreate(BaseModel):
    course_id: int
    student_id: int

class EnrollmentUpdate(BaseModel):
    progress: Optional[int] = None
    completed_at: Optional[datetime] = None

class Enrollment(BaseModel):
    id: int
    course_id: int
    student_id: int
    progress: int
    enrolled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
