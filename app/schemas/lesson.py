from pydantic import BaseModel
from typing import Optional

from app.core.constants import ContentTypeEnum

class LessonCreate(BaseModel):
    module_id: int
    title: str
    content: Optional[str] = None
    media_url: Optional[str] = None
    content_type: str = ContentTypeEnum.VIDEO.value
    position: int = 0

class LessonUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    media_url: Optional[str] = None
    content_type: Optional[str] = None
