from pydantic import BaseModel

class UploadResult(BaseModel):
    url: str
    key: str
    content_type: str
    size_bytes: int
