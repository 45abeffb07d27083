from datetime import datetime
from pydantic import BaseModel

class TokenDenylistCreate(BaseModel):
    jti: str
    exp: datetime
