from pydantic import BaseModel, EmailStr, field_validator

from .user import User, _validate_password

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenPayload(BaseModel):
    sub: str | None = None
    user_id: int | None = None
    role: str | None = None
    jti: str | None = None
    exp: int | None = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str

    @field_validator("password")
    def validate_password(cls, v):
        return _validate_password(v)

    @field_validator("full_name")
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()

class LoginResponse(BaseModel):
    """Response for the login and signup endpoints."""
    token: Token
    user: User
