from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator, ConfigDict, model_validator
from typing import Optional, Any
from datetime import datetime

from app.core.constants import RoleEnum


def _validate_password(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Password cannot be empty or contain only whitespace.")
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters long.")
    return v


class ProfileFields(BaseModel):
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    regno: Optional[str] = None
    faculty_id: Optional[str] = None
    year: Optional[str] = None
    section: Optional[str] = None
    dept: Optional[str] = None

class UserBase(BaseModel):
    """Base user schema with common fields."""
    full_name: str
    email: EmailStr

class UserCreate(UserBase, ProfileFields):
    """Schema for creating a new user, includes password."""
    password: str

    @field_validator("password")
    def validate_password(cls, v):
        return _validate_password(v)

    @field_validator("full_name")
    def name_not_empty(cls, v):
        if not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()

class AdminUserCreate(UserCreate):
    """An admin may pick the role up front."""
    role: RoleEnum = RoleEnum.STUDENT

class UserUpdate(ProfileFields):
    """Schema for updating a user's profile."""
    full_name: Optional[str] = None

    @field_validator("full_name")
    def not_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Full name cannot be empty")
        return v

    @model_validator(mode='before')
    @classmethod
    def at_least_one_value(cls, data: Any):
        if isinstance(data, dict) and not data:
            raise ValueError("At least one field must be provided for update")
        return data

class User(UserBase, ProfileFields):
    """Main user schema for reading user data."""
    id: int
    is_active: bool
    role: Optional[RoleEnum] = Field(None, validation_alias=AliasChoices("role_name", "role"))
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class UserRoleUpdate(BaseModel):
    role: RoleEnum

class UserContext(BaseModel):
    """The authenticated user together with their single role."""
    user: User
    role: RoleEnum
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
