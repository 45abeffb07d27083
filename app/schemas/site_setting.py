from pydantic import BaseModel, field_validator
from typing import Optional, Dict, Any, List

from app.core.constants import RoleEnum


class SiteSettings(BaseModel):
    """Typed view of the key/value settings table. Missing keys fall back to defaults."""
    site_name: str
    site_description: str
    contact_email: str
    support_email: str
    maintenance_mode: bool
    registration_enabled: bool
    default_user_role: RoleEnum
    email_notifications: bool
    max_file_upload_size: int
    session_timeout: int
    allow_public_courses: bool
    require_email_verification: bool

class SiteSettingsUpdate(BaseModel):
    site_name: Optional[str] = None
    site_description: Optional[str] = None
    contact_email: Optional[str] = None
    support_email: Optional[str] = None
    maintenance_mode: Optional[bool] = None
    registration_enabled: Optional[bool] = None
    default_user_role: Optional[RoleEnum] = None
    email_notifications: Optional[bool] = None
    max_file_upload_size: Optional[int] = None
    session_timeout: Optional[int] = None
    allow_public_courses: Optional[bool] = None
    require_email_verification: Optional[bool] = None

    @field_validator("max_file_upload_size", "session_timeout")
    def positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Value must be positive")
        return v

class SiteSettingCreate(BaseModel):
    key: str
    value: Any = None

class SettingsSaveResult(BaseModel):
    settings: SiteSettings
    saved: List[str] = []
    errors: Dict[str, str] = {}
