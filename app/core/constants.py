from enum import Enum


DEFAULT_PASSING_SCORE = 70.0

class RoleEnum(str, Enum):
    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"

class VisibilityEnum(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    TARGETED = "targeted"

class QuestionTypeEnum(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"

class ContentTypeEnum(str, Enum):
    VIDEO = "video"
    TEXT = "text"

class QuizAttemptStatusEnum(str, Enum):
    SUBMITTED = "submitted"

class UploadKindEnum(str, Enum):
    AVATAR = "avatar"
    THUMBNAIL = "thumbnail"
    VIDEO = "video"

YEAR_OPTIONS = ["1st Year", "2nd Year", "3rd Year", "4th Year"]
SECTION_OPTIONS = ["A", "B", "C", "D", "E", "F"]
DEPARTMENT_OPTIONS = ["CSE", "ECE", "ME", "CE", "EEE", "IT"]

SITE_SETTING_DEFAULTS = {
    "site_name": "VIDHYA HUB",
    "site_description": "Your learning platform",
    "contact_email": "",
    "support_email": "",
    "maintenance_mode": False,
    "registration_enabled": True,
    "default_user_role": RoleEnum.STUDENT.value,
    "email_notifications": True,
    "max_file_upload_size": 5,
    "session_timeout": 30,
    "allow_public_courses": True,
    "require_email_verification": False,
}
