from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import VisibilityEnum, YEAR_OPTIONS, SECTION_OPTIONS, DEPARTMENT_OPTIONS


def _check_choices(values: List[str], allowed: List[str], label: str) -> List[str]:
    unknown = [v for v in values if v not in allowed]
    if unknown:
        raise ValueError(f"Unknown {label}: {', '.join(unknown)}")
    # Keep first occurrence order, drop duplicates
    return list(dict.fromkeys(values))


class TargetingCriteria(BaseModel):
    """Students matching every non-empty category (any value within it) are targeted."""
    years: List[str] = []
    sections: List[str] = []
    departments: List[str] = []

    @field_validator("years")
    def valid_years(cls, v):
        return _check_choices(v, YEAR_OPTIONS, "year")

    @field_validator("sections")
    def valid_sections(cls, v):
        return _check_choices(v, SECTION_OPTIONS, "section")

    @field_validator("departments")
    def valid_departments(cls, v):
        return _check_choices(v, DEPARTMENT_OPTIONS, "department")

    def is_empty(self) -> bool:
        return not (self.years or self.sections or self.departments)


class CourseBase(BaseModel):
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    tags: List[str] = []
    visibility: VisibilityEnum = VisibilityEnum.PUBLIC

class CourseCreate(CourseBase):
    slug: Optional[str] = None
    instructor_id: Optional[int] = None
    targeting: Optional[TargetingCriteria] = None

    @field_validator("title")
    def title_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("slug")
    def slug_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Slug cannot be blank")
        return v.strip() if v else v

class CourseUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    tags: Optional[List[str]] = None
    visibility: Optional[VisibilityEnum] = None
    instructor_id: Optional[int] = None
    targeting: Optional[TargetingCriteria] = None

    @field_validator("title", "slug")
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title and slug cannot be blank")
        return v.strip() if v else v

class InstructorSummary(BaseModel):
    id: int
    full_name: Optional[str] = None
    email: str
    model_config = ConfigDict(from_attributes=True)

class Course(CourseBase):
    id: int
    slug: str
    instructor_id: Optional[int] = None
    enrollment_count: int = 0
    target_student_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class CourseDetail(Course):
    instructor: Optional[InstructorSummary] = None
    step_count: int = 0
    is_enrolled: bool = False
    can_edit: bool = False
