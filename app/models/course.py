from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Table, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import VisibilityEnum

course_target_students = Table(
    "course_target_students",
    Base.metadata,
    Column("course_id", Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    visibility = Column(Enum(VisibilityEnum), nullable=False, default=VisibilityEnum.PUBLIC)
    instructor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    instructor = relationship("User", back_populates="taught_courses")
    modules = relationship("Module", back_populates="course", cascade="all, delete-orphan", order_by="Module.position")
    quizzes = relationship("Quiz", back_populates="course", cascade="all, delete-orphan")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")
    target_students = relationship("User", secondary=course_target_students)

    @property
    def enrollment_count(self):
        return len(self.enrollments)

    @property
    def target_student_count(self):
        return len(self.target_students)
