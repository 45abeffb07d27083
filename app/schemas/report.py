from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class AdminDashboard(BaseModel):
    total_users: int
    total_courses: int
    total_students: int
    total_faculty: int
    total_quizzes: int = 0

class FacultyDashboard(BaseModel):
    total_courses: int
    total_students: int
    total_quizzes: int
    average_score: Optional[float] = None

class StudentCourseProgress(BaseModel):
    course_id: int
    title: str
    progress: int
    completed_at: Optional[datetime] = None

class RecentQuizResult(BaseModel):
    attempt_id: int
    quiz_id: int
    quiz_title: str
    percentage: float
    passed: bool
    submitted_at: Optional[datetime] = None

class StudentDashboard(BaseModel):
    enrolled_courses: int
    completed_courses: int
    courses: List[StudentCourseProgress] = []
    recent_quiz_results: List[RecentQuizResult] = []

class Dashboard(BaseModel):
    role: str
    admin: Optional[AdminDashboard] = None
    faculty: Optional[FacultyDashboard] = None
    student: Optional[StudentDashboard] = None


class MonthlyCount(BaseModel):
    month: str
    count: int

class CourseEnrollmentStat(BaseModel):
    title: str
    enrollments: int

class QuizPerformance(BaseModel):
    passed: int
    failed: int
    total: int
    pass_rate: float

class CompletionRate(BaseModel):
    course: str
    rate: int

class AdminAnalytics(BaseModel):
    totals: AdminDashboard
    user_growth: List[MonthlyCount] = []
    top_courses: List[CourseEnrollmentStat] = []
    enrollment_trends: List[MonthlyCount] = []
    quiz_performance: QuizPerformance
    completion_rates: List[CompletionRate] = []

class CoursePerformance(BaseModel):
    course: str
    students: int
    avg_progress: int

class QuizScore(BaseModel):
    quiz: str
    avg_score: int

class QuizPassRate(BaseModel):
    quiz: str
    pass_rate: int

class FacultyAnalytics(BaseModel):
    totals: FacultyDashboard
    course_performance: List[CoursePerformance] = []
    quiz_scores: List[QuizScore] = []
    student_engagement: List[MonthlyCount] = []
    completion_rates: List[CompletionRate] = []
    top_performing_quizzes: List[QuizPassRate] = []
