from datetime import datetime

from pydantic import BaseModel, Field

from academy.domains.courses.schemas import CurriculumWeek
from academy.domains.registrations.models import EnrollmentStatus


class CourseSummaryOut(BaseModel):
    id: str
    title: str
    duration: str
    age_group: str
    total_weeks: int
    registration_open: bool


class EnrollmentOut(BaseModel):
    id: str
    course_id: str
    status: EnrollmentStatus
    enrolled_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None


class EnrolledCourseOut(BaseModel):
    course: CourseSummaryOut
    enrollment: EnrollmentOut
    completed_weeks: int
    progress_percent: int


class DashboardOut(BaseModel):
    enrolled: list[EnrolledCourseOut]
    available: list[CourseSummaryOut]
    lessons_completed: int
    total_minutes: int


class LessonProgressOut(BaseModel):
    week_number: int
    lesson_title: str | None = None
    is_completed: bool
    time_spent_minutes: int
    notes: str | None = None
    completed_at: datetime | None = None


class LearnOut(BaseModel):
    course: CourseSummaryOut
    curriculum: list[CurriculumWeek]
    enrollment: EnrollmentOut
    progress: list[LessonProgressOut]
    completed_weeks: int
    progress_percent: int


class WeekProgressIn(BaseModel):
    is_completed: bool
    time_spent_minutes: int | None = Field(default=None, ge=0, le=100_000)
    notes: str | None = Field(default=None, max_length=5000)


class WeekProgressOut(BaseModel):
    progress: LessonProgressOut
    enrollment: EnrollmentOut
