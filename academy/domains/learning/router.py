from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from academy.core.deps import get_db, require_user
from academy.core.security import Principal
from academy.domains.courses.models import Course
from academy.domains.learning.models import LessonProgress
from academy.domains.learning.schemas import (
    CourseSummaryOut,
    DashboardOut,
    EnrolledCourseOut,
    EnrollmentOut,
    LearnOut,
    LessonProgressOut,
    WeekProgressIn,
    WeekProgressOut,
)
from academy.domains.learning.service import dashboard, learn_view, progress_percent, update_week_progress
from academy.domains.registrations.models import Enrollment


router = APIRouter()


def _course(c: Course) -> CourseSummaryOut:
    return CourseSummaryOut(
        id=c.id,
        title=c.title,
        duration=c.duration,
        age_group=c.age_group,
        total_weeks=c.total_weeks,
        registration_open=c.registration_open,
    )


def _enrollment(e: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        id=e.id,
        course_id=e.course_id,
        status=e.status,
        enrolled_at=e.enrolled_at,
        started_at=e.started_at,
        completed_at=e.completed_at,
    )


def _progress(p: LessonProgress) -> LessonProgressOut:
    return LessonProgressOut(
        week_number=p.week_number,
        lesson_title=p.lesson_title,
        is_completed=p.is_completed,
        time_spent_minutes=p.time_spent_minutes or 0,
        notes=p.notes,
        completed_at=p.completed_at,
    )


@router.get("/dashboard", response_model=DashboardOut)
def my_dashboard(principal: Principal = Depends(require_user), db: Session = Depends(get_db)) -> DashboardOut:
    data = dashboard(db, principal.sub)
    return DashboardOut(
        enrolled=[
            EnrolledCourseOut(
                course=_course(item["course"]),
                enrollment=_enrollment(item["enrollment"]),
                completed_weeks=item["completed_weeks"],
                progress_percent=item["progress_percent"],
            )
            for item in data["enrolled"]
        ],
        available=[_course(c) for c in data["available"]],
        lessons_completed=data["lessons_completed"],
        total_minutes=data["total_minutes"],
    )


@router.get("/learn/{course_id}", response_model=LearnOut)
def learn(course_id: str, principal: Principal = Depends(require_user), db: Session = Depends(get_db)) -> LearnOut:
    course, enrollment, progress = learn_view(db, principal.sub, course_id)
    completed = sum(1 for p in progress if p.is_completed)
    return LearnOut(
        course=_course(course),
        curriculum=course.curriculum or [],
        enrollment=_enrollment(enrollment),
        progress=[_progress(p) for p in progress],
        completed_weeks=completed,
        progress_percent=progress_percent(completed, course.total_weeks),
    )


@router.put("/learn/{course_id}/weeks/{week}", response_model=WeekProgressOut)
def mark_week(
    course_id: str,
    payload: WeekProgressIn,
    week: int = Path(ge=1),
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
) -> WeekProgressOut:
    row, enrollment = update_week_progress(
        db,
        principal.sub,
        course_id,
        week,
        is_completed=payload.is_completed,
        time_spent_minutes=payload.time_spent_minutes,
        notes=payload.notes,
    )
    return WeekProgressOut(progress=_progress(row), enrollment=_enrollment(enrollment))
