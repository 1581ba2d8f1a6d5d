from sqlalchemy.orm import Session

from academy.core.db import utcnow
from academy.core.errors import Forbidden, NotFound, ValidationFailed
from academy.domains.courses.models import Course
from academy.domains.courses.service import get_course
from academy.domains.learning.models import LessonProgress
from academy.domains.registrations.models import Enrollment, EnrollmentStatus
from academy.domains.registrations.service import get_enrollment


def progress_percent(completed: int, total: int) -> int:
    """Whole percent, halves rounded up."""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


def user_progress(db: Session, user_id: str, course_id: str | None = None) -> list[LessonProgress]:
    q = db.query(LessonProgress).filter(LessonProgress.user_id == user_id)
    if course_id is not None:
        q = q.filter(LessonProgress.course_id == course_id)
    return q.order_by(LessonProgress.course_id.asc(), LessonProgress.week_number.asc()).all()


def dashboard(db: Session, user_id: str) -> dict:
    enrollments = (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc())
        .all()
    )
    courses = {c.id: c for c in db.query(Course).order_by(Course.created_at.asc()).all()}
    progress = user_progress(db, user_id)

    completed_by_course: dict[str, int] = {}
    for p in progress:
        if p.is_completed:
            completed_by_course[p.course_id] = completed_by_course.get(p.course_id, 0) + 1

    enrolled = []
    for e in enrollments:
        course = courses.get(e.course_id)
        if course is None:
            continue
        completed = completed_by_course.get(course.id, 0)
        enrolled.append(
            {
                "course": course,
                "enrollment": e,
                "completed_weeks": completed,
                "progress_percent": progress_percent(completed, course.total_weeks),
            }
        )

    enrolled_ids = {e.course_id for e in enrollments}
    return {
        "enrolled": enrolled,
        "available": [c for c in courses.values() if c.id not in enrolled_ids],
        "lessons_completed": sum(1 for p in progress if p.is_completed),
        "total_minutes": sum(p.time_spent_minutes or 0 for p in progress),
    }


def get_unlocked_enrollment(db: Session, user_id: str, course_id: str) -> Enrollment:
    enrollment = get_enrollment(db, user_id, course_id)
    if enrollment is None:
        raise NotFound("You are not enrolled in this course")
    if not enrollment.is_unlocked:
        raise Forbidden("Your payment is awaiting verification")
    return enrollment


def learn_view(db: Session, user_id: str, course_id: str) -> tuple[Course, Enrollment, list[LessonProgress]]:
    course = get_course(db, course_id)
    enrollment = get_unlocked_enrollment(db, user_id, course_id)
    return course, enrollment, user_progress(db, user_id, course_id)


def _week_title(course: Course, week: int) -> str | None:
    for item in course.curriculum or []:
        if item.get("week") == week:
            return item.get("title")
    return None


def update_week_progress(
    db: Session,
    user_id: str,
    course_id: str,
    week: int,
    *,
    is_completed: bool,
    time_spent_minutes: int | None = None,
    notes: str | None = None,
) -> tuple[LessonProgress, Enrollment]:
    course = get_course(db, course_id)
    enrollment = get_unlocked_enrollment(db, user_id, course_id)
    if week < 1 or week > course.total_weeks:
        raise ValidationFailed(f"Week must be between 1 and {course.total_weeks}")

    now = utcnow()
    row = (
        db.query(LessonProgress)
        .filter(
            LessonProgress.user_id == user_id,
            LessonProgress.course_id == course_id,
            LessonProgress.week_number == week,
        )
        .one_or_none()
    )
    if row is None:
        row = LessonProgress(user_id=user_id, course_id=course_id, week_number=week, time_spent_minutes=0)
        db.add(row)
    row.lesson_title = _week_title(course, week)
    row.is_completed = is_completed
    row.completed_at = now if is_completed else None
    if time_spent_minutes is not None:
        row.time_spent_minutes = time_spent_minutes
    if notes is not None:
        row.notes = notes or None
    row.updated_at = now
    db.flush()

    completed = (
        db.query(LessonProgress)
        .filter(
            LessonProgress.user_id == user_id,
            LessonProgress.course_id == course_id,
            LessonProgress.is_completed.is_(True),
        )
        .count()
    )
    if enrollment.started_at is None:
        enrollment.started_at = now
    if completed >= course.total_weeks:
        enrollment.status = EnrollmentStatus.COMPLETED
        enrollment.completed_at = enrollment.completed_at or now
    else:
        enrollment.status = EnrollmentStatus.IN_PROGRESS
        enrollment.completed_at = None

    db.commit()
    db.refresh(row)
    db.refresh(enrollment)
    return row, enrollment
