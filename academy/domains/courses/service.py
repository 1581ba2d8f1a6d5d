from sqlalchemy import case, func
from sqlalchemy.orm import Session

from academy.core.db import utcnow
from academy.core.errors import Conflict, NotFound
from academy.domains.courses.builder import apply_edit, clean_content
from academy.domains.courses.models import Course
from academy.domains.courses.schemas import CourseIn
from academy.domains.registrations.models import Registration


def get_course(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Course not found")
    return course


def registration_counts(db: Session, course_id: str | None = None) -> dict[str, tuple[int, int]]:
    """course id -> (registered, verified)"""
    q = db.query(
        Registration.course,
        func.count(Registration.id),
        func.sum(case((Registration.payment_verified.is_(True), 1), else_=0)),
    )
    if course_id is not None:
        q = q.filter(Registration.course == course_id)
    rows = q.group_by(Registration.course).all()
    return {course: (int(registered or 0), int(verified or 0)) for course, registered, verified in rows}


def list_courses(db: Session) -> list[tuple[Course, int, int]]:
    counts = registration_counts(db)
    courses = db.query(Course).order_by(Course.created_at.asc()).all()
    return [(c, *counts.get(c.id, (0, 0))) for c in courses]


def get_course_with_counts(db: Session, course_id: str) -> tuple[Course, int, int]:
    course = get_course(db, course_id)
    registered, verified = registration_counts(db, course_id).get(course_id, (0, 0))
    return course, registered, verified


def get_upcoming_course(db: Session) -> Course | None:
    return (
        db.query(Course)
        .filter(Course.is_upcoming.is_(True))
        .order_by(Course.start_date.asc())
        .first()
    )


def _apply_fields(course: Course, payload: CourseIn) -> None:
    content = clean_content(
        highlights=payload.highlights,
        curriculum=[w.model_dump() for w in payload.curriculum],
        schedule=[s.model_dump() for s in payload.schedule],
        faq=[f.model_dump() for f in payload.faq],
    )
    course.title = payload.title.strip()
    course.description = payload.description
    course.duration = payload.duration
    course.age_group = payload.age_group
    course.price = payload.price
    course.start_date = payload.start_date
    course.is_upcoming = payload.is_upcoming
    course.registration_open = payload.registration_open
    course.card_image_url = payload.card_image_url
    course.hero_image_url = payload.hero_image_url
    course.highlights = content["highlights"]
    course.curriculum = content["curriculum"]
    course.schedule = content["schedule"]
    course.faq = content["faq"]
    course.updated_at = utcnow()


def create_course(db: Session, payload: CourseIn) -> Course:
    if db.get(Course, payload.id) is not None:
        raise Conflict(f"A course with id '{payload.id}' already exists")
    course = Course(id=payload.id)
    _apply_fields(course, payload)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def update_course(db: Session, course_id: str, payload: CourseIn) -> Course:
    course = get_course(db, course_id)
    if payload.id != course_id:
        raise Conflict("Course id cannot be changed")
    _apply_fields(course, payload)
    db.commit()
    db.refresh(course)
    return course


def delete_course(db: Session, course_id: str) -> None:
    course = get_course(db, course_id)
    if db.query(Registration).filter(Registration.course == course_id).count():
        raise Conflict("Course has registrations; close registration instead of deleting it")
    db.delete(course)
    db.commit()


def toggle_registration(db: Session, course_id: str) -> Course:
    course = get_course(db, course_id)
    course.registration_open = not course.registration_open
    course.updated_at = utcnow()
    db.commit()
    db.refresh(course)
    return course


def edit_content(db: Session, course_id: str, **edit) -> Course:
    course = get_course(db, course_id)
    content = {
        "highlights": list(course.highlights or []),
        "curriculum": list(course.curriculum or []),
        "schedule": list(course.schedule or []),
        "faq": list(course.faq or []),
    }
    edited = apply_edit(content, **edit)
    # Same rules as a full save: blank entries are dropped.
    cleaned = clean_content(**edited)
    course.highlights = cleaned["highlights"]
    course.curriculum = cleaned["curriculum"]
    course.schedule = cleaned["schedule"]
    course.faq = cleaned["faq"]
    course.updated_at = utcnow()
    db.commit()
    db.refresh(course)
    return course
