from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from academy.core.deps import get_db, require_admin
from academy.core.security import Principal
from academy.domains.courses.models import Course
from academy.domains.courses.schemas import (
    ContentEditIn,
    CourseIn,
    CourseListOut,
    CourseOut,
    RegistrationToggleOut,
    UpcomingCourseOut,
)
from academy.domains.courses.service import (
    create_course,
    delete_course,
    edit_content,
    get_course_with_counts,
    get_upcoming_course,
    list_courses,
    toggle_registration,
    update_course,
)


router = APIRouter()


def course_out(course: Course, registered: int = 0, verified: int = 0) -> CourseOut:
    return CourseOut(
        id=course.id,
        title=course.title,
        description=course.description or "",
        price=course.price,
        duration=course.duration,
        age_group=course.age_group,
        highlights=course.highlights or [],
        curriculum=course.curriculum or [],
        schedule=course.schedule or [],
        faq=course.faq or [],
        start_date=course.start_date,
        is_upcoming=course.is_upcoming,
        registration_open=course.registration_open,
        card_image_url=course.card_image_url,
        hero_image_url=course.hero_image_url,
        registered_count=registered,
        verified_count=verified,
    )


@router.get("/courses", response_model=CourseListOut)
def catalog(db: Session = Depends(get_db)) -> CourseListOut:
    return CourseListOut(courses=[course_out(*row) for row in list_courses(db)])


@router.get("/courses/upcoming", response_model=UpcomingCourseOut | None)
def upcoming(db: Session = Depends(get_db)) -> UpcomingCourseOut | None:
    course = get_upcoming_course(db)
    if course is None:
        return None
    return UpcomingCourseOut(id=course.id, title=course.title, start_date=course.start_date)


@router.get("/courses/{course_id}", response_model=CourseOut)
def course_detail(course_id: str, db: Session = Depends(get_db)) -> CourseOut:
    return course_out(*get_course_with_counts(db, course_id))


@router.post("/admin/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def admin_create_course(
    payload: CourseIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> CourseOut:
    return course_out(create_course(db, payload))


@router.put("/admin/courses/{course_id}", response_model=CourseOut)
def admin_update_course(
    course_id: str,
    payload: CourseIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> CourseOut:
    update_course(db, course_id, payload)
    return course_out(*get_course_with_counts(db, course_id))


@router.patch("/admin/courses/{course_id}/content", response_model=CourseOut)
def admin_edit_content(
    course_id: str,
    payload: ContentEditIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> CourseOut:
    """Add, update, remove or move one entry of a course content list."""
    edit_content(db, course_id, **payload.model_dump())
    return course_out(*get_course_with_counts(db, course_id))


@router.post("/admin/courses/{course_id}/registration", response_model=RegistrationToggleOut)
def admin_toggle_registration(
    course_id: str,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> RegistrationToggleOut:
    course = toggle_registration(db, course_id)
    return RegistrationToggleOut(id=course.id, registration_open=course.registration_open)


@router.delete("/admin/courses/{course_id}")
def admin_delete_course(
    course_id: str,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    delete_course(db, course_id)
    return {"success": True}
