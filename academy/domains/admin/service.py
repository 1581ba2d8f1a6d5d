import logging
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.orm import Session

from academy.core.errors import NotFound
from academy.domains.courses.models import Course
from academy.domains.registrations.models import Enrollment, EnrollmentStatus, Registration
from academy.utils.storage import PAYMENT_SLIPS, ObjectStorage

logger = logging.getLogger(__name__)


def get_registration(db: Session, registration_id: str) -> Registration:
    reg = db.get(Registration, registration_id)
    if reg is None:
        raise NotFound("Registration not found")
    return reg


def list_registrations(
    db: Session, *, search: str | None = None, pending_only: bool = False
) -> list[tuple[Registration, str | None, EnrollmentStatus | None]]:
    """Newest first. `search` matches name, email, course id or course title."""
    q = (
        db.query(Registration, Course.title, Enrollment.status)
        .outerjoin(Course, Course.id == Registration.course)
        .outerjoin(Enrollment, Enrollment.registration_id == Registration.id)
    )
    if pending_only:
        q = q.filter(Registration.payment_verified.is_(False))
    term = (search or "").strip()
    if term:
        like = f"%{term}%"
        q = q.filter(
            or_(
                Registration.name.ilike(like),
                Registration.email.ilike(like),
                Registration.course.ilike(like),
                Course.title.ilike(like),
            )
        )
    return q.order_by(Registration.created_at.desc()).all()


def verify_payment(db: Session, registration_id: str, verified: bool) -> tuple[Registration, Enrollment | None]:
    reg = get_registration(db, registration_id)
    reg.payment_verified = verified

    enrollment = db.query(Enrollment).filter(Enrollment.registration_id == reg.id).one_or_none()
    if enrollment is not None:
        enrollment.status = EnrollmentStatus.ENROLLED if verified else EnrollmentStatus.PENDING
    else:
        logger.warning("Registration %s has no linked enrollment", reg.id)

    db.commit()
    db.refresh(reg)
    logger.info("Payment %s for registration %s", "verified" if verified else "unverified", reg.id)
    return reg, enrollment


def slip_signed_url(storage: ObjectStorage, reg: Registration, expires_in: int) -> str:
    if not reg.payment_slip_url:
        raise NotFound("No payment slip for this registration")
    if not storage.exists(PAYMENT_SLIPS, reg.payment_slip_url):
        raise NotFound("Payment slip file not found")
    return storage.create_signed_url(PAYMENT_SLIPS, reg.payment_slip_url, expires_in)


def course_stats(db: Session) -> list[dict]:
    courses = db.query(Course).order_by(Course.created_at.asc()).all()
    stats = {
        c.id: {
            "course_id": c.id,
            "title": c.title,
            "registrations": 0,
            "verified": 0,
            "revenue": Decimal("0.00"),
            "registration_open": c.registration_open,
        }
        for c in courses
    }
    prices = {c.id: Decimal(c.price or 0) for c in courses}

    for reg in db.query(Registration).all():
        row = stats.get(reg.course)
        if row is None:
            continue
        row["registrations"] += 1
        if reg.payment_verified:
            row["verified"] += 1
            paid = reg.final_price if reg.final_price is not None else prices[reg.course]
            row["revenue"] += Decimal(paid)
    return list(stats.values())
