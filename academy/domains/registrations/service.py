"""
Course registration with a bank-transfer payment slip.

Every check that can fail for a user-facing reason runs before the slip is
uploaded. The registration row, the pending enrollment and the coupon
redemption commit together; if that transaction fails the uploaded slip is
removed again.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from academy.core.errors import (
    Conflict,
    CouponExhausted,
    NotFound,
    RegistrationFailed,
    StorageError,
    ValidationFailed,
)
from academy.domains.coupons.models import CouponCode
from academy.domains.coupons.service import calculate_discount, final_price, redeem_coupon, validate_coupon
from academy.domains.courses.models import Course
from academy.domains.notifications.service import EMAIL_RE, send_registration_email
from academy.domains.registrations.models import Enrollment, EnrollmentStatus, Registration
from academy.utils.storage import PAYMENT_SLIPS, ObjectStorage, build_object_key

logger = logging.getLogger(__name__)

SLIP_CONTENT_TYPES = ("application/pdf",)


@dataclass
class SlipUpload:
    filename: str | None
    content_type: str | None
    data: bytes


def _check_slip(slip: SlipUpload | None, max_bytes: int) -> SlipUpload:
    if slip is None or not slip.data:
        raise ValidationFailed("Please upload your payment slip")
    content_type = (slip.content_type or "").lower()
    if not (content_type.startswith("image/") or content_type in SLIP_CONTENT_TYPES):
        raise ValidationFailed("Payment slip must be an image or a PDF")
    if len(slip.data) > max_bytes:
        raise ValidationFailed(f"Payment slip must be smaller than {max_bytes // (1024 * 1024)}MB")
    return slip


def _check_contact(name: str, email: str, phone: str) -> None:
    if not (name and email and phone):
        raise ValidationFailed("Missing required fields")
    if not EMAIL_RE.match(email):
        raise ValidationFailed("Invalid email format")
    if len(name) > 100 or len(phone) > 20 or len(email) > 255:
        raise ValidationFailed("Input exceeds length limits")


def get_enrollment(db: Session, user_id: str, course_id: str) -> Enrollment | None:
    return (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
        .one_or_none()
    )


def submit_registration(
    db: Session,
    storage: ObjectStorage,
    *,
    user_id: str,
    course_id: str,
    name: str,
    email: str,
    phone: str,
    terms_accepted: bool,
    coupon_code: str | None,
    slip: SlipUpload | None,
    max_slip_bytes: int,
) -> tuple[Registration, Course, bool]:
    """Returns the registration, its course, and whether the confirmation email went out."""
    name, email, phone = name.strip(), email.strip(), phone.strip()
    coupon_code = (coupon_code or "").strip() or None

    if not terms_accepted:
        raise ValidationFailed("You must accept the terms and conditions")
    _check_contact(name, email, phone)
    slip = _check_slip(slip, max_slip_bytes)

    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Course not found")
    if not course.registration_open:
        raise ValidationFailed("Registration is currently closed for this course")
    if get_enrollment(db, user_id, course_id) is not None:
        raise Conflict("You are already registered for this course")

    coupon: CouponCode | None = validate_coupon(db, coupon_code, course_id) if coupon_code else None
    discount = calculate_discount(coupon, course.price)
    price = final_price(course.price, discount)

    key = build_object_key(user_id, slip.filename)
    try:
        storage.upload(PAYMENT_SLIPS, key, slip.data)
    except StorageError as e:
        raise StorageError("Failed to upload payment slip. Please try again.") from e

    registration = Registration(
        name=name,
        email=email,
        phone=phone,
        course=course_id,
        user_id=user_id,
        coupon_code=coupon.code if coupon else None,
        discount_amount=discount,
        final_price=price,
        terms_accepted=True,
        payment_slip_url=key,
        payment_verified=False,
    )
    try:
        db.add(registration)
        db.flush()
        db.add(
            Enrollment(
                user_id=user_id,
                course_id=course_id,
                registration_id=registration.id,
                status=EnrollmentStatus.PENDING,
            )
        )
        if coupon is not None:
            redeem_coupon(db, coupon)
        db.commit()
    except CouponExhausted:
        _rollback(db, storage, key)
        raise
    except IntegrityError as e:
        _rollback(db, storage, key)
        logger.warning("Duplicate registration user_id=%s course=%s: %s", user_id, course_id, e.orig)
        raise Conflict("You are already registered for this course")
    except SQLAlchemyError:
        _rollback(db, storage, key)
        logger.exception("Registration transaction failed user_id=%s course=%s", user_id, course_id)
        raise RegistrationFailed()

    db.refresh(registration)
    logger.info("Registration %s created user_id=%s course=%s final_price=%s", registration.id, user_id, course_id, price)

    try:
        email_sent = send_registration_email(db, name=name, email=email, phone=phone, course=course_id)
    except ValidationFailed as e:
        logger.warning("Confirmation email skipped for registration %s: %s", registration.id, e.message)
        email_sent = False

    return registration, course, email_sent


def _rollback(db: Session, storage: ObjectStorage, key: str) -> None:
    db.rollback()
    if not storage.delete(PAYMENT_SLIPS, key):
        logger.error("Orphaned payment slip could not be removed key=%s", key)


def list_user_registrations(db: Session, user_id: str) -> list[tuple[Registration, EnrollmentStatus | None]]:
    rows = (
        db.query(Registration, Enrollment.status)
        .outerjoin(Enrollment, Enrollment.registration_id == Registration.id)
        .filter(Registration.user_id == user_id)
        .order_by(Registration.created_at.desc())
        .all()
    )
    return [(reg, status) for reg, status in rows]
