import html
import logging
import re

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from academy.core.errors import ValidationFailed
from academy.domains.courses.models import Course
from academy.domains.payments.service import get_admin_mobile
from academy.utils.email import send_email
from academy.utils.sms import send_sms

logger = logging.getLogger(__name__)

NEW_REGISTRATION = "new_registration"
NEW_PAYMENT = "new_payment"

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REGISTRATION_SUBJECT = "Registration Confirmed - IO Builds Academy"


def admin_message(event: str, *, user_name: str, user_email: str, user_mobile: str, course_name: str | None = None) -> str:
    if event == NEW_REGISTRATION:
        return f"New User Registration!\nName: {user_name}\nEmail: {user_email}\nMobile: {user_mobile}"
    if event == NEW_PAYMENT:
        return (
            f"New Payment Submitted!\nName: {user_name}\nEmail: {user_email}\n"
            f"Mobile: {user_mobile}\nCourse: {course_name or 'N/A'}"
        )
    raise ValidationFailed("Invalid notification type")


def payment_verified_message(user_name: str, course_name: str) -> str:
    return (
        f'Hi {user_name}! Great news - your payment for "{course_name}" has been verified. '
        "You now have full access to your course. Start learning at IO Builds Academy!"
    )


def notify_admin(
    db: Session,
    event: str,
    *,
    user_name: str,
    user_email: str,
    user_mobile: str,
    course_name: str | None = None,
) -> tuple[bool, str]:
    """
    SMS the configured admin number about a new account or payment.
    A missing admin number is not a failure: nothing is sent.
    """
    message = admin_message(
        event, user_name=user_name, user_email=user_email, user_mobile=user_mobile, course_name=course_name
    )
    admin_mobile = get_admin_mobile(db)
    if not admin_mobile:
        logger.info("Admin notification %s skipped: admin mobile not configured", event)
        return True, "Admin mobile not configured"
    sent = send_sms(admin_mobile, message)
    return sent, "Notification sent" if sent else "Failed to send notification"


def dispatch_sms(recipient: str, message: str) -> None:
    """Background-task entry point; the request's DB session is gone by the time this runs."""
    if not send_sms(recipient, message):
        logger.warning("Background SMS to %s was not delivered", recipient)


def notify_user(*, user_name: str, user_mobile: str, course_name: str) -> bool:
    return send_sms(user_mobile, payment_verified_message(user_name, course_name))


def _registration_html(name: str, email: str, phone: str, course_name: str) -> str:
    safe_name = html.escape(name)
    safe_email = html.escape(email)
    safe_phone = html.escape(phone)
    safe_course = html.escape(course_name)
    return f"""<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1>Welcome to IO Builds Academy!</h1>
    <h2>Hello {safe_name}!</h2>
    <p>Thank you for registering with IO Builds Academy. We're excited to have you join us!</p>
    <p>
      <strong>Course:</strong> {safe_course}<br>
      <strong>Contact Email:</strong> {safe_email}<br>
      <strong>Phone:</strong> {safe_phone}
    </p>
    <p>Our team will review your payment slip and contact you shortly with the course start date,
    schedule and required materials.</p>
    <p>Best regards,<br><strong>The IO Builds Academy Team</strong></p>
    <p style="color: #6b7280; font-size: 14px;">IO Builds Academy | Building the Future, One Student at a Time</p>
  </div>
</body>
</html>
"""


def send_registration_email(db: Session, *, name: str, email: str, phone: str, course: str) -> bool:
    if not (name and email and phone and course):
        raise ValidationFailed("Missing required fields")
    if not EMAIL_RE.match(email):
        raise ValidationFailed("Invalid email format")
    course_row = db.get(Course, course)
    if course_row is None:
        raise ValidationFailed("Invalid course selection")
    if len(name) > 100 or len(phone) > 20 or len(email) > 255:
        raise ValidationFailed("Input exceeds length limits")

    logger.info("Sending registration confirmation course=%s", course)
    return send_email(
        to=email,
        subject=REGISTRATION_SUBJECT,
        html=_registration_html(name, email, phone, course_row.title),
    )


def schedule_admin_notification(
    tasks: BackgroundTasks,
    db: Session,
    event: str,
    *,
    user_name: str,
    user_email: str,
    user_mobile: str,
    course_name: str | None = None,
) -> bool:
    """Queue the admin SMS to go out after the response. False if no admin number is set."""
    message = admin_message(
        event, user_name=user_name, user_email=user_email, user_mobile=user_mobile, course_name=course_name
    )
    admin_mobile = get_admin_mobile(db)
    if not admin_mobile:
        logger.info("Admin notification %s skipped: admin mobile not configured", event)
        return False
    tasks.add_task(dispatch_sms, admin_mobile, message)
    return True
