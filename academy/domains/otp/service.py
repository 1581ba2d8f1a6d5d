import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.db import utcnow
from academy.core.errors import OtpMismatch, OtpNotFound, OtpSendError
from academy.core.security import generate_otp, hash_otp, verify_otp_hash
from academy.domains.otp.models import OtpCode, OtpPurpose
from academy.utils.sms import send_sms

logger = logging.getLogger(__name__)


def otp_message(purpose: OtpPurpose, otp: str) -> str:
    minutes = settings.otp_ttl_seconds // 60
    if purpose == OtpPurpose.PASSWORD_RESET:
        return f"Your IO Builds Academy password reset OTP is: {otp}. Valid for {minutes} minutes."
    return f"Your IO Builds Academy verification OTP is: {otp}. Valid for {minutes} minutes."


def send_otp(db: Session, mobile: str, purpose: OtpPurpose) -> tuple[OtpCode, str]:
    otp = generate_otp()
    record = OtpCode(
        mobile_number=mobile,
        code_hash=hash_otp(mobile, otp),
        purpose=purpose,
        expires_at=utcnow() + timedelta(seconds=settings.otp_ttl_seconds),
        verified=False,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    if settings.otp_dev_mode:
        logger.info("OTP dev mode: not sending SMS to %s", mobile)
        return record, otp

    # The stored code stays valid even when delivery fails; the client may retry verification.
    if not send_sms(mobile, otp_message(purpose, otp)):
        raise OtpSendError()

    return record, otp


def _latest(db: Session, mobile: str, purpose: OtpPurpose, *, verified: bool, now: datetime) -> OtpCode | None:
    return (
        db.query(OtpCode)
        .filter(
            OtpCode.mobile_number == mobile,
            OtpCode.purpose == purpose,
            OtpCode.verified.is_(verified),
            OtpCode.expires_at > now,
        )
        .order_by(OtpCode.created_at.desc())
        .first()
    )


def verify_otp(db: Session, mobile: str, otp: str, purpose: OtpPurpose, now: datetime | None = None) -> OtpCode:
    record = _latest(db, mobile, purpose, verified=False, now=now or utcnow())
    if record is None:
        raise OtpNotFound()
    if not verify_otp_hash(mobile, otp, record.code_hash):
        raise OtpMismatch()

    record.verified = True
    db.commit()
    db.refresh(record)
    return record


def find_verified_otp(db: Session, mobile: str, purpose: OtpPurpose, now: datetime | None = None) -> OtpCode | None:
    return _latest(db, mobile, purpose, verified=True, now=now or utcnow())


def consume_otp(db: Session, record: OtpCode) -> None:
    # Committed by the caller together with the change the OTP authorised.
    db.delete(record)
