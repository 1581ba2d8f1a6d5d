from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.deps import get_db
from academy.domains.otp.schemas import OtpSendIn, OtpSendOut, OtpVerifyIn, OtpVerifyOut
from academy.domains.otp.service import send_otp, verify_otp
from academy.utils.phone import normalize_mobile


router = APIRouter(prefix="/otp")


@router.post("/send", response_model=OtpSendOut)
def otp_send(payload: OtpSendIn, db: Session = Depends(get_db)) -> OtpSendOut:
    _record, otp = send_otp(db, normalize_mobile(payload.mobile_number), payload.purpose)
    return OtpSendOut(
        expires_in_seconds=settings.otp_ttl_seconds,
        dev_otp=otp if settings.otp_dev_mode else None,
    )


@router.post("/verify", response_model=OtpVerifyOut)
def otp_verify(payload: OtpVerifyIn, db: Session = Depends(get_db)) -> OtpVerifyOut:
    verify_otp(db, normalize_mobile(payload.mobile_number), payload.otp.strip(), payload.purpose)
    return OtpVerifyOut()
