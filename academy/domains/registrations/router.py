from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.deps import get_db, get_storage, require_user
from academy.core.security import Principal
from academy.domains.notifications.service import NEW_PAYMENT, schedule_admin_notification
from academy.domains.registrations.models import EnrollmentStatus, Registration
from academy.domains.registrations.schemas import RegistrationListOut, RegistrationOut, RegistrationSubmitOut
from academy.domains.registrations.service import SlipUpload, list_user_registrations, submit_registration
from academy.utils.storage import ObjectStorage


router = APIRouter(prefix="/registrations")


def registration_out(reg: Registration, enrollment_status: EnrollmentStatus | None = None) -> RegistrationOut:
    return RegistrationOut(
        id=reg.id,
        name=reg.name,
        email=reg.email,
        phone=reg.phone,
        course=reg.course,
        coupon_code=reg.coupon_code,
        discount_amount=reg.discount_amount,
        final_price=reg.final_price,
        payment_verified=reg.payment_verified,
        enrollment_status=enrollment_status,
        created_at=reg.created_at,
    )


@router.post("", response_model=RegistrationSubmitOut, status_code=status.HTTP_201_CREATED)
def register(
    tasks: BackgroundTasks,
    course_id: str = Form(...),
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    terms_accepted: bool = Form(False),
    coupon_code: str | None = Form(None),
    payment_slip: UploadFile | None = File(None),
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> RegistrationSubmitOut:
    slip = None
    if payment_slip is not None:
        slip = SlipUpload(
            filename=payment_slip.filename,
            content_type=payment_slip.content_type,
            data=payment_slip.file.read(),
        )

    registration, course, email_sent = submit_registration(
        db,
        storage,
        user_id=principal.sub,
        course_id=course_id,
        name=name,
        email=email,
        phone=phone,
        terms_accepted=terms_accepted,
        coupon_code=coupon_code,
        slip=slip,
        max_slip_bytes=settings.payment_slip_max_bytes,
    )
    schedule_admin_notification(
        tasks,
        db,
        NEW_PAYMENT,
        user_name=registration.name,
        user_email=registration.email,
        user_mobile=registration.phone,
        course_name=course.title,
    )

    if email_sent:
        message = "Registration successful! Check your email for confirmation."
    else:
        message = "Registration successful! We'll verify your payment shortly."
    return RegistrationSubmitOut(
        message=message,
        email_sent=email_sent,
        registration=registration_out(registration, EnrollmentStatus.PENDING),
    )


@router.get("/mine", response_model=RegistrationListOut)
def my_registrations(principal: Principal = Depends(require_user), db: Session = Depends(get_db)) -> RegistrationListOut:
    return RegistrationListOut(
        registrations=[registration_out(reg, st) for reg, st in list_user_registrations(db, principal.sub)]
    )
