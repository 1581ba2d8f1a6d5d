from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.deps import get_db, get_storage, require_admin
from academy.core.security import Principal
from academy.domains.admin.schemas import (
    AdminRegistrationListOut,
    AdminRegistrationOut,
    AdminUserListOut,
    AdminUserOut,
    CourseStatsOut,
    RoleIn,
    SlipUrlOut,
    StatsOut,
    VerifyPaymentIn,
    VerifyPaymentOut,
)
from academy.domains.admin.service import (
    course_stats,
    get_registration,
    list_registrations,
    slip_signed_url,
    verify_payment,
)
from academy.domains.courses.models import Course
from academy.domains.identity.service import get_profile, list_users, set_role
from academy.domains.notifications.service import dispatch_sms, payment_verified_message
from academy.domains.registrations.models import EnrollmentStatus, Registration
from academy.utils.phone import normalize_mobile
from academy.utils.storage import ObjectStorage


router = APIRouter(prefix="/admin")


def _registration_out(reg: Registration, course_title: str | None, st: EnrollmentStatus | None) -> AdminRegistrationOut:
    return AdminRegistrationOut(
        id=reg.id,
        name=reg.name,
        email=reg.email,
        phone=reg.phone,
        course=reg.course,
        coupon_code=reg.coupon_code,
        discount_amount=reg.discount_amount,
        final_price=reg.final_price,
        payment_verified=reg.payment_verified,
        enrollment_status=st,
        created_at=reg.created_at,
        user_id=reg.user_id,
        course_title=course_title,
        has_payment_slip=bool(reg.payment_slip_url),
    )


@router.get("/registrations", response_model=AdminRegistrationListOut)
def registrations(
    search: str | None = Query(default=None, max_length=100),
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminRegistrationListOut:
    rows = list_registrations(db, search=search)
    return AdminRegistrationListOut(registrations=[_registration_out(*row) for row in rows])


@router.get("/registrations/pending", response_model=AdminRegistrationListOut)
def pending_registrations(
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminRegistrationListOut:
    rows = list_registrations(db, pending_only=True)
    return AdminRegistrationListOut(registrations=[_registration_out(*row) for row in rows])


@router.post("/registrations/{registration_id}/verify", response_model=VerifyPaymentOut)
def verify(
    registration_id: str,
    payload: VerifyPaymentIn,
    tasks: BackgroundTasks,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> VerifyPaymentOut:
    reg, enrollment = verify_payment(db, registration_id, payload.verified)

    notified = False
    if payload.verified and payload.notify_user:
        course = db.get(Course, reg.course)
        mobile = normalize_mobile(reg.phone)
        if mobile:
            tasks.add_task(dispatch_sms, mobile, payment_verified_message(reg.name, course.title if course else reg.course))
            notified = True

    return VerifyPaymentOut(
        id=reg.id,
        payment_verified=reg.payment_verified,
        enrollment_status=enrollment.status if enrollment else None,
        user_notified=notified,
    )


@router.get("/registrations/{registration_id}/slip", response_model=SlipUrlOut)
def payment_slip(
    registration_id: str,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> SlipUrlOut:
    reg = get_registration(db, registration_id)
    ttl = settings.signed_url_ttl_seconds
    return SlipUrlOut(url=slip_signed_url(storage, reg, ttl), expires_in_seconds=ttl)


@router.get("/stats", response_model=StatsOut)
def stats(_admin: Principal = Depends(require_admin), db: Session = Depends(get_db)) -> StatsOut:
    rows = [CourseStatsOut(**row) for row in course_stats(db)]
    return StatsOut(
        courses=rows,
        total_registrations=sum(r.registrations for r in rows),
        total_verified=sum(r.verified for r in rows),
        total_revenue=sum((r.revenue for r in rows), Decimal("0.00")),
    )


@router.get("/users", response_model=AdminUserListOut)
def users(_admin: Principal = Depends(require_admin), db: Session = Depends(get_db)) -> AdminUserListOut:
    return AdminUserListOut(
        users=[
            AdminUserOut(
                id=p.id,
                email=p.email,
                display_name=p.display_name,
                mobile_number=p.mobile_number,
                role=role,
                created_at=p.created_at,
            )
            for p, role in list_users(db)
        ]
    )


@router.put("/users/{user_id}/role", response_model=AdminUserOut)
def change_role(
    user_id: str,
    payload: RoleIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminUserOut:
    row = set_role(db, user_id, payload.role)
    profile = get_profile(db, user_id)
    return AdminUserOut(
        id=profile.id,
        email=profile.email,
        display_name=profile.display_name,
        mobile_number=profile.mobile_number,
        role=row.role,
        created_at=profile.created_at,
    )
