from typing import Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from academy.core.deps import get_db, require_user
from academy.core.security import Principal
from academy.domains.notifications.schemas import AdminNotifyIn, NotificationOut, RegistrationEmailIn, UserNotifyIn
from academy.domains.notifications.service import notify_admin, notify_user, send_registration_email
from academy.utils.phone import normalize_mobile


router = APIRouter(prefix="/notifications")


def _parse(model: type[BaseModel], body: dict) -> BaseModel:
    # The body shape depends on `action`, so it is validated here rather than by FastAPI.
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.post("/sms", response_model=NotificationOut)
def sms(
    action: Literal["notify_admin", "notify_user"] = Query(...),
    body: dict = Body(...),
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
) -> NotificationOut:
    if action == "notify_admin":
        payload = _parse(AdminNotifyIn, body)
        sent, message = notify_admin(
            db,
            payload.type,
            user_name=payload.user_name,
            user_email=payload.user_email,
            user_mobile=payload.user_mobile,
            course_name=payload.course_name,
        )
        return NotificationOut(success=sent, message=message)

    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    payload = _parse(UserNotifyIn, body)
    sent = notify_user(
        user_name=payload.user_name,
        user_mobile=normalize_mobile(payload.user_mobile),
        course_name=payload.course_name,
    )
    return NotificationOut(success=sent, message="User notified" if sent else "Failed to notify user")


@router.post("/registration-email", response_model=NotificationOut)
def registration_email(
    payload: RegistrationEmailIn,
    _principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
) -> NotificationOut:
    sent = send_registration_email(
        db,
        name=payload.name.strip(),
        email=payload.email.strip(),
        phone=payload.phone.strip(),
        course=payload.course.strip(),
    )
    return NotificationOut(success=sent)
