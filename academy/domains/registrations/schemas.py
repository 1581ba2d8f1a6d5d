from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from academy.domains.registrations.models import EnrollmentStatus


class RegistrationOut(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    course: str
    coupon_code: str | None = None
    discount_amount: Decimal | None = None
    final_price: Decimal | None = None
    payment_verified: bool
    enrollment_status: EnrollmentStatus | None = None
    created_at: datetime


class RegistrationSubmitOut(BaseModel):
    success: bool = True
    message: str
    email_sent: bool
    registration: RegistrationOut


class RegistrationListOut(BaseModel):
    registrations: list[RegistrationOut]
