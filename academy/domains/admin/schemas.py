from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from academy.domains.identity.models import AppRole
from academy.domains.registrations.models import EnrollmentStatus
from academy.domains.registrations.schemas import RegistrationOut


class AdminRegistrationOut(RegistrationOut):
    user_id: str | None = None
    course_title: str | None = None
    has_payment_slip: bool = False


class AdminRegistrationListOut(BaseModel):
    registrations: list[AdminRegistrationOut]


class VerifyPaymentIn(BaseModel):
    verified: bool
    notify_user: bool = False


class VerifyPaymentOut(BaseModel):
    id: str
    payment_verified: bool
    enrollment_status: EnrollmentStatus | None = None
    user_notified: bool = False


class SlipUrlOut(BaseModel):
    url: str
    expires_in_seconds: int


class CourseStatsOut(BaseModel):
    course_id: str
    title: str
    registrations: int
    verified: int
    revenue: Decimal
    registration_open: bool


class StatsOut(BaseModel):
    courses: list[CourseStatsOut]
    total_registrations: int
    total_verified: int
    total_revenue: Decimal


class AdminUserOut(BaseModel):
    id: str
    email: str
    display_name: str | None = None
    mobile_number: str | None = None
    role: AppRole
    created_at: datetime


class AdminUserListOut(BaseModel):
    users: list[AdminUserOut]


class RoleIn(BaseModel):
    role: AppRole
