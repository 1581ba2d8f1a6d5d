import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Enum, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from academy.core.db import Base, UTCDateTime, utcnow


class EnrollmentStatus(str, enum.Enum):
    PENDING = "pending"
    ENROLLED = "enrolled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Registration(Base):
    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String)
    phone: Mapped[str] = mapped_column(String)
    course: Mapped[str] = mapped_column(String, ForeignKey("courses.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str | None] = mapped_column(String, ForeignKey("profiles.id", ondelete="SET NULL"), index=True, nullable=True)

    coupon_code: Mapped[str | None] = mapped_column(String, nullable=True)
    discount_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    final_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    terms_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    payment_slip_url: Mapped[str | None] = mapped_column(String, nullable=True)  # object key in payment_slips
    payment_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    course_id: Mapped[str] = mapped_column(String, ForeignKey("courses.id", ondelete="CASCADE"), index=True)
    registration_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("registrations.id", ondelete="SET NULL"), index=True, nullable=True
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(EnrollmentStatus, values_callable=lambda e: [m.value for m in e]), default=EnrollmentStatus.PENDING
    )

    enrolled_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    started_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    @property
    def is_unlocked(self) -> bool:
        return self.status != EnrollmentStatus.PENDING
