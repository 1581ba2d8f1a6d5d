import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Enum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from academy.core.db import Base, UTCDateTime, utcnow


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponCode(Base):
    __tablename__ = "coupon_codes"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String, unique=True, index=True)  # stored upper-case
    discount_type: Mapped[DiscountType] = mapped_column(
        Enum(DiscountType, values_callable=lambda e: [m.value for m in e])
    )
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_uses: Mapped[int] = mapped_column(Integer, default=0)

    valid_from: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    valid_until: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Empty list means the coupon applies to every course.
    applicable_courses: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
