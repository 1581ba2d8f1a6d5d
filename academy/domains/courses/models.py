from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from academy.core.db import Base, UTCDateTime, utcnow


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # slug, e.g. "iot-robotics"
    title: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    duration: Mapped[str] = mapped_column(String, default="8 Weeks")
    age_group: Mapped[str] = mapped_column(String, default="16+ years")

    # Ordered sub-records stored as JSON lists
    highlights: Mapped[list] = mapped_column(JSON, default=list)
    curriculum: Mapped[list] = mapped_column(JSON, default=list)  # [{week, title, topics}]
    schedule: Mapped[list] = mapped_column(JSON, default=list)  # [{day, time, topic}]
    faq: Mapped[list] = mapped_column(JSON, default=list)  # [{question, answer}]

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_upcoming: Mapped[bool] = mapped_column(Boolean, default=False)
    registration_open: Mapped[bool] = mapped_column(Boolean, default=True)

    card_image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    hero_image_url: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    @property
    def total_weeks(self) -> int:
        return len(self.curriculum or [])
