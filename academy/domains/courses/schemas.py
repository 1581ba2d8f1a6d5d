from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class CurriculumWeek(BaseModel):
    week: int = Field(ge=1)
    title: str = ""
    topics: list[str] = Field(default_factory=list)


class ScheduleItem(BaseModel):
    day: str = ""
    time: str = ""
    topic: str = ""


class FAQItem(BaseModel):
    question: str = ""
    answer: str = ""


class CourseIn(BaseModel):
    id: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    duration: str = "8 Weeks"
    age_group: str = "16+ years"
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    start_date: date | None = None
    is_upcoming: bool = False
    registration_open: bool = True
    highlights: list[str] = Field(default_factory=list)
    curriculum: list[CurriculumWeek] = Field(default_factory=list)
    schedule: list[ScheduleItem] = Field(default_factory=list)
    faq: list[FAQItem] = Field(default_factory=list)
    card_image_url: str | None = None
    hero_image_url: str | None = None


class CourseOut(BaseModel):
    id: str
    title: str
    description: str
    price: Decimal
    duration: str
    age_group: str
    highlights: list[str]
    curriculum: list[CurriculumWeek]
    schedule: list[ScheduleItem]
    faq: list[FAQItem]
    start_date: date | None = None
    is_upcoming: bool
    registration_open: bool
    card_image_url: str | None = None
    hero_image_url: str | None = None
    registered_count: int = 0
    verified_count: int = 0


class CourseListOut(BaseModel):
    courses: list[CourseOut]


class UpcomingCourseOut(BaseModel):
    id: str
    title: str
    start_date: date | None = None


ContentSection = Literal["highlights", "curriculum", "topics", "schedule", "faq"]
ContentOp = Literal["add", "update", "remove", "move"]


class ContentEditIn(BaseModel):
    section: ContentSection
    op: ContentOp
    index: int | None = Field(default=None, ge=0)
    to_index: int | None = Field(default=None, ge=0)
    week_index: int | None = Field(default=None, ge=0)  # required for section "topics"
    item: str | dict | None = None


class RegistrationToggleOut(BaseModel):
    id: str
    registration_open: bool
