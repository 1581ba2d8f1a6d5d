from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from academy.domains.coupons.models import DiscountType


class CouponIn(BaseModel):
    code: str = Field(min_length=3, max_length=32)
    discount_type: DiscountType
    discount_value: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    max_uses: int | None = Field(default=None, ge=1)
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool = True
    applicable_courses: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_percentage(self) -> "CouponIn":
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CouponUpdateIn(BaseModel):
    is_active: bool | None = None
    max_uses: int | None = Field(default=None, ge=1)
    valid_until: datetime | None = None
    applicable_courses: list[str] | None = None

    @field_validator("is_active", "applicable_courses")
    @classmethod
    def _not_null(cls, value):
        # Omit the field to leave it unchanged.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class CouponOut(BaseModel):
    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_uses: int | None = None
    current_uses: int
    valid_from: datetime
    valid_until: datetime | None = None
    is_active: bool
    applicable_courses: list[str]


class CouponListOut(BaseModel):
    coupons: list[CouponOut]


class CouponValidationOut(BaseModel):
    coupon: CouponOut
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
