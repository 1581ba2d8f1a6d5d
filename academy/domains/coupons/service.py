from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from academy.core.db import utcnow
from academy.core.errors import Conflict, CouponExhausted, CouponExpired, CouponNotApplicable, InvalidCoupon, NotFound
from academy.domains.coupons.models import CouponCode, DiscountType
from academy.domains.coupons.schemas import CouponIn, CouponUpdateIn

CENTS = Decimal("0.01")


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def validate_coupon(db: Session, code: str, course_id: str, now: datetime | None = None) -> CouponCode:
    """
    Checks run in a fixed order: unknown/inactive, course, usage cap, expiry.
    `valid_from` is not checked.
    """
    coupon = (
        db.query(CouponCode)
        .filter(CouponCode.code == normalize_code(code), CouponCode.is_active.is_(True))
        .one_or_none()
    )
    if coupon is None:
        raise InvalidCoupon()

    applicable = coupon.applicable_courses or []
    if applicable and course_id not in applicable:
        raise CouponNotApplicable()

    if coupon.max_uses and coupon.current_uses >= coupon.max_uses:
        raise CouponExhausted()

    now = now or utcnow()
    if coupon.valid_until is not None and coupon.valid_until < now:
        raise CouponExpired()

    return coupon


def calculate_discount(coupon: CouponCode | None, original_price: Decimal) -> Decimal:
    if coupon is None:
        return Decimal("0.00")
    price = Decimal(original_price)
    value = Decimal(coupon.discount_value)
    if coupon.discount_type == DiscountType.PERCENTAGE:
        discount = (price * value / Decimal(100)).quantize(CENTS, rounding=ROUND_HALF_UP)
    else:
        discount = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    return min(discount, price.quantize(CENTS, rounding=ROUND_HALF_UP))


def final_price(original_price: Decimal, discount: Decimal) -> Decimal:
    return max(Decimal(original_price) - discount, Decimal("0")).quantize(CENTS, rounding=ROUND_HALF_UP)


def redeem_coupon(db: Session, coupon: CouponCode) -> None:
    """
    Count one use. The cap is re-checked inside the UPDATE so concurrent
    redemptions cannot push `current_uses` past `max_uses`. Not committed here.
    """
    result = db.execute(
        update(CouponCode)
        .where(
            CouponCode.id == coupon.id,
            or_(CouponCode.max_uses.is_(None), CouponCode.current_uses < CouponCode.max_uses),
        )
        .values(current_uses=CouponCode.current_uses + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise CouponExhausted()


def list_coupons(db: Session) -> list[CouponCode]:
    return db.query(CouponCode).order_by(CouponCode.created_at.desc()).all()


def create_coupon(db: Session, payload: CouponIn) -> CouponCode:
    code = normalize_code(payload.code)
    if db.query(CouponCode).filter(CouponCode.code == code).one_or_none():
        raise Conflict(f"Coupon {code} already exists")
    coupon = CouponCode(
        code=code,
        discount_type=payload.discount_type,
        discount_value=payload.discount_value,
        max_uses=payload.max_uses,
        current_uses=0,
        valid_from=payload.valid_from or utcnow(),
        valid_until=payload.valid_until,
        is_active=payload.is_active,
        applicable_courses=list(dict.fromkeys(payload.applicable_courses)),
    )
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


def update_coupon(db: Session, coupon_id: str, payload: CouponUpdateIn) -> CouponCode:
    coupon = db.get(CouponCode, coupon_id)
    if coupon is None:
        raise NotFound("Coupon not found")
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(coupon, field, value)
    db.commit()
    db.refresh(coupon)
    return coupon
